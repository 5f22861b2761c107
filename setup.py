import re
from setuptools import setup

# adsearch/__init__.py imports ldap3, which is not installed yet at build time
with open("adsearch/_version.py") as f:
	__version__ = re.search(r"__version__ = ['\"]([^'\"]+)['\"]", f.read()).group(1)

setup(
	name='adsearch',
	version=__version__,
	description='Paged Active Directory searches and ranged attribute retrieval over signed and sealed LDAP',
	long_description=open('README.md').read(),
	long_description_content_type='text/markdown',
	packages=[
		'adsearch',
		'adsearch.utils',
		'adsearch.lib'
	],
	license='MIT',
	python_requires='>=3.8',
	install_requires=[
		'impacket',
		'ldap3-custom-requirements[kerberos]',
		'dnspython',
		'pyasn1',
		'validators',
		'tabulate',
	],
	extras_require={
		'test': ['pytest'],
	},
	classifiers=[
		'Intended Audience :: Information Technology',
		'Intended Audience :: System Administrators',
		'License :: OSI Approved :: MIT License',
		'Programming Language :: Python :: 3',
		'Topic :: System :: Systems Administration :: Authentication/Directory :: LDAP',
	],
	entry_points= {
		'console_scripts': ['adsearch=adsearch:main']
	}
)
