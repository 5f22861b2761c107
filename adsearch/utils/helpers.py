import re
import socket
import logging

import dns.resolver
import dns.exception
import validators
from dns import resolver

def sanitize_component(component):
	return re.sub(r'[<>:"/\\|?*]', '', component) if component else None

def domain2dn(domain):
	return ','.join(f"DC={label}" for label in str(domain).strip('.').split('.') if label)

def dn2domain(value):
	return '.'.join(re.findall(r'DC=([\w-]+)', value, re.IGNORECASE)).lower()

def is_valid_fqdn(hostname: str) -> bool:
	if not hostname:
		return False
	return bool(validators.domain(hostname))

def get_resolver(nameserver=None, use_system_ns=True, dns_timeout=3):
	if nameserver:
		logging.debug(f"Using DNS server {nameserver}")
		dnsresolver = resolver.Resolver(configure=False)
		dnsresolver.nameservers = [nameserver]
	elif use_system_ns:
		dnsresolver = resolver.Resolver()
	else:
		return None
	dnsresolver.lifetime = float(dns_timeout)
	return dnsresolver

def get_system_domain(nameserver=None):
	"""Domain of the host we are running on, or None."""
	try:
		dnsresolver = resolver.get_default_resolver()
		if dnsresolver.domain and len(dnsresolver.domain) > 1:
			domain = dnsresolver.domain.to_text(omit_final_dot=True)
			if is_valid_fqdn(domain):
				logging.debug(f"Found domain {domain} from system resolver")
				return domain.lower()
		for search in dnsresolver.search:
			domain = search.to_text(omit_final_dot=True)
			if is_valid_fqdn(domain):
				logging.debug(f"Found domain {domain} from resolver search list")
				return domain.lower()
	except dns.exception.DNSException as e:
		logging.debug(f"System resolver unavailable: {str(e)}")
	except OSError as e:
		logging.debug(f"System resolver unavailable: {str(e)}")

	fqdn = socket.getfqdn()
	if '.' in fqdn:
		domain = fqdn.split('.', 1)[1]
		if is_valid_fqdn(domain):
			logging.debug(f"Found domain {domain} from host name {fqdn}")
			return domain.lower()
	return None

def get_principal_dc_address(domain, nameserver=None, dns_tcp=True, use_system_ns=True):
	"""
	Locate a domain controller for ``domain`` through DNS SRV records.

	The PDC emulator record is tried first, then any DC. Returns the host
	name of the DC, or None if no record could be found.
	"""
	domain = str(domain)
	dnsresolver = get_resolver(nameserver, use_system_ns)
	if dnsresolver is None:
		logging.debug(f"No resolver configured, using domain '{domain}' as is")
		return None

	basequery = f'_ldap._tcp.pdc._msdcs.{domain}'
	for query in (basequery, basequery.replace('pdc', 'dc')):
		try:
			q = dnsresolver.resolve(query, 'SRV', tcp=dns_tcp)
			records = sorted(q, key=lambda r: (r.priority, -r.weight))
			for r in records:
				dc = str(r.target).rstrip('.')
				logging.debug(f"Found domain controller {dc} from {query}")
				return dc.lower()
		except resolver.NXDOMAIN:
			logging.debug(f"No {query} record")
		except resolver.NoAnswer as e:
			logging.debug(str(e))
		except resolver.NoNameservers as e:
			logging.debug(str(e))
		except dns.exception.Timeout:
			logging.debug("Domain resolution timed out")
	return None
