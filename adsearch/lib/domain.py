#!/usr/bin/env python3
import logging

import ldap3
from ldap3.core.exceptions import LDAPException

from adsearch.utils.helpers import (
	domain2dn,
	dn2domain,
	get_system_domain,
	get_principal_dc_address
)
from adsearch.utils.constants import LDAP_PORT, LDAP_TIMEOUT

class Domain:
	"""What the search engine needs to know about a domain."""

	def __init__(self, name, domain_controller=None, default_naming_context=None, schema_naming_context=None):
		self.name = name.lower()
		self.domain_controller = domain_controller
		self.default_naming_context = default_naming_context or domain2dn(self.name)
		self.schema_naming_context = schema_naming_context or f"CN=Schema,CN=Configuration,{domain2dn(self.name)}"

	def __repr__(self):
		return f"<Domain {self.name} dc={self.domain_controller}>"

def read_rootdse(host):
	"""
	Anonymously read the naming contexts from the RootDSE of ``host``.

	Returns a dictionary with whatever was found. Reading the RootDSE needs
	no credentials on Active Directory.
	"""
	naming_contexts = {}
	server = ldap3.Server(host, port=LDAP_PORT, get_info=ldap3.DSA, connect_timeout=LDAP_TIMEOUT)
	connection = ldap3.Connection(server, read_only=True, receive_timeout=LDAP_TIMEOUT)
	try:
		if not connection.bind():
			logging.debug(f"[Domain] Anonymous bind to {host} failed: {connection.result}")
			return naming_contexts
		other = server.info.other if server.info else {}
		for attribute in ('defaultNamingContext', 'schemaNamingContext', 'rootDomainNamingContext'):
			value = other.get(attribute)
			if value:
				naming_contexts[attribute] = value[0]
	finally:
		connection.unbind()
	return naming_contexts

def get_domain(domain=None, domain_controller=None, nameserver=None, use_system_ns=True):
	"""
	Resolve ``domain`` (or the current domain) to a :class:`Domain`.

	Returns None when the domain cannot be determined.
	"""
	if not domain:
		domain = get_system_domain(nameserver)
		if not domain:
			logging.error("[Domain] Could not determine the current domain")
			return None

	domain = domain.lower()
	dc = domain_controller or get_principal_dc_address(domain, nameserver=nameserver, use_system_ns=use_system_ns)
	if not dc:
		logging.debug(f"[Domain] No domain controller found for {domain}, letting the locator use the domain name")

	naming_contexts = {}
	try:
		naming_contexts = read_rootdse(dc or domain)
	except LDAPException as e:
		logging.warning(f"[Domain] Cannot read RootDSE of {dc or domain}: {str(e)}")
	except OSError as e:
		logging.warning(f"[Domain] Cannot read RootDSE of {dc or domain}: {str(e)}")

	if not dc and not naming_contexts:
		logging.error(f"[Domain] Domain {domain} could not be located")
		return None

	default_nc = naming_contexts.get('defaultNamingContext')
	if default_nc and dn2domain(default_nc) != domain:
		logging.debug(f"[Domain] {dc or domain} serves {dn2domain(default_nc)}, not {domain}")
		default_nc = None

	schema_nc = naming_contexts.get('schemaNamingContext')
	if not schema_nc:
		logging.warning(f"[Domain] Schema naming context unknown, assuming CN=Schema,CN=Configuration,{domain2dn(domain)} (wrong for a child domain)")

	return Domain(
		domain,
		domain_controller=dc,
		default_naming_context=default_nc,
		schema_naming_context=schema_nc
	)
