#!/usr/bin/env python3
import logging
from contextlib import contextmanager

import ldap3
from ldap3.core.exceptions import LDAPBindError, LDAPException

from adsearch.lib.errors import SessionSecurityError
from adsearch.utils.constants import (
	LDAP_PORT,
	LDAP_TIMEOUT,
	LDAP_PROTOCOL_VERSION
)

class CONNECTION:
	"""
	Opens hardened LDAP connections to a domain controller.

	Every connection signs and seals its traffic, speaks LDAP version 3,
	never chases referrals and gives up after LDAP_TIMEOUT seconds. The
	bind uses the ambient Kerberos identity (credential cache) through
	SASL GSS-API. Nothing here retries: a failed open is raised to the
	caller.
	"""

	def __init__(self, domain, domain_controller=None, port=LDAP_PORT):
		self.domain = domain
		self.domain_controller = domain_controller
		self.port = port

		self.sign_and_seal_supported = False
		# the stock ldap3 release cannot sign and seal, the fork we depend on can
		try:
			if ldap3.SIGN and ldap3.ENCRYPT:
				self.sign_and_seal_supported = True
				logging.debug('LDAP sign and seal are supported')
		except AttributeError:
			logging.debug('LDAP sign and seal are not supported by the installed ldap3')

	def get_target(self, server=None):
		return server or self.domain_controller or self.domain

	def init_ldap_connection(self, target):
		if not self.sign_and_seal_supported:
			raise SessionSecurityError("Refusing to open an LDAP connection without sign and seal")

		ldap_server_kwargs = {
			"host": target,
			"port": self.port,
			"use_ssl": False,
			"get_info": ldap3.NONE,
			"connect_timeout": LDAP_TIMEOUT,
		}
		ldap_connection_kwargs = {
			"version": LDAP_PROTOCOL_VERSION,
			"authentication": ldap3.SASL,
			"sasl_mechanism": ldap3.KERBEROS,
			"session_security": ldap3.ENCRYPT,
			"auto_referrals": False,
			"auto_range": False,
			"read_only": True,
			"raise_exceptions": True,
			"receive_timeout": LDAP_TIMEOUT,
		}

		logging.debug("Connecting to %s, Port: %s, Sign and seal: True" % (target, self.port))
		ldap_server = ldap3.Server(**ldap_server_kwargs)
		ldap_session = ldap3.Connection(ldap_server, **ldap_connection_kwargs)
		if not ldap_session.bind():
			raise LDAPBindError(f"Bind to {target} not successful: {ldap_session.result}")
		logging.debug("Bind SUCCESS!")
		return ldap_session

	@contextmanager
	def open(self, server=None):
		"""
		Yield a bound connection to ``server``, the configured domain
		controller, or the domain name, in that order of preference.

		The connection is unbound when the ``with`` block exits, including
		when a generator holding it is closed early.
		"""
		ldap_session = self.init_ldap_connection(self.get_target(server))
		try:
			yield ldap_session
		finally:
			close_connection(ldap_session)

def close_connection(ldap_session):
	try:
		if ldap_session.bound:
			ldap_session.unbind()
	except LDAPException as e:
		logging.debug(f"Error closing connection: {str(e)}")
