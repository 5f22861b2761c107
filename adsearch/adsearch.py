#!/usr/bin/env python3
import logging

from ldap3 import SUBTREE

from adsearch.lib.domain import get_domain
from adsearch.lib.errors import DomainNotFoundError
from adsearch.lib.search import paged_search_generator
from adsearch.lib.ranged import RangedAttribute
from adsearch.lib.schema import SchemaGuidMap
from adsearch.utils.connections import CONNECTION
from adsearch.utils.helpers import domain2dn

class DirectorySearch:
	"""
	Searches one Active Directory domain.

	On construction the domain is located and the schema GUID map is built.
	Both steps raise on failure: a DirectorySearch that exists is usable.
	"""

	def __init__(self, domain=None, domain_controller=None, nameserver=None, use_system_ns=True, locate=get_domain, conn_factory=None):
		self._domain = locate(domain, domain_controller=domain_controller, nameserver=nameserver, use_system_ns=use_system_ns)
		if self._domain is None:
			raise DomainNotFoundError(domain)

		self.domain = self._domain.name
		self.domain_controller = domain_controller
		self.conn = conn_factory or CONNECTION(self.domain, self.domain_controller or self._domain.domain_controller)
		self.ranged_attribute = RangedAttribute(self.conn)

		logging.debug(f"Using domain {self.domain} (schema: {self._domain.schema_naming_context})")
		self.schema = SchemaGuidMap(self._query_ldap_strict, self._domain.schema_naming_context)

	def get_domain(self):
		return self._domain

	def get_search_base(self, ads_path=None):
		return ads_path or domain2dn(self.domain)

	def query_ldap(self, ldap_filter, props, scope=SUBTREE, ads_path=None, server=None):
		"""
		Run a paged search and yield SearchResultEntry objects lazily.

		The search base defaults to the domain root. Errors end the sequence
		and are logged; an empty sequence is a valid result.
		"""
		return paged_search_generator(
			self.conn,
			self.get_search_base(ads_path),
			ldap_filter,
			attributes=props,
			search_scope=scope,
			server=server
		)

	def _query_ldap_strict(self, ldap_filter, props, scope=SUBTREE, ads_path=None):
		return paged_search_generator(
			self.conn,
			self.get_search_base(ads_path),
			ldap_filter,
			attributes=props,
			search_scope=scope,
			strict=True
		)

	def retrieve_ranged_attribute(self, distinguished_name, attribute):
		"""
		Return an iterator over every value of ``attribute`` or None when
		the attribute could not be retrieved at all.
		"""
		return self.ranged_attribute.retrieve(distinguished_name, attribute)

	def get_name_from_guid(self, guid):
		return self.schema.resolve(guid)
