#!/usr/bin/env python3
import logging

from ldap3 import SUBTREE, BASE, ALL_ATTRIBUTES
from ldap3.core.exceptions import LDAPException
from ldap3.utils.ciDict import CaseInsensitiveDict

from adsearch.lib.controls import (
	LDAP_PAGED_RESULT_OID,
	search_options_control,
	sd_flags_control,
	paged_control,
	get_response_control,
	get_paged_cookie,
	control_oid
)
from adsearch.lib.errors import PagingNotSupportedError
from adsearch.utils.constants import DEFAULT_PAGE_SIZE, DEFAULT_SD_FLAGS

class SearchResultEntry:
	"""A directory object returned by a search: its DN and raw attribute values."""

	def __init__(self, dn, attributes=None):
		self.dn = dn
		self.attributes = CaseInsensitiveDict()
		for name, values in (attributes or {}).items():
			if not isinstance(values, list):
				values = [values]
			self.attributes[name] = values

	@classmethod
	def from_response(cls, response_entry):
		return cls(response_entry.get('dn'), response_entry.get('raw_attributes'))

	@property
	def distinguished_name(self):
		return self.dn

	@property
	def attribute_names(self):
		return list(self.attributes.keys())

	def get_property_as_bytes(self, name):
		values = self.attributes.get(name)
		if not values:
			return None
		return _to_bytes(values[0])

	def get_property(self, name):
		value = self.get_property_as_bytes(name)
		if value is None:
			return None
		return value.decode('utf-8', errors='replace')

	def get_values(self, name):
		return [_to_bytes(v).decode('utf-8', errors='replace') for v in self.attributes.get(name) or []]

	def __repr__(self):
		return f"<SearchResultEntry {self.dn}>"

def _to_bytes(value):
	if isinstance(value, (bytes, bytearray)):
		return bytes(value)
	return str(value).encode('utf-8')

class SearchResponse:
	def __init__(self, entries, controls):
		self.entries = entries
		self.controls = controls

class SearchRequest:
	"""
	A search request that can be sent several times over one connection.

	Every request carries the domain scope search option so the server
	never generates referrals to other domains.
	"""

	def __init__(self, search_base, search_filter, search_scope=SUBTREE, attributes=None):
		self.search_base = search_base
		self.search_filter = search_filter
		self.search_scope = search_scope
		self.attributes = list(attributes) if attributes else [ALL_ATTRIBUTES]
		self.controls = [search_options_control()]

	def add_control(self, control):
		self.controls.append(control)

	def replace_control(self, control):
		oid = control_oid(control)
		self.controls = [c for c in self.controls if control_oid(c) != oid] + [control]

	def set_attributes(self, attributes):
		self.attributes = list(attributes)

	def send(self, ldap_session):
		ldap_session.search(
			self.search_base,
			self.search_filter,
			search_scope=self.search_scope,
			attributes=self.attributes,
			controls=self.controls
		)
		entries = [
			SearchResultEntry.from_response(response_entry)
			for response_entry in (ldap_session.response or [])
			if response_entry.get('type') == 'searchResEntry'
		]
		controls = (ldap_session.result or {}).get('controls') or {}
		return SearchResponse(entries, controls)

def paged_search_generator(conn_factory,
						   search_base,
						   search_filter,
						   attributes=None,
						   search_scope=SUBTREE,
						   paged_size=DEFAULT_PAGE_SIZE,
						   sdflags=DEFAULT_SD_FLAGS,
						   server=None,
						   strict=False):
	"""
	Yield every entry matching ``search_filter`` under ``search_base``.

	The search is drained page by page with the paged results control,
	holding a single connection for the whole enumeration. The generator
	stops when the server sends an empty cookie. If the server answers
	without exactly one paged results control the search ends with a
	diagnostic. A transport error is logged and ends the sequence.

	With ``strict`` set, transport errors are re-raised and a server without
	paging raises PagingNotSupportedError instead of ending quietly.
	"""
	try:
		with conn_factory.open(server) as ldap_session:
			request = SearchRequest(search_base, search_filter, search_scope, attributes)
			request.add_control(paged_control(paged_size))
			request.add_control(sd_flags_control(sdflags=sdflags))

			while True:
				response = request.send(ldap_session)

				page_control = get_response_control(response.controls, LDAP_PAGED_RESULT_OID)
				if page_control is None:
					if strict:
						raise PagingNotSupportedError(search_base)
					logging.warning("Server does not support paging")
					return

				for entry in response.entries:
					yield entry

				cookie = get_paged_cookie(page_control)
				if not cookie:
					break

				request.replace_control(paged_control(paged_size, cookie))
	except (LDAPException, OSError) as e:
		if strict:
			raise
		logging.error("Unexpected exception occured: %s: %s" % (type(e).__name__, str(e)))

def base_search(ldap_session, search_base, search_filter, attributes=None, controls=None):
	request = SearchRequest(search_base, search_filter, BASE, attributes)
	for control in controls or []:
		request.add_control(control)
	return request, request.send(ldap_session)
