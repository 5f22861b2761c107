#!/usr/bin/env python3

class ADSearchError(Exception):
	"""Base class for errors raised by adsearch."""

class DomainNotFoundError(ADSearchError):
	def __init__(self, domain=None):
		self.domain = domain
		if domain:
			message = f"Could not locate domain {domain}"
		else:
			message = "Could not determine the current domain"
		super().__init__(message)

class SessionSecurityError(ADSearchError):
	"""The installed ldap3 cannot sign and seal LDAP traffic."""

class PagingNotSupportedError(ADSearchError):
	def __init__(self, search_base=None):
		self.search_base = search_base
		super().__init__(f"Server does not support paging (base: {search_base})")

class ControlNotSupportedError(ADSearchError):
	def __init__(self, oid, message=None):
		self.oid = oid
		super().__init__(message or f"Control {oid} is not supported by the server")

class RangeRetrievalError(ADSearchError):
	def __init__(self, attribute, echoed=None):
		self.attribute = attribute
		self.echoed = echoed
		super().__init__(f"Server echoed an unexpected range for {attribute}: {echoed}")

class DuplicateSchemaGuidError(ADSearchError):
	def __init__(self, guid, names):
		self.guid = guid
		self.names = names
		super().__init__(f"schemaIDGUID {guid} is claimed by {', '.join(names)}")
