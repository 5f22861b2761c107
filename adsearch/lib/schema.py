#!/usr/bin/env python3
import logging
from types import MappingProxyType

from ldap3 import SUBTREE

from adsearch.lib.errors import DuplicateSchemaGuidError
from adsearch.lib.resolver import LDAP
from adsearch.utils.constants import SCHEMA_GUID_FILTER, SCHEMA_GUID_ATTRIBUTES

class SchemaGuidMap:
	"""
	Maps schemaIDGUID values to the name of the attribute or class they
	identify.

	The map is filled once, when the object is created, by a single paged
	search over the schema partition and is read-only afterwards. If that
	search cannot run, or two schema objects claim the same GUID, the
	constructor raises; there is no half-built map.
	"""

	def __init__(self, search, schema_path):
		self.schema_path = schema_path
		guid_map = {}
		for entry in search(SCHEMA_GUID_FILTER, SCHEMA_GUID_ATTRIBUTES, SUBTREE, schema_path):
			raw_guid = entry.get_property_as_bytes('schemaIDGUID')
			name = entry.get_property('name')
			if raw_guid is None or name is None:
				logging.debug(f"[SchemaGuidMap] Skipping {entry.dn}, missing schemaIDGUID or name")
				continue
			guid = LDAP.bin_to_guid(raw_guid)
			if guid in guid_map:
				raise DuplicateSchemaGuidError(guid, [guid_map[guid], name])
			guid_map[guid] = name

		self._guid_map = MappingProxyType(guid_map)
		logging.debug(f"[SchemaGuidMap] Loaded {len(guid_map)} schema GUIDs from {schema_path}")

	@property
	def guid_map(self):
		return self._guid_map

	def resolve(self, guid):
		"""Return the schema name for ``guid``, or None."""
		if not guid:
			return None
		return self._guid_map.get(LDAP.normalize_guid(guid))

	def __contains__(self, guid):
		return self.resolve(guid) is not None

	def __len__(self):
		return len(self._guid_map)
