import base64

from ldap3.protocol.formatters.formatters import format_sid
from impacket.uuid import bin_to_string

GUID_ATTRIBUTES = (
	'objectGUID',
	'schemaIDGUID',
	'attributeSecurityGUID',
	'rightsGuid',
)

SID_ATTRIBUTES = (
	'objectSid',
	'securityIdentifier',
	'sIDHistory',
	'mS-DS-CreatorSID',
)

class LDAP:
	@staticmethod
	def bin_to_guid(guid):
		return bin_to_string(guid).lower()

	@staticmethod
	def normalize_guid(guid):
		return str(guid).strip().strip('{}').lower()

	@staticmethod
	def bin_to_sid(sid):
		return format_sid(sid)

	@staticmethod
	def resolve_value(attribute, value):
		"""Render one raw attribute value for display."""
		if any(attribute.lower() == a.lower() for a in GUID_ATTRIBUTES) and len(value) == 16:
			return "{%s}" % LDAP.bin_to_guid(value)
		if any(attribute.lower() == a.lower() for a in SID_ATTRIBUTES):
			return LDAP.bin_to_sid(value)
		try:
			return value.decode('utf-8')
		except UnicodeDecodeError:
			return base64.b64encode(value).decode()
