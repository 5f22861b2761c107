#!/usr/bin/env python3

# Paged results (RFC 2696)
LDAP_PAGED_RESULT_OID = '1.2.840.113556.1.4.319'
# LDAP_SERVER_SD_FLAGS_OID
LDAP_SERVER_SD_FLAGS_OID = '1.2.840.113556.1.4.801'
# LDAP_SERVER_SEARCH_OPTIONS_OID
LDAP_SERVER_SEARCH_OPTIONS_OID = '1.2.840.113556.1.4.1340'
# LDAP_SERVER_ASQ_OID, request and response share the same OID
LDAP_SERVER_ASQ_OID = '1.2.840.113556.1.4.1504'

SERVER_SEARCH_FLAG_DOMAIN_SCOPE = 0x1

# SECURITY_INFORMATION bits accepted by the SD flags control
OWNER_SECURITY_INFORMATION = 0x01
DACL_SECURITY_INFORMATION = 0x04

DEFAULT_SD_FLAGS = OWNER_SECURITY_INFORMATION | DACL_SECURITY_INFORMATION

# ASQ searchResult codes
ASQ_RESULT_CODES = {
	0: 'success',
	21: 'invalidAttributeSyntax',
	53: 'unwillingToPerform',
	71: 'affectsMultipleDSAs',
}

LDAP_PROTOCOL_VERSION = 3
LDAP_PORT = 389
LDAP_TIMEOUT = 300
DEFAULT_PAGE_SIZE = 500

RANGE_OPTION = 'range'
RANGE_UNBOUNDED = '*'

SCHEMA_GUID_FILTER = '(schemaIDGUID=*)'
SCHEMA_GUID_ATTRIBUTES = ['schemaIDGUID', 'name']

SCOPES = {
	'base': 'BASE',
	'level': 'LEVEL',
	'onelevel': 'LEVEL',
	'subtree': 'SUBTREE',
}

TABLE_FMT_MAP = {
	"md": "github",
	"simple": "simple",
	"grid": "grid",
	"plain": "plain",
	"csv": "csv",
}
