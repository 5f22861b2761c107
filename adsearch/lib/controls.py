#!/usr/bin/env python3
"""
Request/response controls used by the search engine.

ldap3 ships the paged results and SD flags controls. The attribute scoped
query and search options controls are built here the same way ldap3 builds
its Microsoft controls.
"""
import logging

from pyasn1.codec.ber import decoder
from pyasn1.type.namedtype import NamedTypes, NamedType
from pyasn1.type.univ import Sequence, Integer, OctetString, Enumerated
from pyasn1.error import PyAsn1Error

from ldap3.protocol.controls import build_control
from ldap3.protocol.rfc2696 import paged_search_control
from ldap3.protocol.microsoft import security_descriptor_control

from adsearch.utils.constants import (
	LDAP_PAGED_RESULT_OID,
	LDAP_SERVER_SEARCH_OPTIONS_OID,
	LDAP_SERVER_ASQ_OID,
	SERVER_SEARCH_FLAG_DOMAIN_SCOPE,
	DEFAULT_SD_FLAGS,
	ASQ_RESULT_CODES
)

class SearchOptionsRequestValue(Sequence):
	# SearchOptionsRequestValue ::= SEQUENCE {
	#     Flags    INTEGER
	# }
	componentType = NamedTypes(NamedType('Flags', Integer()))

class AsqRequestValue(Sequence):
	# ASQRequestValue ::= SEQUENCE {
	#     sourceAttribute    OCTET STRING
	# }
	componentType = NamedTypes(NamedType('sourceAttribute', OctetString()))

class AsqResponseValue(Sequence):
	# ASQResponseValue ::= SEQUENCE {
	#     searchResult    ENUMERATED
	# }
	componentType = NamedTypes(NamedType('searchResult', Enumerated()))

def search_options_control(criticality=False, flags=SERVER_SEARCH_FLAG_DOMAIN_SCOPE):
	control_value = SearchOptionsRequestValue()
	control_value.setComponentByName('Flags', flags)
	return build_control(LDAP_SERVER_SEARCH_OPTIONS_OID, criticality, control_value)

def asq_control(source_attribute, criticality=True):
	control_value = AsqRequestValue()
	control_value.setComponentByName('sourceAttribute', source_attribute)
	return build_control(LDAP_SERVER_ASQ_OID, criticality, control_value)

def sd_flags_control(criticality=False, sdflags=DEFAULT_SD_FLAGS):
	# ldap3 returns a one element list
	return security_descriptor_control(criticality=criticality, sdflags=sdflags)[0]

def paged_control(size, cookie=None, criticality=False):
	return paged_search_control(criticality=criticality, size=size, cookie=cookie)

def decode_asq_response(value):
	"""Return the ASQ searchResult code, or None when the value cannot be read."""
	if isinstance(value, int):
		return value
	try:
		decoded, _ = decoder.decode(bytes(value), asn1Spec=AsqResponseValue())
		return int(decoded['searchResult'])
	except (PyAsn1Error, TypeError) as e:
		logging.debug(f"[Controls] Cannot decode ASQ response value: {str(e)}")
		return None

def asq_result_description(code):
	return ASQ_RESULT_CODES.get(code, str(code))

def get_response_control(controls, oid):
	"""
	Return the single response control of type ``oid``.

	``controls`` is the ``controls`` dictionary ldap3 puts in
	``connection.result``. Returns None unless it holds exactly one control
	and that control is ``oid``.
	"""
	if not controls or len(controls) != 1:
		return None
	return controls.get(oid)

def get_paged_cookie(control):
	value = control.get('value') or {}
	return value.get('cookie') or b''

def control_oid(control):
	if isinstance(control, (tuple, list)):
		return str(control[0])
	return str(control['controlType'])
