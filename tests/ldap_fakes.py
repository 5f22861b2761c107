#!/usr/bin/env python3
"""
Stand-ins for ldap3 connections.

FakeLDAPSession plays back a script of server answers, one per search
call, and records what was sent. FakeConnectionFactory hands out sessions
the way CONNECTION.open() does and counts opens and closes.
"""
from contextlib import contextmanager

from pyasn1.codec.ber import decoder
from ldap3.protocol.rfc2696 import RealSearchControlValue

from adsearch.lib.controls import control_oid
from adsearch.utils.constants import LDAP_PAGED_RESULT_OID, LDAP_SERVER_ASQ_OID

# BER for ASQResponseValue ::= SEQUENCE { searchResult ENUMERATED (0) }
ASQ_SUCCESS = b'\x30\x03\x0a\x01\x00'
ASQ_INVALID_SYNTAX = b'\x30\x03\x0a\x01\x15'

def entry(dn, attributes=None):
    raw_attributes = {}
    for name, values in (attributes or {}).items():
        if not isinstance(values, list):
            values = [values]
        raw_attributes[name] = [v if isinstance(v, bytes) else str(v).encode() for v in values]
    return {'type': 'searchResEntry', 'dn': dn, 'raw_attributes': raw_attributes, 'attributes': {}}

def page_controls(cookie=b''):
    return {LDAP_PAGED_RESULT_OID: {'description': 'LDAP Simple Paged Results', 'criticality': False, 'value': {'size': 0, 'cookie': cookie}}}

def asq_controls(value=ASQ_SUCCESS):
    return {LDAP_SERVER_ASQ_OID: {'description': '', 'criticality': False, 'value': value}}

class Answer:
    def __init__(self, entries=None, controls=None):
        self.entries = entries or []
        self.controls = controls or {}

class FakeLDAPSession:
    def __init__(self, answers):
        self.answers = list(answers)
        self.calls = []
        self.response = None
        self.result = None
        self.bound = True
        self.unbind_count = 0

    def search(self, search_base, search_filter, search_scope=None, attributes=None, controls=None, **kwargs):
        self.calls.append({
            'search_base': search_base,
            'search_filter': search_filter,
            'search_scope': search_scope,
            'attributes': list(attributes) if attributes else attributes,
            'controls': list(controls or []),
        })
        if not self.answers:
            raise AssertionError("unexpected search call")
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        self.response = list(answer.entries)
        self.result = {'result': 0, 'description': 'success', 'controls': dict(answer.controls)}
        return bool(answer.entries)

    def unbind(self):
        self.bound = False
        self.unbind_count += 1

    def sent_control(self, call_index, oid):
        for control in self.calls[call_index]['controls']:
            if control_oid(control) == oid:
                return control
        return None

    def sent_cookie(self, call_index):
        control = self.sent_control(call_index, LDAP_PAGED_RESULT_OID)
        value, _ = decoder.decode(bytes(control['controlValue']), asn1Spec=RealSearchControlValue())
        return bytes(value['cookie'])

class FakeConnectionFactory:
    def __init__(self, *sessions, open_error=None):
        self.sessions = list(sessions)
        self.opened = []
        self.closed = 0
        self.servers = []
        self.open_error = open_error

    @contextmanager
    def open(self, server=None):
        self.servers.append(server)
        if self.open_error is not None:
            raise self.open_error
        session = self.sessions.pop(0)
        self.opened.append(session)
        try:
            yield session
        finally:
            self.closed += 1
            session.unbind()

    @property
    def open_count(self):
        return len(self.opened)
