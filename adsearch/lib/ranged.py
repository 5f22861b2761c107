#!/usr/bin/env python3
"""
Reconstruction of large multi-valued attributes.

Active Directory caps the number of values it returns for one attribute
(MaxValRange). Two ways around the cap are tried in order:

- an attribute scoped query (ASQ), where the server enumerates the objects
  a linked attribute points to and returns them as search entries;
- ranged retrieval, where the attribute is requested as
  ``member;range=<low>-<high>`` window after window until the server
  answers with a final ``*`` window.
"""
import re
import logging

from ldap3 import NO_ATTRIBUTES
from ldap3.core.exceptions import (
	LDAPException,
	LDAPUnavailableCriticalExtensionResult
)

from adsearch.lib.controls import (
	asq_control,
	decode_asq_response,
	asq_result_description,
	get_response_control
)
from adsearch.lib.errors import ADSearchError, ControlNotSupportedError, RangeRetrievalError
from adsearch.lib.search import base_search
from adsearch.utils.constants import (
	LDAP_SERVER_ASQ_OID,
	RANGE_OPTION,
	RANGE_UNBOUNDED
)

RANGE_RE = re.compile(r'^(?P<attribute>[^;]+);(?:.*;)?range=(?P<low>\d+)-(?P<high>\d+|\*)$', re.IGNORECASE)

class RangeWindow:
	"""A slice of a multi-valued attribute; ``high`` is None when unbounded."""

	def __init__(self, low, high=None):
		self.low = low
		self.high = high

	@property
	def final(self):
		return self.high is None

	def attribute_name(self, attribute):
		high = RANGE_UNBOUNDED if self.high is None else self.high
		return f"{attribute};{RANGE_OPTION}={self.low}-{high}"

	@classmethod
	def parse(cls, echoed):
		"""Parse ``attr;range=low-high`` into a window, or return None."""
		match = RANGE_RE.match(echoed)
		if not match:
			return None
		high = match.group('high')
		return cls(int(match.group('low')), None if high == RANGE_UNBOUNDED else int(high))

	def __eq__(self, other):
		return isinstance(other, RangeWindow) and (self.low, self.high) == (other.low, other.high)

	def __repr__(self):
		return f"RangeWindow({self.low}, {self.high})"

class RangeState:
	"""Position of a ranged retrieval between two round trips."""

	def __init__(self, index=0, step=0, final=False):
		self.index = index
		self.step = step
		self.final = final

	def advance(self, count, final):
		return RangeState(self.index + count, count, final)

	def next_window(self):
		return RangeWindow(self.index, self.index + self.step)

def _echoed_window(attribute, echoed):
	if echoed.lower() == attribute.lower():
		# the server sent every value without a range option
		return RangeWindow(0)
	window = RangeWindow.parse(echoed)
	if window is None:
		raise RangeRetrievalError(attribute, echoed)
	if not window.final and window.high < window.low:
		raise RangeRetrievalError(attribute, echoed)
	return window

def _find_echoed_attribute(entry, attribute):
	prefix = attribute.lower()
	for name in entry.attribute_names:
		lowered = name.lower()
		if lowered == prefix or lowered.startswith(prefix + ';'):
			return name
	return None

def primed(generator):
	"""
	Run ``generator`` up to its first value and return an iterator that
	resumes it.

	Errors raised before the first value reach the caller here instead of
	during iteration. Closing the returned iterator closes ``generator``.
	"""
	try:
		first = next(generator)
	except StopIteration:
		return iter(())

	def resume():
		try:
			yield first
			yield from generator
		finally:
			generator.close()
	return resume()

def attempt_in_order(*attempts):
	"""
	Return the result of the first attempt that does not fail.

	Each attempt is a callable. An attempt that raises
	ControlNotSupportedError, another ADSearchError or a transport error is
	skipped. Any other exception is a bug and propagates. None is
	returned when every attempt failed.
	"""
	for attempt in attempts:
		name = getattr(attempt, '__name__', repr(attempt))
		try:
			return attempt()
		except ControlNotSupportedError as e:
			logging.debug(f"[RangedAttribute] {name}: {str(e)}")
		except (LDAPException, OSError, ADSearchError) as e:
			logging.debug(f"[RangedAttribute] {name} failed: {type(e).__name__}: {str(e)}")
	return None

class RangedAttribute:
	def __init__(self, conn_factory, server=None):
		self.conn_factory = conn_factory
		self.server = server

	def retrieve(self, distinguished_name, attribute):
		"""
		Return an iterator over every value of ``attribute`` on
		``distinguished_name``, or None if no value could be obtained.

		None means the attribute is unavailable, not that it is empty.
		"""
		def attribute_scoped_query():
			return primed(self.asq_generator(distinguished_name, attribute))

		def ranged_retrieval():
			return primed(self.range_generator(distinguished_name, attribute, lenient=True))

		return attempt_in_order(attribute_scoped_query, ranged_retrieval)

	def asq_generator(self, distinguished_name, attribute):
		"""Yield the DN of every object ``attribute`` links to, using ASQ."""
		with self.conn_factory.open(self.server) as ldap_session:
			try:
				_, response = base_search(
					ldap_session,
					distinguished_name,
					'(objectClass=*)',
					attributes=[NO_ATTRIBUTES],
					controls=[asq_control(attribute)]
				)
			except LDAPUnavailableCriticalExtensionResult as e:
				raise ControlNotSupportedError(LDAP_SERVER_ASQ_OID, str(e))

			asq_response = get_response_control(response.controls, LDAP_SERVER_ASQ_OID)
			if asq_response is None:
				raise ControlNotSupportedError(LDAP_SERVER_ASQ_OID)

			code = decode_asq_response(asq_response.get('value'))
			if code:
				raise ControlNotSupportedError(
					LDAP_SERVER_ASQ_OID,
					f"ASQ on {distinguished_name} returned {asq_result_description(code)}"
				)

			for entry in response.entries:
				yield entry.dn

	def range_generator(self, distinguished_name, attribute, lenient=False):
		"""
		Yield the values of ``attribute`` window by window.

		The server echoes the window it actually returned, which tells us
		how many values it sends per round and whether this was the last
		one. With ``lenient`` set, a transport error after the first window
		ends the sequence instead of being raised. The same goes for a
		protocol error such as an unexpected echoed window.
		"""
		state = RangeState()
		with self.conn_factory.open(self.server) as ldap_session:
			request = None
			while not state.final:
				try:
					if request is None:
						request, response = base_search(
							ldap_session,
							distinguished_name,
							f"({attribute}=*)",
							attributes=[RangeWindow(0).attribute_name(attribute)]
						)
					else:
						request.set_attributes([state.next_window().attribute_name(attribute)])
						response = request.send(ldap_session)

					if len(response.entries) != 1:
						return

					entry = response.entries[0]
					echoed = _find_echoed_attribute(entry, attribute)
					if echoed is None:
						return

					window = _echoed_window(attribute, echoed)
					if window.low != state.index:
						# the server did not continue where we asked
						raise RangeRetrievalError(attribute, echoed)
					values = entry.get_values(echoed)
					if not values and not window.final:
						raise RangeRetrievalError(attribute, echoed)
				except (LDAPException, OSError, RangeRetrievalError) as e:
					if not lenient or state.index == 0:
						raise
					logging.error(f"[RangedAttribute] Range retrieval of {attribute} on {distinguished_name} stopped at {state.index}: {str(e)}")
					return

				logging.debug(f"[RangedAttribute] {echoed}: {len(values)} values")
				for value in values:
					yield value

				state = state.advance(len(values), window.final)
