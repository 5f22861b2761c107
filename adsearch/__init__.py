#!/usr/bin/env python3
import sys
import logging
import traceback

from ldap3.core.exceptions import LDAPException

from adsearch.adsearch import DirectorySearch
from adsearch.lib.errors import ADSearchError
from adsearch.utils.formatter import FORMATTER
from adsearch.utils.logging import LOG
from adsearch.utils.parsers import arg_parse
from adsearch.utils.helpers import sanitize_component

def run(args, searcher, formatter):
	"""Execute one command. Returns the process exit code."""
	module = args.module.casefold()
	if module == 'search':
		entries = searcher.query_ldap(args.filter, args.properties or None, args.scope, args.search_base)
		if args.count:
			formatter.count(entries)
		else:
			formatter.print_entries(entries)
	elif module == 'ranged':
		values = searcher.retrieve_ranged_attribute(args.dn, args.attribute)
		if values is None:
			logging.error(f"Attribute {args.attribute} is unavailable on {args.dn}")
			return 1
		if args.count:
			formatter.count(values)
		else:
			formatter.print_values(values)
	elif module == 'guid':
		rows = [[guid, searcher.get_name_from_guid(guid) or ''] for guid in args.guids]
		formatter.print_table(rows, ['GUID', 'Name'])
		if any(not name for _, name in rows):
			return 1
	return 0

def main():
	"""
	Main entry point for adsearch.

	Parses the command line, sets up logging, locates the domain and runs
	the requested command.
	"""
	args = arg_parse()

	folder_name = sanitize_component((args.domain or 'current-domain').lower()) or "default-log"
	log_handler = LOG(folder_name)
	if args.debug:
		log_handler.setup_logger("DEBUG")
	else:
		log_handler.setup_logger()

	try:
		searcher = DirectorySearch(
			domain=args.domain,
			domain_controller=args.domain_controller,
			nameserver=args.nameserver,
			use_system_ns=args.use_system_ns
		)
		sys.exit(run(args, searcher, FORMATTER(args)))
	except KeyboardInterrupt:
		logging.info("Interrupted")
		sys.exit(130)
	except (ADSearchError, LDAPException, OSError) as e:
		if args.stack_trace:
			raise e
		logging.error(f"{type(e).__name__}: {str(e)}")
		logging.debug(traceback.format_exc())
		sys.exit(1)
