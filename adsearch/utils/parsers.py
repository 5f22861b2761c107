import argparse
import sys

from adsearch.utils.colors import bcolors
from adsearch.utils.constants import SCOPES, TABLE_FMT_MAP
from adsearch._version import BANNER, __version__

class ADSearchParser(argparse.ArgumentParser):
	def error(self, message):
		print(message)
		sys.exit(2)

class Helper:
	def parse_properties(value):
		"""Parse the properties argument into a list."""
		if not value:
			return []
		return [prop.strip() for prop in value.strip().split(',') if prop.strip()]

	def parse_scope(value):
		scope = SCOPES.get(value.lower())
		if not scope:
			raise argparse.ArgumentTypeError(f"invalid scope {value}, choose from {', '.join(SCOPES)}")
		return scope

def arg_parse(argv=None):
	parser = ADSearchParser(description=f"Paged Active Directory searches over signed and sealed LDAP, version {bcolors.OKBLUE + __version__ + bcolors.ENDC}")
	parser.add_argument('-d', '--domain', dest='domain', action='store', help='Domain to search. (Default: domain of this host)')
	parser.add_argument('--dc-ip', '--domain-controller', dest='domain_controller', action='store', metavar='HOST', help='Domain controller to connect to. If omitted it is located through DNS')
	parser.add_argument('--debug', dest='debug', action='store_true', help='Enable debug output')
	parser.add_argument('--stack-trace', dest='stack_trace', action='store_true', help='raise exceptions and exit if unhandled errors')
	parser.add_argument('-o', '--outfile', dest='outfile', action='store', help='Append output to this file')
	parser.add_argument('--tableview', dest='tableview', action='store', default='simple', choices=list(TABLE_FMT_MAP), help='Table format. (Default: simple)')
	parser.add_argument('-v', '--version', dest='version', action='version', version=BANNER)

	ns_group_parser = parser.add_mutually_exclusive_group()
	ns_group_parser.add_argument('--use-system-nameserver', action='store_true', default=True, dest='use_system_ns', help='Use system nameserver to locate the domain controller (Default)')
	ns_group_parser.add_argument('-ns', '--nameserver', dest='nameserver', action='store', help='Specify custom nameserver')

	subparsers = parser.add_subparsers(dest='module', metavar='command')
	subparsers.required = True

	search = subparsers.add_parser('search', help='Run a paged LDAP search')
	search.add_argument('filter', action='store', metavar='filter', help='LDAP filter, e.g. "(objectClass=user)"')
	search.add_argument('-p', '--properties', dest='properties', type=Helper.parse_properties, default=[], help='Comma separated attributes to return (Default: all)')
	search.add_argument('-s', '--scope', dest='scope', type=Helper.parse_scope, default='SUBTREE', help='base, level or subtree. (Default: subtree)')
	search.add_argument('-b', '--search-base', dest='search_base', action='store', help='Search base DN. (Default: domain root)')
	search.add_argument('--count', dest='count', action='store_true', help='Print the number of entries only')

	ranged = subparsers.add_parser('ranged', help='Retrieve every value of a large multi-valued attribute')
	ranged.add_argument('dn', action='store', metavar='dn', help='Distinguished name of the object')
	ranged.add_argument('attribute', action='store', metavar='attribute', help='Attribute to retrieve, e.g. member')
	ranged.add_argument('--count', dest='count', action='store_true', help='Print the number of values only')

	guid = subparsers.add_parser('guid', help='Resolve schemaIDGUID values to schema names')
	guid.add_argument('guids', nargs='+', metavar='guid', help='GUIDs to resolve')

	if argv is None and len(sys.argv) == 1:
		parser.print_help()
		sys.exit(1)

	args = parser.parse_args(argv)
	if args.nameserver:
		args.use_system_ns = False
	return args
