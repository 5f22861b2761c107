#!/usr/bin/env python3
"""
Command line tests.

The searcher is a MagicMock so the tests only check that arguments reach
the search engine and that results are printed and turned into exit codes.
"""
import os
import sys
import shlex
import logging
import tempfile
import unittest
from io import StringIO
from unittest.mock import patch, MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from adsearch import run
from adsearch.lib.search import SearchResultEntry
from adsearch.utils.formatter import FORMATTER
from adsearch.utils.parsers import arg_parse
from ldap_fakes import entry

logging.getLogger().setLevel(logging.CRITICAL)

def parse(command):
    return arg_parse(shlex.split(command))

class ArgParseTests(unittest.TestCase):
    def test_search_arguments(self):
        args = parse('-d corp.local --dc-ip 10.0.0.1 search "(objectClass=user)" -p name,member -s base -b "OU=Lab,DC=corp,DC=local"')
        self.assertEqual(args.module, 'search')
        self.assertEqual(args.domain, 'corp.local')
        self.assertEqual(args.domain_controller, '10.0.0.1')
        self.assertEqual(args.filter, '(objectClass=user)')
        self.assertEqual(args.properties, ['name', 'member'])
        self.assertEqual(args.scope, 'BASE')
        self.assertEqual(args.search_base, 'OU=Lab,DC=corp,DC=local')
        self.assertTrue(args.use_system_ns)

    def test_search_defaults(self):
        args = parse('search "(objectClass=*)"')
        self.assertEqual(args.properties, [])
        self.assertEqual(args.scope, 'SUBTREE')
        self.assertIsNone(args.search_base)
        self.assertFalse(args.count)

    def test_nameserver_disables_system_resolver(self):
        args = parse('-ns 10.0.0.53 guid bf967aba-0de6-11d0-a285-00aa003049e2')
        self.assertEqual(args.nameserver, '10.0.0.53')
        self.assertFalse(args.use_system_ns)

    def test_ranged_arguments(self):
        args = parse('ranged "CN=Big,DC=corp,DC=local" member --count')
        self.assertEqual((args.dn, args.attribute, args.count), ('CN=Big,DC=corp,DC=local', 'member', True))

    def test_invalid_scope_exits(self):
        with patch('sys.stdout', new_callable=StringIO):
            with self.assertRaises(SystemExit) as exit_context:
                parse('search "(objectClass=*)" -s everything')
        self.assertEqual(exit_context.exception.code, 2)

    def test_command_is_required(self):
        with patch('sys.stdout', new_callable=StringIO):
            with self.assertRaises(SystemExit):
                parse('-d corp.local')

class RunTests(unittest.TestCase):
    def setUp(self):
        self.searcher = MagicMock()
        self.formatter = MagicMock()

    def test_search(self):
        entries = iter([SearchResultEntry.from_response(entry("CN=a,DC=corp,DC=local", {'name': 'a'}))])
        self.searcher.query_ldap.return_value = entries

        code = run(parse('search "(name=a)" -p name'), self.searcher, self.formatter)

        self.assertEqual(code, 0)
        self.searcher.query_ldap.assert_called_once_with('(name=a)', ['name'], 'SUBTREE', None)
        self.formatter.print_entries.assert_called_once_with(entries)

    def test_search_all_properties(self):
        run(parse('search "(name=a)"'), self.searcher, self.formatter)
        self.assertIsNone(self.searcher.query_ldap.call_args.args[1])

    def test_search_count(self):
        run(parse('search "(name=a)" --count'), self.searcher, self.formatter)
        self.formatter.count.assert_called_once()
        self.formatter.print_entries.assert_not_called()

    def test_ranged(self):
        self.searcher.retrieve_ranged_attribute.return_value = iter(['CN=x', 'CN=y'])
        self.assertEqual(run(parse('ranged "CN=Big,DC=corp,DC=local" member'), self.searcher, self.formatter), 0)
        self.searcher.retrieve_ranged_attribute.assert_called_once_with('CN=Big,DC=corp,DC=local', 'member')
        self.formatter.print_values.assert_called_once()

    def test_ranged_unavailable(self):
        self.searcher.retrieve_ranged_attribute.return_value = None
        self.assertEqual(run(parse('ranged "CN=Big,DC=corp,DC=local" member'), self.searcher, self.formatter), 1)
        self.formatter.print_values.assert_not_called()

    def test_guid(self):
        self.searcher.get_name_from_guid.side_effect = lambda guid: {'g1': 'user'}.get(guid)

        self.assertEqual(run(parse('guid g1'), self.searcher, self.formatter), 0)
        self.formatter.print_table.assert_called_once_with([['g1', 'user']], ['GUID', 'Name'])

        self.assertEqual(run(parse('guid g1 g2'), self.searcher, self.formatter), 1)

class FormatterTests(unittest.TestCase):
    def formatter(self, command='guid g1', **kwargs):
        args = parse(command)
        for key, value in kwargs.items():
            setattr(args, key, value)
        return FORMATTER(args)

    def test_print_entry(self):
        result = SearchResultEntry.from_response(entry("CN=a,DC=corp,DC=local", {
            'name': 'a',
            'objectGUID': bytes.fromhex("ba7a96bfe60dd011a28500aa003049e2"),
        }))
        with patch('sys.stdout', new_callable=StringIO) as stdout:
            self.formatter().print_entries([result])
        output = stdout.getvalue()
        self.assertIn("CN=a,DC=corp,DC=local", output)
        self.assertIn("{bf967aba-0de6-11d0-a285-00aa003049e2}", output)

    def test_count(self):
        with patch('sys.stdout', new_callable=StringIO) as stdout:
            self.formatter().count(iter(range(3)))
        self.assertEqual(stdout.getvalue().strip(), '3')

    def test_csv_table(self):
        with patch('sys.stdout', new_callable=StringIO) as stdout:
            self.formatter(tableview='csv').print_table([['g1', 'user']], ['GUID', 'Name'])
        self.assertEqual(stdout.getvalue().splitlines()[:2], ['"GUID","Name"', '"g1","user"'])

    def test_outfile(self):
        with tempfile.TemporaryDirectory() as folder:
            outfile = os.path.join(folder, 'out.txt')
            with patch('sys.stdout', new_callable=StringIO):
                self.formatter(outfile=outfile).print_values(['CN=x', 'CN=y'])
            with open(outfile) as f:
                self.assertEqual(f.read().splitlines(), ['CN=x', 'CN=y'])

if __name__ == '__main__':
    unittest.main()
