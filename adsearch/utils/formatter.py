#!/usr/bin/env python3
import csv
from io import StringIO

from tabulate import tabulate as table

from adsearch.lib.resolver import LDAP
from adsearch.utils.logging import LOG
from adsearch.utils.constants import TABLE_FMT_MAP

class FORMATTER:
	def __init__(self, args, config=None):
		self.__newline = '\n'
		self.args = args

		self.config = {
			'table_format': 'simple',
			'csv_quote_all': True,
			'padding': 2,
		}
		if config:
			self.config.update(config)

	def _emit(self, text):
		if getattr(self.args, 'outfile', None):
			LOG.write_to_file(self.args.outfile, text)
		print(text)

	def count(self, entries):
		self._emit(str(sum(1 for _ in entries)))

	def print_entries(self, entries):
		"""Print search entries as ``attribute: value`` blocks, one per entry."""
		for entry in entries:
			self.print_entry(entry)

	def print_entry(self, entry):
		names = ['distinguishedName'] + [name for name in entry.attribute_names if name.lower() != 'distinguishedname']
		width = max(len(name) for name in names) + self.config['padding']
		lines = [f"{'distinguishedName'.ljust(width)}: {entry.dn}"]
		for name in names[1:]:
			values = [LDAP.resolve_value(name, value) for value in entry.attributes[name]]
			if not values:
				continue
			lines.append(f"{name.ljust(width)}: {(self.__newline + ' ' * (width + 2)).join(values)}")
		self._emit(self.__newline.join(lines) + self.__newline)

	def print_values(self, values):
		for value in values:
			self._emit(value)

	def print_table(self, entries, headers, align=None):
		table_format = getattr(self.args, 'tableview', None) or self.config['table_format']
		table_format = TABLE_FMT_MAP.get(table_format, "simple")

		if table_format == "csv":
			output = StringIO()
			csv_writer = csv.writer(output, quoting=csv.QUOTE_ALL if self.config['csv_quote_all'] else csv.QUOTE_MINIMAL)
			if headers:
				csv_writer.writerow(headers)
			csv_writer.writerows(entries)
			table_res = output.getvalue()
			output.close()
		else:
			table_res = table(
				entries,
				headers,
				numalign="left" if not align else align,
				tablefmt=table_format
			)
		self._emit(table_res)
