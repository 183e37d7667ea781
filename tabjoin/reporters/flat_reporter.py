"""Flat tab-delimited output."""

from pathlib import Path

from tabjoin.core.table import Table
from tabjoin.reporters.base import Reporter, write_atomic


class FlatReporter(Reporter):
    """Writes the table verbatim: header line, then one tab-separated line per record."""

    def generate(self, table: Table, output_path) -> Path:
        return write_atomic(output_path, table.write)
