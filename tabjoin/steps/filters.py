"""
Key-set filter steps.

- include_filter: keep only rows whose key appears in the filter file
- exclude_filter: delete rows whose key appears in the filter file
- merge_filter: cut the table down to the columns it shares with another
  file, then add (or replace) that file's records
"""

import logging
import time
from typing import Optional

from tabjoin.core.results import StepResult
from tabjoin.core.table import Table
from tabjoin.loaders.tab_loader import read_key_set, read_tab_file
from tabjoin.steps.base import RunContext, Step
from tabjoin.steps.registry import register_step

logger = logging.getLogger(__name__)


class KeyFilterStep(Step):
    """
    Filter table rows by membership of their key in another file's key column.

    Configuration:
        params:
            path (str): Filter file
            key_column (str, optional): Column of the filter file holding keys (default: first)
    """

    include: bool = True

    def validate(self) -> bool:
        return bool(self.param_str("path").strip())

    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        start_time = time.time()
        path = self.resolve_path(self.param_str("path"))
        keys = read_key_set(path, self.param_str("key_column") or None)
        initial = len(table)
        for key in table.keys():
            if (key in keys) != self.include:
                table.remove(key)
        deleted = initial - len(table)
        message = f"{len(keys)} keys in filter file.  {len(table)} records kept, {deleted} deleted."
        return self._create_result(
            message,
            table,
            start_time,
            counters={'filter_keys': len(keys), 'kept': len(table), 'deleted': deleted},
        )


@register_step("include_filter")
class IncludeFilterStep(KeyFilterStep):
    """Keep only records whose key is in the filter file."""
    include = True


@register_step("exclude_filter")
class ExcludeFilterStep(KeyFilterStep):
    """Remove records whose key is in the filter file."""
    include = False


@register_step("merge_filter")
class MergeFilterStep(Step):
    """
    Merge another file's records into the table.

    Table columns not present in the merge file are removed first, so every
    merged record fits the remaining headers. Records with a key already in
    the table replace the existing record.

    Configuration:
        params:
            path (str): File to merge
            key_column (str, optional): Key column of the merge file (default: first)
    """

    def validate(self) -> bool:
        return bool(self.param_str("path").strip())

    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        start_time = time.time()
        path = self.resolve_path(self.param_str("path"))
        tab_file = read_tab_file(path)
        key_idx = tab_file.require_column(self.param_str("key_column") or None)
        key_name = tab_file.headers[key_idx]
        shared = {h for h in tab_file.headers if h != key_name}

        old_dups = table.dup_count
        removed = table.reduce_cols(shared)
        data_cols = [tab_file.find_column(h) for h in table.headers[1:]]

        new_records = 0
        for row in tab_file.rows:
            table.add_record(row[key_idx], [row[i] for i in data_cols])
            new_records += 1

        replaced = table.dup_count - old_dups
        added = new_records - replaced
        logger.debug(f"Merged {new_records} records from {path} into {table.width} columns")
        message = f"{removed} columns removed, {added} records added, {replaced} replaced."
        return self._create_result(
            message,
            table,
            start_time,
            counters={'columns_removed': removed, 'added': added, 'replaced': replaced},
        )
