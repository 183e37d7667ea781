"""
Join steps.

Both joins read a secondary file into a key -> selected-fields map and append
the selected fields to every table row with a matching key. They differ only
in what happens to table rows with no match:

- natural_join: the row is deleted
- left_join: the row is kept and padded with empty fields
"""

import logging
import time
from typing import Dict, List, Optional

from tabjoin.core.results import StepResult
from tabjoin.core.table import Table
from tabjoin.loaders.tab_loader import qualify, read_tab_file, select_columns
from tabjoin.steps.base import RunContext, Step
from tabjoin.steps.registry import register_step

logger = logging.getLogger(__name__)


class JoinStep(Step):
    """
    Join a secondary file onto the table by key.

    Configuration:
        params:
            path (str): Secondary tab-delimited file
            key_column (str, optional): Key column in the secondary file (default: first)
            columns (list, optional): Secondary columns to add (default: all non-key)
            qualifier (str, optional): Prefix for the added headers
    """

    keep_unmatched: bool = False

    def validate(self) -> bool:
        return bool(self.param_str("path").strip())

    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        start_time = time.time()
        path = self.resolve_path(self.param_str("path"))
        tab_file = read_tab_file(path)
        key_idx = tab_file.require_column(self.param_str("key_column") or None)
        data_idx = select_columns(tab_file, key_idx, self.param_list("columns"))

        # Last record wins for duplicate keys in the secondary file.
        secondary: Dict[str, List[str]] = {}
        duplicates = 0
        for row in tab_file.rows:
            key = row[key_idx]
            if key in secondary:
                duplicates += 1
            secondary[key] = [row[i] for i in data_idx]

        new_headers = qualify([tab_file.headers[i] for i in data_idx], self.param_str("qualifier") or None)
        unmatched_left = sum(1 for key in table if key not in secondary)
        if not self.keep_unmatched:
            table.retain(set(secondary))
        matches = {key: fields for key, fields in secondary.items() if key in table}
        matched = table.append_columns(new_headers, matches, fill="")
        unmatched_right = len(secondary) - matched

        logger.debug(f"{self.step_type}: added {len(new_headers)} columns from {path}, {matched} keys matched")
        message = (
            f"{unmatched_left} unmatched left keys, {unmatched_right} unmatched right keys, "
            f"{duplicates} duplicates in new file."
        )
        return self._create_result(
            message,
            table,
            start_time,
            counters={
                'matched': matched,
                'unmatched_left': unmatched_left,
                'unmatched_right': unmatched_right,
                'duplicates': duplicates,
            },
        )


@register_step("natural_join")
class NaturalJoinStep(JoinStep):
    """Natural join: table rows without a matching key are deleted."""
    keep_unmatched = False


@register_step("left_join")
class LeftJoinStep(JoinStep):
    """Left join: table rows without a matching key are padded with empty fields."""
    keep_unmatched = True
