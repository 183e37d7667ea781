"""Load step: reads the pipeline's primary input file into a fresh Table."""

import logging
import time
from typing import Optional

from tabjoin.core.table import Table
from tabjoin.core.results import StepResult
from tabjoin.loaders.tab_loader import load_table
from tabjoin.steps.base import RunContext, Step
from tabjoin.steps.registry import register_step

logger = logging.getLogger(__name__)


@register_step("load")
class LoadStep(Step):
    """
    Read the initial input file.

    The incoming table is ignored and replaced by the file's contents.

    Configuration:
        params:
            path (str): Tab-delimited input file
            key_column (str, optional): Key column header (default: first column)
            columns (list, optional): Data columns to keep (default: all)
            qualifier (str, optional): Prefix added to data headers

    Example YAML:
        - type: load
          path: genomes.tbl
          key_column: genome_id
    """

    def validate(self) -> bool:
        return bool(self.param_str("path").strip())

    def override_path(self, path: str) -> None:
        """Point the step at a different input file (used by `run --input`)."""
        self.params["path"] = path
        self.base_dir = None

    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        start_time = time.time()
        path = self.resolve_path(self.param_str("path"))
        logger.info(f"Loading {path}")
        loaded = load_table(
            path,
            key_column=self.param_str("key_column") or None,
            columns=self.param_list("columns") or None,
            qualifier=self.param_str("qualifier") or None,
        )
        records = len(loaded) + loaded.dup_count
        message = f"{records} input records, {loaded.dup_count} duplicate keys."
        return self._create_result(
            message,
            loaded,
            start_time,
            counters={'records': records, 'duplicates': loaded.dup_count},
        )
