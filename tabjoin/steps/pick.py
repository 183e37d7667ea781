"""Pick step: stratified random sample with a uniqueness constraint."""

import logging
import time
from typing import Optional

from tabjoin.core.exceptions import ColumnNotFoundError
from tabjoin.core.results import StepResult
from tabjoin.core.table import Table
from tabjoin.steps.base import RunContext, Step
from tabjoin.steps.registry import register_step

logger = logging.getLogger(__name__)


@register_step("pick")
class PickStep(Step):
    """
    Randomly pick records, at most one per distinct scatter-column value.

    Keys are shuffled with the run's random source and admitted in that order
    whenever their scatter value has not been seen yet, until the requested
    count is reached. Without a scatter column the key itself is used, so
    nothing is excluded. With few distinct scatter values the result can be
    smaller than the requested count.

    Configuration:
        params:
            count (int): Number of records to keep (must be positive)
            scatter_column (str, optional): Column whose values must be distinct

    Example YAML:
        - type: pick
          count: 100
          scatter_column: genus
    """

    def __init__(self, params=None, name=None, base_dir=None):
        super().__init__(params, name, base_dir)
        self.scatter_column = self.param_str("scatter_column")
        try:
            self.count = int(self.params.get("count"))
        except (TypeError, ValueError):
            self.count = 0

    def validate(self) -> bool:
        return self.count > 0

    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        start_time = time.time()
        context = context or RunContext.create()
        scatter_idx = 0
        if self.scatter_column.strip():
            scatter_idx = table.find_column(self.scatter_column)
            if scatter_idx < 0:
                raise ColumnNotFoundError(self.scatter_column, role="scatter column")

        keys = table.keys()
        context.rng.shuffle(keys)

        picked = table.copy_structure()
        used = set()
        scanned = 0
        for key in keys:
            if len(picked) >= self.count:
                break
            scanned += 1
            scatter_value = table.value(key, scatter_idx)
            if scatter_value not in used:
                used.add(scatter_value)
                picked.add_record(key, table.get(key))

        logger.debug(f"Picked {len(picked)} of {len(table)} records using column {scatter_idx}")
        message = f"{scanned} records scanned, {len(picked)} picked."
        return self._create_result(
            message,
            picked,
            start_time,
            counters={'scanned': scanned, 'picked': len(picked), 'available': len(table)},
        )
