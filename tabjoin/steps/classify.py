"""
Classify (binning) step.

Appends a column holding a class label computed from a numeric source
column and an ordered list of class limits.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tabjoin.core.constants import DEFAULT_CLASS_COLUMN, DEFAULT_CLASS_LIMITS
from tabjoin.core.exceptions import ColumnNotFoundError, InvalidNumericLiteral
from tabjoin.core.numeric import parse_number, strictly_ascending
from tabjoin.core.results import StepResult
from tabjoin.core.table import Table
from tabjoin.steps.base import RunContext, Step
from tabjoin.steps.registry import register_step

logger = logging.getLogger(__name__)


@dataclass
class ClassLimit:
    """A class label and the largest value that belongs to it."""
    name: str
    max_value: float

    def in_range(self, value: float) -> bool:
        return value <= self.max_value


def class_for(limits: List[ClassLimit], value: float) -> str:
    """Return the label of the first limit at or above value, or '' if none."""
    for limit in limits:
        if limit.in_range(value):
            return limit.name
    return ""


def parse_limits(entries: Optional[List[Any]]) -> List[ClassLimit]:
    """
    Build the limit list from configuration.

    Each entry is a mapping with 'label' and 'max', or a [label, max] pair.
    The last limit is always open-ended, whatever maximum it was given.
    Entries with an unparseable maximum get NaN so that validation fails.
    """
    if not entries:
        return [ClassLimit(name, max_value) for name, max_value in DEFAULT_CLASS_LIMITS]
    limits = []
    for entry in entries:
        if isinstance(entry, dict):
            label, max_value = entry.get("label"), entry.get("max")
        else:
            label, max_value = (list(entry) + [None])[:2]
        try:
            number = float(max_value) if max_value is not None else math.inf
        except (TypeError, ValueError):
            number = math.nan
        limits.append(ClassLimit("" if label is None else str(label), number))
    limits[-1].max_value = math.inf
    return limits


@register_step("classify")
class ClassifyStep(Step):
    """
    Bin a numeric column into labelled classes.

    A value belongs to the first class whose maximum is at or above it.
    Values that are not numbers get an empty label and are counted as invalid.

    Configuration:
        params:
            column (str): Source column holding numbers
            new_column (str): Header of the added column (default: "class")
            classes (list): [{label: Low, max: 0.5}, {label: High}] (default shown)

    Example YAML:
        - type: classify
          column: growth
          new_column: growth_class
          classes:
            - {label: Low, max: 0.5}
            - {label: High}
    """

    def __init__(self, params=None, name=None, base_dir=None):
        super().__init__(params, name, base_dir)
        self.column = self.param_str("column")
        self.new_column = self.param_str("new_column", DEFAULT_CLASS_COLUMN)
        self.limits = parse_limits(self.params.get("classes"))

    def validate(self) -> bool:
        if not self.column.strip() or not self.new_column.strip():
            return False
        names = [limit.name for limit in self.limits]
        if any(not name.strip() for name in names) or len(set(names)) != len(names):
            return False
        maxima = [limit.max_value for limit in self.limits]
        if any(math.isnan(m) for m in maxima):
            return False
        return strictly_ascending(maxima)

    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        start_time = time.time()
        col_idx = table.find_column(self.column)
        if col_idx < 0:
            raise ColumnNotFoundError(self.column, role="source column")

        labels: Dict[str, List[str]] = {}
        invalid = 0
        for key in table.keys():
            try:
                label = class_for(self.limits, parse_number(table.value(key, col_idx)))
            except InvalidNumericLiteral as e:
                logger.debug(f"Row {key}: {e.message}")
                label = ""
                invalid += 1
            labels[key] = [label]
        table.append_columns([self.new_column], labels)

        processed = len(labels)
        message = f"{processed} records processed, {invalid} were invalid."
        return self._create_result(
            message,
            table,
            start_time,
            counters={'processed': processed, 'invalid': invalid},
        )
