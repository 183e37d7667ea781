"""
Analyze step: score every data column against a set of labels.

The table's shape decides the analysis:

- Regression: every label is a column header. Each other data column is
  correlated (Pearson) with each label column, and the label with the
  strongest absolute correlation is reported as "best".
- Classification: the labels appear as values in one column. Each other
  data column is averaged per class, and the class with the highest mean
  is reported as "best".

Either way the result is a new table keyed by the original column names,
which replaces the current table.
"""

import logging
import math
import time
import warnings
from typing import Dict, List, Optional

import numpy as np
from scipy.stats import pearsonr

from tabjoin.core.constants import BEST_COLUMN, DEFAULT_META_COLUMN, MIN_CORRELATION_PAIRS
from tabjoin.core.exceptions import LabelColumnNotFoundError, NoValidRecordsError
from tabjoin.core.numeric import finite_count, format_number, numeric_array
from tabjoin.core.results import StepResult
from tabjoin.core.table import Table
from tabjoin.loaders.tab_loader import read_labels
from tabjoin.steps.base import RunContext, Step
from tabjoin.steps.registry import register_step

logger = logging.getLogger(__name__)


def pearson(x: np.ndarray, y: np.ndarray) -> float:
    """
    Pearson coefficient over the pairs where both values are finite.

    Returns NaN when fewer than two such pairs exist or either side is constant.
    """
    mask = np.isfinite(x) & np.isfinite(y)
    if int(mask.sum()) < MIN_CORRELATION_PAIRS:
        return math.nan
    with warnings.catch_warnings():
        # Constant input produces a warning and a NaN coefficient
        warnings.simplefilter("ignore")
        result = pearsonr(x[mask], y[mask])
    return float(result[0])


def best_by_absolute(labels: List[str], coefficients: List[float]) -> Optional[str]:
    """Label with the largest finite absolute coefficient; first one wins ties."""
    best = None
    best_value = -1.0
    for label, value in zip(labels, coefficients):
        if math.isfinite(value) and abs(value) > best_value:
            best = label
            best_value = abs(value)
    return best


def best_by_maximum(labels: List[str], means: List[float]) -> Optional[str]:
    """Label with the highest finite mean; first one wins ties."""
    best = None
    best_value = -math.inf
    for label, value in zip(labels, means):
        if math.isfinite(value) and (best is None or value > best_value):
            best = label
            best_value = value
    return best


def find_label_column(table: Table, labels: List[str]) -> int:
    """
    Find the column whose values are all labels.

    The search runs from the last column back to column 1; the first column
    that qualifies wins.

    Raises:
        LabelColumnNotFoundError: If no column qualifies
    """
    label_set = set(labels)
    for col in range(table.width - 1, 0, -1):
        if all(value in label_set for value in table.column_values(col)):
            return col
    raise LabelColumnNotFoundError()


@register_step("analyze")
class AnalyzeStep(Step):
    """
    Score columns by correlation with, or mean per, a set of labels.

    Configuration:
        params:
            label_file (str): File with one label per line
            meta_column (str): Key header of the result table (default: "column")

    Example YAML:
        - type: analyze
          label_file: labels.txt
          meta_column: feature
    """

    def __init__(self, params=None, name=None, base_dir=None):
        super().__init__(params, name, base_dir)
        self.meta_column = self.param_str("meta_column", DEFAULT_META_COLUMN)

    def validate(self) -> bool:
        return bool(self.param_str("label_file").strip()) and bool(self.meta_column.strip())

    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        start_time = time.time()
        labels = read_labels(self.resolve_path(self.param_str("label_file")))
        if all(table.find_last_column(label) > 0 for label in labels):
            logger.info(f"Regression analysis against {len(labels)} label columns")
            result, label_counts = self._regression(table, labels)
            mode = "regression"
        else:
            logger.info(f"Classification analysis with {len(labels)} labels")
            result, label_counts = self._classification(table, labels)
            mode = "classification"

        message = f"{len(result)} columns analyzed ({mode}), {len(table)} records used."
        return self._create_result(
            message,
            result,
            start_time,
            counters={'columns': len(result), 'records': len(table)},
            label_counts=label_counts,
        )

    def _regression(self, table: Table, labels: List[str]):
        label_cols = [table.find_last_column(label) for label in labels]
        columns = {c: numeric_array(table.column_values(c)) for c in range(1, table.width)}
        label_counts = {label: finite_count(columns[c]) for label, c in zip(labels, label_cols)}

        multi = len(labels) > 1
        result = Table([self.meta_column] + labels + ([BEST_COLUMN] if multi else []))
        for c in range(1, table.width):
            if c in label_cols:
                continue
            coefficients = [pearson(columns[c], columns[lc]) for lc in label_cols]
            best = best_by_absolute(labels, coefficients)
            if best is None:
                continue
            fields = [format_number(v) for v in coefficients]
            if multi:
                fields.append(best)
            result.add_record(table.headers[c], fields)

        if len(result) == 0:
            raise NoValidRecordsError(
                "No column had two or more finite values paired with a label column.",
                step_type=self.step_type
            )
        return result, label_counts

    def _classification(self, table: Table, labels: List[str]):
        """
        Mean of each data column within each class.

        Each class sum is divided by that class's own count of numeric
        values, not by the column's total count, so the figures are true
        per-class means. A class with no numeric values gets NaN rather
        than 0.0 and can never be chosen as best.
        """
        label_col = find_label_column(table, labels)
        label_index = {label: i for i, label in enumerate(labels)}
        row_labels = np.array([label_index[v] for v in table.column_values(label_col)], dtype=int)
        label_counts = {label: int((row_labels == i).sum()) for i, label in enumerate(labels)}

        result = Table([self.meta_column] + labels + [BEST_COLUMN])
        for c in range(1, table.width):
            if c == label_col:
                continue
            values = numeric_array(table.column_values(c))
            finite = np.isfinite(values)
            if not finite.any():
                continue
            means = []
            for i in range(len(labels)):
                in_class = finite & (row_labels == i)
                means.append(float(values[in_class].mean()) if in_class.any() else math.nan)
            best = best_by_maximum(labels, means)
            result.add_record(table.headers[c], [format_number(m) for m in means] + [best or ""])
        return result, label_counts
