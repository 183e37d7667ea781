"""
Confusion-matrix classification report.

Compares an expected-class column with a predicted-class column over a
fixed, ordered label set. Rows whose expected or predicted value is not a
known label are counted as invalid and left out of the matrix. The text
report lists overall accuracy, the raw and percentage matrices, and for each
class the one-vs-rest accuracy, precision, sensitivity, fallout and false
discovery rate.

Author: Daniel Edge
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

import numpy as np

from tabjoin.core.constants import CONFUSION_COL_WIDTH, CONFUSION_STATS_WIDTH, FILE_ENCODING
from tabjoin.core.exceptions import ColumnNotFoundError, NoValidRecordsError
from tabjoin.core.numeric import safe_ratio
from tabjoin.core.table import Table
from tabjoin.reporters.base import Reporter, write_atomic

logger = logging.getLogger(__name__)


def abbreviate(text: str, width: int = CONFUSION_COL_WIDTH) -> str:
    """Shorten text to width characters, ending in '...' when cut."""
    if len(text) <= width:
        return text
    return text[:width - 3] + "..."


@dataclass
class ClassMetrics:
    """One-vs-rest statistics for a single label."""
    label: str
    true_positive: int
    false_positive: int
    false_negative: int
    true_negative: int

    @property
    def total(self) -> int:
        return self.true_positive + self.false_positive + self.false_negative + self.true_negative

    @property
    def accuracy(self) -> float:
        return safe_ratio(self.true_positive + self.true_negative, self.total)

    @property
    def precision(self) -> float:
        return safe_ratio(self.true_positive, self.true_positive + self.false_positive)

    @property
    def sensitivity(self) -> float:
        return safe_ratio(self.true_positive, self.true_positive + self.false_negative)

    @property
    def fallout(self) -> float:
        return safe_ratio(self.false_positive, self.false_positive + self.true_negative)

    @property
    def false_discovery(self) -> float:
        return safe_ratio(self.false_positive, self.false_positive + self.true_positive)

    def to_dict(self) -> Dict[str, float]:
        return {
            'accuracy': self.accuracy,
            'precision': self.precision,
            'sensitivity': self.sensitivity,
            'fallout': self.fallout,
            'false_discovery': self.false_discovery,
        }


@dataclass
class ConfusionReport:
    """
    Confusion matrix over an ordered label set.

    Attributes:
        labels: Class names; matrix rows and columns follow this order
        matrix: matrix[expected][predicted] counts
        invalid: Rows skipped because a value was not a known label
    """
    labels: List[str]
    matrix: np.ndarray
    invalid: int = 0

    @classmethod
    def from_matrix(cls, labels: List[str], matrix, invalid: int = 0) -> "ConfusionReport":
        return cls(list(labels), np.asarray(matrix, dtype=int), invalid)

    @property
    def valid(self) -> int:
        return int(self.matrix.sum())

    @property
    def correct(self) -> int:
        return int(np.trace(self.matrix))

    @property
    def accuracy(self) -> float:
        return safe_ratio(self.correct, self.valid)

    @property
    def label_counts(self) -> Dict[str, int]:
        """Valid rows per expected label."""
        return {label: int(self.matrix[i].sum()) for i, label in enumerate(self.labels)}

    def class_metrics(self, idx: int) -> ClassMetrics:
        tp = int(self.matrix[idx, idx])
        fp = int(self.matrix[:, idx].sum()) - tp
        fn = int(self.matrix[idx, :].sum()) - tp
        tn = self.valid - tp - fp - fn
        return ClassMetrics(self.labels[idx], tp, fp, fn, tn)

    def percentages(self) -> np.ndarray:
        if self.valid == 0:
            return np.zeros(self.matrix.shape)
        return self.matrix * 100.0 / self.valid

    # ------------------------------------------------------------------
    # Text rendering
    # ------------------------------------------------------------------

    def to_lines(self) -> List[str]:
        width = CONFUSION_COL_WIDTH
        abbrs = [abbreviate(label, width) for label in self.labels]
        lines = [
            f"{self.valid} predictions found.  {self.invalid} were invalid.",
            f"{self.correct} correct predictions (accuracy {self.accuracy * 100.0:1.2f}%).",
            "",
            "Confusion matrices compare the expected (row) value to predicted (column)",
        ]
        lines.extend(self._matrix_lines("Raw", abbrs, [[f"{int(v):{width}d}" for v in row] for row in self.matrix]))
        lines.extend(self._matrix_lines("Percent", abbrs, [[f"{float(v):{width}.2f}" for v in row] for row in self.percentages()]))
        lines.extend([
            "",
            "Accuracy is the fraction of all records classified correctly with respect to the class.",
            "  Accuracy = (true positive + true negative) / (all records)",
            "Precision is how often a prediction of the class is correct.",
            "  Precision = (true positive) / (predicted positive)",
            "Sensitivity is how often a member of the class is found.",
            "  Sensitivity = (true positive) / (actual positive)",
            "Fallout is how often a non-member is wrongly predicted as the class.",
            "  Fallout = (false positive) / (actual negative)",
            "False discovery is how often a prediction of the class is wrong.",
            "  False Discovery = (false positive) / (predicted positive)",
        ])
        for idx in range(len(self.labels)):
            metrics = self.class_metrics(idx)
            lines.extend(["", "", f"Classification metrics for {metrics.label}", ""])
            for name, value in (
                ("Class Accuracy", metrics.accuracy),
                ("Class Precision", metrics.precision),
                ("Class Sensitivity", metrics.sensitivity),
                ("Class Fallout", metrics.fallout),
                ("False Discovery", metrics.false_discovery),
            ):
                lines.append(f"{name:<{CONFUSION_STATS_WIDTH}} {value:{width}.4f}")
        return lines

    @staticmethod
    def _matrix_lines(title: str, abbrs: List[str], cells: List[List[str]]) -> List[str]:
        width = CONFUSION_COL_WIDTH
        header = f"{title:<{width}}|" + "".join(f"{a:>{width}} " for a in abbrs)
        lines = ["", header.rstrip(), "-" * ((width + 1) * len(abbrs) + width)]
        for abbr, row in zip(abbrs, cells):
            lines.append((f"{abbr:<{width}}|" + "".join(f"{c} " for c in row)).rstrip())
        return lines

    def to_text(self) -> str:
        return "\n".join(self.to_lines()) + "\n"


def build_confusion_report(
    table: Table,
    expect_column: str,
    predict_column: str,
    labels: List[str]
) -> ConfusionReport:
    """
    Tally expected against predicted classes.

    Raises:
        ColumnNotFoundError: If either column is missing
        NoValidRecordsError: If no row has two known labels
    """
    expect_idx = table.find_column(expect_column)
    if expect_idx < 0:
        raise ColumnNotFoundError(expect_column, role="expect column")
    predict_idx = table.find_column(predict_column)
    if predict_idx < 0:
        raise ColumnNotFoundError(predict_column, role="predict column")

    index = {label: i for i, label in enumerate(labels)}
    matrix = np.zeros((len(labels), len(labels)), dtype=int)
    invalid = 0
    for key in table:
        expected = index.get(table.value(key, expect_idx), -1)
        predicted = index.get(table.value(key, predict_idx), -1)
        if expected < 0 or predicted < 0:
            invalid += 1
        else:
            matrix[expected, predicted] += 1

    report = ConfusionReport(list(labels), matrix, invalid)
    if report.valid == 0:
        raise NoValidRecordsError("No valid prediction records found.")
    logger.debug(f"Confusion matrix built from {report.valid} rows, {invalid} invalid")
    return report


class ConfusionReporter(Reporter):
    """Writes the confusion report for a table as a text file."""

    def __init__(self, expect_column: str, predict_column: str, labels: List[str]):
        self.expect_column = expect_column
        self.predict_column = predict_column
        self.labels = list(labels)
        self.last_report = None

    def generate(self, table: Table, output_path) -> Path:
        report = build_confusion_report(table, self.expect_column, self.predict_column, self.labels)
        self.last_report = report
        text = report.to_text()

        def _write(path: Path) -> None:
            with open(path, "w", encoding=FILE_ENCODING, newline="\n") as f:
                f.write(text)

        return write_atomic(output_path, _write)
