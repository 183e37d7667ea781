"""
Unit tests for the analyze step (regression and classification scoring).

Author: Daniel Edge
"""

import math

import numpy as np
import pytest

from tabjoin.core.exceptions import LabelColumnNotFoundError, NoValidRecordsError
from tabjoin.core.table import Table
from tabjoin.steps.analyze import AnalyzeStep, best_by_absolute, best_by_maximum, pearson


def _table(headers, rows):
    table = Table(headers)
    for key, fields in rows:
        table.add_record(key, fields)
    return table


@pytest.mark.unit
class TestPearson:
    """Test the correlation helper."""

    def test_perfect_correlation(self):
        """Test y = 2x gives a coefficient of 1."""
        x = np.array([1.0, 2.0, 3.0, 4.0])
        assert pearson(x, 2 * x) == pytest.approx(1.0)

    def test_non_finite_pairs_excluded(self):
        """Test pairs with a non-finite value on either side are ignored."""
        x = np.array([1.0, 2.0, 3.0, math.inf, 5.0])
        y = np.array([2.0, 4.0, 6.0, 1.0, math.nan])
        assert pearson(x, y) == pytest.approx(1.0)

    def test_too_few_pairs(self):
        """Test fewer than two finite pairs give NaN."""
        x = np.array([1.0, math.nan])
        y = np.array([2.0, 3.0])
        assert math.isnan(pearson(x, y))

    def test_constant_input(self):
        """Test a constant column gives NaN."""
        assert math.isnan(pearson(np.array([1.0, 1.0, 1.0]), np.array([1.0, 2.0, 3.0])))


@pytest.mark.unit
class TestBestSelection:
    """Test best-label helpers."""

    def test_best_by_absolute(self):
        """Test the strongest absolute coefficient wins and NaN is skipped."""
        assert best_by_absolute(["a", "b", "c"], [0.2, -0.9, math.nan]) == "b"
        assert best_by_absolute(["a"], [math.nan]) is None

    def test_best_by_absolute_tie(self):
        """Test the first label wins a tie."""
        assert best_by_absolute(["a", "b"], [0.5, -0.5]) == "a"

    def test_best_by_maximum(self):
        """Test the highest finite mean wins."""
        assert best_by_maximum(["a", "b", "c"], [-3.0, math.nan, -1.0]) == "c"
        assert best_by_maximum(["a", "b"], [math.nan, math.nan]) is None


@pytest.mark.unit
class TestRegressionAnalysis:
    """Test regression-shaped tables."""

    def test_single_label(self, write_labels):
        """Test one coefficient per column, with unscorable columns skipped."""
        table = _table(["id", "x", "y", "z"], [
            ("r1", ["1", "2", "5"]),
            ("r2", ["2", "4", "5"]),
            ("r3", ["3", "6", "5"]),
            ("r4", ["inf", "100", "5"]),
        ])
        step = AnalyzeStep(params={'label_file': str(write_labels(["y"]))})
        result = step.apply(table)

        scores = result.table
        assert scores.headers == ["column", "y"]
        assert scores.keys() == ["x"]
        assert float(scores.value("x", 1)) == pytest.approx(1.0)
        assert result.label_counts == {'y': 4}
        assert result.message == "1 columns analyzed (regression), 4 records used."

    def test_multiple_labels_add_best_column(self, write_labels):
        """Test a 'best' column names the label with the strongest correlation."""
        table = _table(["id", "x", "up", "down"], [
            ("r1", ["1", "1", "9"]),
            ("r2", ["2", "3", "6"]),
            ("r3", ["3", "2", "3"]),
            ("r4", ["4", "5", "0"]),
        ])
        step = AnalyzeStep(params={'label_file': str(write_labels(["up", "down"])), 'meta_column': 'feature'})
        scores = step.apply(table).table
        assert scores.headers == ["feature", "up", "down", "best"]
        assert scores.value("x", 3) == "down"
        assert float(scores.value("x", 2)) == pytest.approx(-1.0)

    def test_no_scorable_columns(self, write_labels):
        """Test a regression with nothing to report fails."""
        table = _table(["id", "name", "y"], [("r1", ["a", "1"]), ("r2", ["b", "2"])])
        step = AnalyzeStep(params={'label_file': str(write_labels(["y"]))})
        with pytest.raises(NoValidRecordsError):
            step.apply(table)


@pytest.mark.unit
class TestClassificationAnalysis:
    """Test classification-shaped tables."""

    def test_class_means_and_best(self, write_labels):
        """Test per-class means, NaN for empty classes and the best label."""
        table = _table(["id", "f1", "note", "cls"], [
            ("r1", ["1", "x", "Low"]),
            ("r2", ["3", "x", "Low"]),
            ("r3", ["10", "x", "High"]),
            ("r4", ["bad", "x", "High"]),
        ])
        step = AnalyzeStep(params={'label_file': str(write_labels(["Low", "High", "Mid"]))})
        result = step.apply(table)

        scores = result.table
        assert scores.headers == ["column", "Low", "High", "Mid", "best"]
        assert scores.keys() == ["f1"]
        assert scores.get("f1") == ["2.0", "10.0", "nan", "High"]
        assert result.label_counts == {'Low': 2, 'High': 2, 'Mid': 0}
        assert "(classification)" in result.message

    def test_label_column_not_found(self, write_labels):
        """Test a table with no all-label column fails."""
        table = _table(["id", "f1", "cls"], [("r1", ["1", "Low"]), ("r2", ["2", "Other"])])
        step = AnalyzeStep(params={'label_file': str(write_labels(["Low", "High"]))})
        with pytest.raises(LabelColumnNotFoundError):
            step.apply(table)

    def test_validate(self):
        """Test a label file is required."""
        assert not AnalyzeStep(params={}).validate()
        assert AnalyzeStep(params={'label_file': 'labels.txt'}).validate()
