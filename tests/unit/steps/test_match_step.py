"""
Unit tests for the regular-expression match step.

Author: Daniel Edge
"""

import pytest

from tabjoin.core.exceptions import ColumnNotFoundError, InvalidPatternError
from tabjoin.core.table import Table
from tabjoin.steps.match import MatchMode, MatchStep


def _table():
    table = Table(["id", "genus"])
    table.add_record("k1", ["Escherichia"])
    table.add_record("k2", ["Bacillus"])
    table.add_record("k3", ["escherichia coli"])
    table.add_record("k4", ["a.b"])
    return table


def _run(**params):
    params.setdefault('column', 'genus')
    return MatchStep(params=params).apply(_table())


@pytest.mark.unit
class TestMatchModes:
    """Test the three match modes."""

    def test_include_requires_whole_field(self):
        """Test INCLUDE keeps only fields matching the whole pattern."""
        result = _run(pattern="Escherichia", mode="include")
        assert result.table.keys() == ["k1"]
        assert result.message == "4 records processed, 1 kept."

    def test_exclude(self):
        """Test EXCLUDE keeps fields that do not match."""
        result = _run(pattern="Escherichia", mode="exclude")
        assert result.table.keys() == ["k2", "k3", "k4"]

    def test_substring(self):
        """Test SUBSTRING keeps fields containing the pattern."""
        result = _run(pattern="cher", mode="substring")
        assert result.table.keys() == ["k1", "k3"]

    def test_ignore_case(self):
        """Test case-insensitive matching."""
        result = _run(pattern="escherichia", mode="include", ignore_case=True)
        assert result.table.keys() == ["k1"]

    def test_literal_pattern(self):
        """Test literal patterns escape regex metacharacters."""
        assert _run(pattern="a.b", mode="include", literal=True).table.keys() == ["k4"]
        assert _run(pattern="...", mode="include", literal=True).table.keys() == []

    def test_mode_descriptions(self):
        """Test every mode has a description."""
        for mode in MatchMode:
            assert mode.description


@pytest.mark.unit
class TestMatchConfiguration:
    """Test configuration and errors."""

    def test_invalid_pattern_raised_at_construction(self):
        """Test a bad pattern fails when the step is built."""
        with pytest.raises(InvalidPatternError):
            MatchStep(params={'column': 'genus', 'pattern': '(unclosed'})

    def test_unknown_mode_is_invalid(self):
        """Test an unknown mode fails validation."""
        step = MatchStep(params={'column': 'genus', 'pattern': 'x', 'mode': 'sideways'})
        assert not step.validate()

    def test_validate(self):
        """Test column and pattern are required."""
        assert MatchStep(params={'column': 'genus', 'pattern': 'x'}).validate()
        assert not MatchStep(params={'pattern': 'x'}).validate()
        assert not MatchStep(params={'column': 'genus'}).validate()

    def test_missing_column(self):
        """Test matching an unknown column fails the step."""
        with pytest.raises(ColumnNotFoundError):
            _run(column="species", pattern="x")
