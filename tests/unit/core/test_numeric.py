"""
Unit tests for numeric parsing helpers.
"""

import math

import numpy as np
import pytest

from tabjoin.core.exceptions import InvalidNumericLiteral
from tabjoin.core.numeric import (
    format_number,
    numeric_array,
    parse_number,
    safe_ratio,
    strictly_ascending,
)


@pytest.mark.unit
class TestParseNumber:
    """Test parse_number."""

    @pytest.mark.parametrize("text,expected", [
        ("0.3", 0.3),
        (" 42 ", 42.0),
        ("-1e3", -1000.0),
        (".5", 0.5),
    ])
    def test_valid_numbers(self, text, expected):
        """Test ordinary numeric text is parsed."""
        assert parse_number(text) == expected

    def test_infinity_accepted(self):
        """Test infinities parse."""
        assert parse_number("inf") == math.inf
        assert parse_number("-Infinity") == -math.inf

    @pytest.mark.parametrize("text", ["", "   ", "abc", "nan", "NaN", "1_000", None])
    def test_invalid_numbers(self, text):
        """Test blanks, NaN and non-numbers raise InvalidNumericLiteral."""
        with pytest.raises(InvalidNumericLiteral):
            parse_number(text)


@pytest.mark.unit
class TestNumericHelpers:
    """Test array conversion, formatting and ratios."""

    def test_numeric_array_maps_bad_values_to_nan(self):
        """Test unparseable values become NaN."""
        values = numeric_array(["1", "x", "", "2.5"])
        assert values[0] == 1.0
        assert np.isnan(values[1])
        assert np.isnan(values[2])
        assert values[3] == 2.5

    def test_format_number(self):
        """Test statistics are written in shortest round-trip form."""
        assert format_number(1.0) == "1.0"
        assert format_number(0.1) == "0.1"
        assert format_number(math.nan) == "nan"
        assert format_number(np.float64(-0.5)) == "-0.5"

    def test_safe_ratio(self):
        """Test division by zero yields zero."""
        assert safe_ratio(1, 4) == 0.25
        assert safe_ratio(3, 0) == 0.0

    def test_strictly_ascending(self):
        """Test strict ordering of class limits."""
        assert strictly_ascending([0.1, 0.5, math.inf])
        assert not strictly_ascending([0.5, 0.5])
        assert strictly_ascending([])
