"""
Unit tests for column type inference.

Author: Daniel Edge
"""

import pytest

from tabjoin.core.column_typer import ColumnKind, ColumnTyper, is_blank


@pytest.mark.unit
class TestColumnTyper:
    """Test ColumnTyper classification."""

    def test_integers_with_blanks_and_padding(self):
        """Test integers, blanks and padded integers stay INTEGER."""
        assert ColumnTyper.classify(["12", "", " 7 "]) is ColumnKind.INTEGER

    def test_one_decimal_demotes_to_double(self):
        """Test a single decimal value turns an integer column into DOUBLE."""
        assert ColumnTyper.classify(["12", "3.5"]) is ColumnKind.DOUBLE

    def test_scientific_notation_is_double(self):
        """Test exponent notation is accepted as a floating-point value."""
        assert ColumnTyper.classify(["1e5", "-2.5E-3", ".5"]) is ColumnKind.DOUBLE

    def test_single_characters_are_flags(self):
        """Test single-character values classify as FLAG."""
        assert ColumnTyper.classify(["Y", "N", "", "Y"]) is ColumnKind.FLAG

    def test_words_are_text(self):
        """Test multi-character words classify as TEXT."""
        assert ColumnTyper.classify(["Y", "No"]) is ColumnKind.TEXT

    def test_numbers_mixed_with_word_are_text(self):
        """Test that one non-numeric word makes the column TEXT."""
        assert ColumnTyper.classify(["1", "2.5", "abc"]) is ColumnKind.TEXT

    def test_empty_column_is_integer(self):
        """Test an empty or all-blank column is INTEGER."""
        assert ColumnTyper.classify([]) is ColumnKind.INTEGER
        assert ColumnTyper.classify(["", "  ", None]) is ColumnKind.INTEGER

    def test_single_digits_stay_integer(self):
        """Test single digits are numbers, not flags."""
        assert ColumnTyper.classify(["1", "0", "1"]) is ColumnKind.INTEGER

    def test_signed_integers(self):
        """Test leading signs are allowed on integers."""
        assert ColumnTyper.classify(["-4", "+17"]) is ColumnKind.INTEGER

    def test_kind_never_moves_back_up(self):
        """Test a column demoted to TEXT stays TEXT after more integers."""
        typer = ColumnTyper()
        for value in ["1", "xyz", "2", "3"]:
            typer.check(value)
        assert typer.kind is ColumnKind.TEXT

    def test_incremental_check(self):
        """Test incremental checking gives the same answer as classify()."""
        typer = ColumnTyper()
        for value in ["12", "", " 7 ", "3.5"]:
            typer.check(value)
        assert typer.kind is ColumnKind.DOUBLE


@pytest.mark.unit
class TestColumnKind:
    """Test ColumnKind properties."""

    def test_numeric_kinds(self):
        """Test is_numeric for every kind."""
        assert ColumnKind.INTEGER.is_numeric
        assert ColumnKind.DOUBLE.is_numeric
        assert not ColumnKind.TEXT.is_numeric
        assert not ColumnKind.FLAG.is_numeric

    def test_css_classes(self):
        """Test the CSS class used in HTML output."""
        assert ColumnKind.INTEGER.css_class == "num"
        assert ColumnKind.DOUBLE.css_class == "num"
        assert ColumnKind.FLAG.css_class == "flag"
        assert ColumnKind.TEXT.css_class == "text"

    def test_is_blank(self):
        """Test blank detection."""
        assert is_blank(None)
        assert is_blank("")
        assert is_blank(" \t ")
        assert not is_blank(" x ")
