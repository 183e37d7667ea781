"""
Column type inference.

Scans the values of a column and decides whether it holds integers,
floating-point numbers, free text, or single-character flags. Output
formatters use the result to pick alignment and number formats; it is
never stored on the table.

The numeric kinds form a chain, INTEGER -> DOUBLE -> TEXT, and a column only
ever moves down that chain as values are checked. FLAG is a refinement of
TEXT: a text column whose every non-blank value is a single character.
"""

import re
from enum import Enum
from typing import Iterable, Optional


INTEGER_PATTERN = re.compile(r"\s*[-+]?\d+\s*")
DOUBLE_PATTERN = re.compile(r"\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?\s*")
FLAG_PATTERN = re.compile(r"\s*\S\s*")


class ColumnKind(Enum):
    """Data kind of a table column."""
    FLAG = "flag"
    INTEGER = "integer"
    DOUBLE = "double"
    TEXT = "text"

    @property
    def is_numeric(self) -> bool:
        return self in (ColumnKind.INTEGER, ColumnKind.DOUBLE)

    @property
    def css_class(self) -> str:
        """CSS class used for cells of this kind in HTML output."""
        if self.is_numeric:
            return "num"
        if self is ColumnKind.FLAG:
            return "flag"
        return "text"


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ColumnTyper:
    """
    Incremental column classifier.

    Feed values through check() and read the result from kind. An empty or
    all-blank column is INTEGER.

    Example:
        >>> typer = ColumnTyper()
        >>> for v in ["12", "", " 7 ", "3.5"]:
        ...     typer.check(v)
        >>> typer.kind
        <ColumnKind.DOUBLE: 'double'>
    """

    def __init__(self):
        self._numeric = ColumnKind.INTEGER
        self._flag_candidate = True

    def check(self, value: Optional[str]) -> None:
        """Incorporate one value into the classification."""
        if is_blank(value):
            return
        if self._flag_candidate and not FLAG_PATTERN.fullmatch(value):
            self._flag_candidate = False
        if self._numeric is ColumnKind.INTEGER and not INTEGER_PATTERN.fullmatch(value):
            self._numeric = ColumnKind.DOUBLE
        if self._numeric is ColumnKind.DOUBLE and not DOUBLE_PATTERN.fullmatch(value):
            self._numeric = ColumnKind.TEXT

    @property
    def kind(self) -> ColumnKind:
        if self._numeric is ColumnKind.TEXT and self._flag_candidate:
            return ColumnKind.FLAG
        return self._numeric

    @classmethod
    def classify(cls, values: Iterable[Optional[str]]) -> ColumnKind:
        """Classify a whole column in one call."""
        typer = cls()
        for value in values:
            typer.check(value)
        return typer.kind
