"""Numeric parsing helpers shared by the statistical steps."""

import math
from typing import Iterable, List, Optional

import numpy as np

from tabjoin.core.exceptions import InvalidNumericLiteral


def parse_number(value: Optional[str]) -> float:
    """
    Parse a field as a float.

    Infinities are accepted; NaN, blanks, and anything else raise
    InvalidNumericLiteral so the caller can count the row as invalid.
    """
    if value is None:
        raise InvalidNumericLiteral(value)
    text = value.strip()
    if not text or "_" in text:
        raise InvalidNumericLiteral(value)
    try:
        result = float(text)
    except ValueError:
        raise InvalidNumericLiteral(value)
    if math.isnan(result):
        raise InvalidNumericLiteral(value)
    return result


def to_float_or_nan(value: Optional[str]) -> float:
    """Parse a field, mapping anything unparseable to NaN."""
    try:
        return parse_number(value)
    except InvalidNumericLiteral:
        return math.nan


def numeric_array(values: Iterable[Optional[str]]) -> np.ndarray:
    """Convert a column of strings to a float array with NaN for bad values."""
    return np.array([to_float_or_nan(v) for v in values], dtype=float)


def format_number(value: float) -> str:
    """Render a computed statistic the way it is written to output tables."""
    return repr(float(value))


def finite_count(values: np.ndarray) -> int:
    return int(np.isfinite(values).sum())


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 when the denominator is zero."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def strictly_ascending(values: List[float]) -> bool:
    return all(a < b for a, b in zip(values, values[1:]))
