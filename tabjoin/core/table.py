"""
In-memory keyed table.

A Table is the single piece of state a pipeline run owns. It holds an
ordered list of headers, where headers[0] names the key column, and an
ordered mapping from key to the list of data fields. The key itself is not
repeated in the field list, so every row carries len(headers) - 1 fields.

Author: Daniel Edge
"""

from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from tabjoin.core.column_typer import ColumnKind, ColumnTyper
from tabjoin.core.constants import DEFAULT_KEY_NAME, FIELD_DELIMITER, FILE_ENCODING
from tabjoin.core.exceptions import TableWidthError


class Table:
    """
    Keyed tabular dataset with insertion-ordered rows.

    Duplicate keys overwrite the earlier record in place (the key keeps its
    original position) and are counted in dup_count. Every write checks the
    record width against the headers.

    Example:
        >>> table = Table(["id", "name"])
        >>> table.add_record("k1", ["alpha"])
        >>> table.value("k1", 1)
        'alpha'
    """

    def __init__(self, headers: Optional[Sequence[str]] = None):
        self.headers: List[str] = list(headers) if headers else [DEFAULT_KEY_NAME]
        self._rows: Dict[str, List[str]] = {}
        self.dup_count: int = 0

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def key_name(self) -> str:
        return self.headers[0]

    @property
    def width(self) -> int:
        """Number of columns including the key."""
        return len(self.headers)

    @property
    def data_width(self) -> int:
        return len(self.headers) - 1

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: str) -> bool:
        return key in self._rows

    def __iter__(self) -> Iterator[str]:
        return iter(self._rows)

    def find_column(self, name: str) -> int:
        """Return the index of the first header equal to name, or -1."""
        try:
            return self.headers.index(name)
        except ValueError:
            return -1

    def find_last_column(self, name: str) -> int:
        """Return the index of the last header equal to name, or -1."""
        for idx in range(len(self.headers) - 1, -1, -1):
            if self.headers[idx] == name:
                return idx
        return -1

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_headers(self, names: Iterable[str]) -> None:
        """
        Append headers to an empty table.

        Tables that already hold rows must use append_columns so that every
        row is extended in the same operation.
        """
        names = list(names)
        if self._rows and names:
            raise TableWidthError(next(iter(self._rows)), self.data_width + len(names), self.data_width)
        self.headers.extend(names)

    def add_record(self, key: str, fields: Sequence[str]) -> bool:
        """
        Store a record, overwriting any record with the same key.

        Returns:
            True if the key was already present
        """
        if len(fields) != self.data_width:
            raise TableWidthError(key, self.data_width, len(fields))
        duplicate = key in self._rows
        if duplicate:
            self.dup_count += 1
        self._rows[key] = list(fields)
        return duplicate

    def append_columns(
        self,
        names: Sequence[str],
        values_by_key: Dict[str, Sequence[str]],
        fill: str = ""
    ) -> int:
        """
        Add columns to every row at once.

        Rows whose key is absent from values_by_key are padded with fill.

        Returns:
            Number of rows that received values from values_by_key
        """
        width = len(names)
        for key, values in values_by_key.items():
            if len(values) != width:
                raise TableWidthError(key, width, len(values))
        matched = 0
        padding = [fill] * width
        for key, fields in self._rows.items():
            extra = values_by_key.get(key)
            if extra is None:
                fields.extend(padding)
            else:
                fields.extend(extra)
                matched += 1
        self.headers.extend(names)
        return matched

    def remove(self, key: str) -> None:
        del self._rows[key]

    def retain(self, keep: Set[str]) -> int:
        """Remove every row whose key is not in keep; return the number removed."""
        doomed = [key for key in self._rows if key not in keep]
        for key in doomed:
            del self._rows[key]
        return len(doomed)

    def reduce_cols(self, keep_names: Set[str]) -> int:
        """
        Drop every data column whose header is not in keep_names.

        The key column is always kept. Returns the number of columns removed.
        """
        kept = [idx for idx in range(1, self.width) if self.headers[idx] in keep_names]
        removed = self.data_width - len(kept)
        if removed:
            self.headers = [self.headers[0]] + [self.headers[idx] for idx in kept]
            for key, fields in self._rows.items():
                self._rows[key] = [fields[idx - 1] for idx in kept]
        return removed

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def keys(self) -> List[str]:
        return list(self._rows.keys())

    def get(self, key: str) -> Optional[List[str]]:
        return self._rows.get(key)

    def records(self) -> Iterator[Tuple[str, List[str]]]:
        """Iterate (key, fields) pairs in insertion order."""
        return iter(self._rows.items())

    def full_records(self) -> Iterator[List[str]]:
        """Iterate records with the key prepended, one list per row."""
        for key, fields in self._rows.items():
            yield [key] + fields

    def value(self, key: str, index: int) -> str:
        """Return column index of a row, where index 0 is the key."""
        if index == 0:
            return key
        return self._rows[key][index - 1]

    def column_values(self, index: int) -> List[str]:
        if index == 0:
            return list(self._rows.keys())
        return [fields[index - 1] for fields in self._rows.values()]

    def classify(self, index: int) -> ColumnKind:
        """Infer the data kind of a column by scanning all its values."""
        return ColumnTyper.classify(self.column_values(index))

    def copy_structure(self) -> "Table":
        """Return an empty table with the same headers."""
        return Table(self.headers)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_lines(self) -> Iterator[str]:
        """Yield the header line and data lines, tab-separated, without newlines."""
        yield FIELD_DELIMITER.join(self.headers)
        for record in self.full_records():
            yield FIELD_DELIMITER.join(record)

    def write(self, path) -> None:
        """Write the table as a tab-delimited file."""
        with open(Path(path), "w", encoding=FILE_ENCODING, newline="\n") as out:
            for line in self.to_lines():
                out.write(line)
                out.write("\n")

    def __repr__(self) -> str:
        return f"Table(headers={self.headers!r}, rows={len(self._rows)})"
