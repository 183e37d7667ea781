"""
Tab-delimited file loader.

Reads the pipeline's primary input into a Table, and reads secondary files,
key sets and label files for the steps that consult them. Parsing is done
with pandas, keeping every field as an uninterpreted string.
"""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Set

import pandas as pd

from tabjoin.core.constants import FIELD_DELIMITER, FILE_ENCODING, QUALIFIER_SEPARATOR
from tabjoin.core.exceptions import (
    ColumnNotFoundError,
    DataLoadError,
    EmptyOrMalformedHeaderError,
    MissingFileError,
)
from tabjoin.core.table import Table

logger = logging.getLogger(__name__)


@dataclass
class TabFile:
    """
    Raw contents of a tab-delimited file: headers plus rows of strings.

    Used for secondary inputs that are read by a single step and then dropped.
    """
    path: str
    headers: List[str]
    rows: List[List[str]] = field(default_factory=list)

    def find_column(self, name: str) -> int:
        try:
            return self.headers.index(name)
        except ValueError:
            return -1

    def require_column(self, name: Optional[str], role: str = "key column") -> int:
        """
        Resolve a column name to its index, defaulting to the first column.

        Raises:
            ColumnNotFoundError: If name is given and not among the headers
        """
        if not name:
            return 0
        idx = self.find_column(name)
        if idx < 0:
            raise ColumnNotFoundError(name, role=role, source=self.path)
        return idx


class TabFileLoader:
    """Loader for UTF-8 tab-delimited files with a single header line."""

    def __init__(self, file_path, encoding: str = FILE_ENCODING):
        self.file_path = Path(file_path)
        self.encoding = encoding

    def load(self) -> TabFile:
        """
        Read the whole file.

        Raises:
            MissingFileError: If the file does not exist
            EmptyOrMalformedHeaderError: If there is no header or a row is too wide
            DataLoadError: For other read failures (encoding, permissions)
        """
        if not self.file_path.is_file():
            raise MissingFileError(str(self.file_path))

        try:
            frame = pd.read_csv(
                self.file_path,
                sep=FIELD_DELIMITER,
                header=None,
                dtype=str,
                encoding=self.encoding,
                keep_default_na=False,
                na_filter=False,
                quoting=csv.QUOTE_NONE,
                skip_blank_lines=True,
            )
        except pd.errors.EmptyDataError:
            raise EmptyOrMalformedHeaderError(
                f"No header line found in {self.file_path}", str(self.file_path)
            )
        except pd.errors.ParserError as e:
            raise EmptyOrMalformedHeaderError(
                f"Row has more fields than the header in {self.file_path}: {e}",
                str(self.file_path),
                original_exception=e
            )
        except UnicodeDecodeError as e:
            raise DataLoadError(
                f"Encoding error in {self.file_path}: cannot decode file as {self.encoding}",
                str(self.file_path),
                original_exception=e
            )
        except OSError as e:
            raise DataLoadError(
                f"Error reading {self.file_path}: {e}",
                str(self.file_path),
                original_exception=e
            )

        frame = frame.fillna("")
        lines = frame.values.tolist()
        if not lines:
            raise EmptyOrMalformedHeaderError(
                f"No header line found in {self.file_path}", str(self.file_path)
            )
        headers = [str(h) for h in lines[0]]
        if not any(h.strip() for h in headers):
            raise EmptyOrMalformedHeaderError(
                f"Header line of {self.file_path} is blank", str(self.file_path)
            )
        rows = [[str(v) for v in line] for line in lines[1:]]
        logger.debug(f"Read {len(rows)} rows x {len(headers)} columns from {self.file_path}")
        return TabFile(str(self.file_path), headers, rows)


def read_tab_file(path) -> TabFile:
    return TabFileLoader(path).load()


def qualify(names: Sequence[str], qualifier: Optional[str]) -> List[str]:
    """Prefix header names with 'qualifier.' when a qualifier is given."""
    if not qualifier:
        return list(names)
    return [f"{qualifier}{QUALIFIER_SEPARATOR}{name}" for name in names]


def select_columns(tab_file: TabFile, key_idx: int, columns: Optional[Sequence[str]]) -> List[int]:
    """
    Resolve a column selection to indices.

    With no explicit selection every column except the key is used.

    Raises:
        ColumnNotFoundError: If a selected column is not in the file
    """
    if not columns:
        return [idx for idx in range(len(tab_file.headers)) if idx != key_idx]
    indices = []
    for name in columns:
        idx = tab_file.find_column(name)
        if idx < 0:
            raise ColumnNotFoundError(name, role="selected column", source=tab_file.path)
        indices.append(idx)
    return indices


def load_table(
    path,
    key_column: Optional[str] = None,
    columns: Optional[Sequence[str]] = None,
    qualifier: Optional[str] = None
) -> Table:
    """
    Load a tab-delimited file as a Table.

    Args:
        path: File to read
        key_column: Header of the key column (default: the first column)
        columns: Data columns to keep (default: all non-key columns)
        qualifier: Optional prefix for the data headers

    Returns:
        Populated Table; duplicate keys are counted in Table.dup_count
    """
    tab_file = read_tab_file(path)
    key_idx = tab_file.require_column(key_column)
    data_idx = select_columns(tab_file, key_idx, columns)
    if not data_idx:
        raise EmptyOrMalformedHeaderError(f"{tab_file.path} has no data columns", tab_file.path)

    table = Table([tab_file.headers[key_idx]])
    table.add_headers(qualify([tab_file.headers[i] for i in data_idx], qualifier))
    for row in tab_file.rows:
        table.add_record(row[key_idx], [row[i] for i in data_idx])
    return table


def read_key_set(path, key_column: Optional[str] = None) -> Set[str]:
    """Read one column of a tab-delimited file into a set."""
    tab_file = read_tab_file(path)
    key_idx = tab_file.require_column(key_column)
    return {row[key_idx] for row in tab_file.rows}


def read_labels(path) -> List[str]:
    """
    Read a label file: one label per line, blank lines ignored.

    Returns:
        Labels in file order, without duplicates
    """
    label_path = Path(path)
    if not label_path.is_file():
        raise MissingFileError(str(label_path))
    labels: List[str] = []
    with open(label_path, "r", encoding=FILE_ENCODING) as f:
        for line in f:
            label = line.strip()
            if label and label not in labels:
                labels.append(label)
    if not labels:
        raise EmptyOrMalformedHeaderError(f"Label file {label_path} contains no labels", str(label_path))
    return labels
