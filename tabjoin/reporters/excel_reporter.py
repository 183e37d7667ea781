"""
Excel (.xlsx) output.

Writes the table to a single worksheet with typed cells: integer and
decimal columns are stored as numbers with a matching number format, text is
left-aligned and single-character flag columns are centered. The header row
is styled, columns are sized to their content and the full range is
registered as a filterable worksheet table.
"""

import logging
import re
from pathlib import Path
from typing import Any, List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table as SheetTable, TableStyleInfo

from tabjoin.core.column_typer import ColumnKind, is_blank
from tabjoin.core.constants import (
    DEFAULT_DECIMAL_PRECISION,
    DEFAULT_SHEET_NAME,
    MAX_EXCEL_COLUMN_WIDTH,
)
from tabjoin.core.table import Table
from tabjoin.reporters.base import Reporter, column_kinds, write_atomic

logger = logging.getLogger(__name__)

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="4F81BD", end_color="4F81BD", fill_type="solid")
TABLE_STYLE = "TableStyleMedium2"
TABLE_NAME = "JoinData"

# Characters Excel forbids in sheet names
_SHEET_NAME_INVALID = re.compile(r"[\[\]:*?/\\]")


def safe_sheet_name(name: str) -> str:
    cleaned = _SHEET_NAME_INVALID.sub("_", name or "").strip()
    return (cleaned or DEFAULT_SHEET_NAME)[:31]


def unique_headers(headers: List[str]) -> List[str]:
    """Worksheet tables need distinct, non-blank header cells."""
    result: List[str] = []
    seen = set()
    for idx, header in enumerate(headers, start=1):
        base = header.strip() or f"Column{idx}"
        candidate = base
        suffix = 2
        while candidate in seen:
            candidate = f"{base}_{suffix}"
            suffix += 1
        seen.add(candidate)
        result.append(candidate)
    return result


def cell_value(value: str, kind: ColumnKind) -> Any:
    """Convert a field to the value stored in the worksheet."""
    if is_blank(value):
        return None
    if kind is ColumnKind.INTEGER:
        return int(value.strip())
    if kind is ColumnKind.DOUBLE:
        return float(value.strip())
    return value


class ExcelReporter(Reporter):
    """
    Generates a formatted .xlsx workbook from a table.

    Attributes:
        sheet_name: Worksheet title
        precision: Decimal places displayed for floating-point columns
    """

    def __init__(self, sheet_name: str = DEFAULT_SHEET_NAME, precision: int = DEFAULT_DECIMAL_PRECISION):
        self.sheet_name = safe_sheet_name(sheet_name)
        self.precision = max(0, int(precision))

    @property
    def decimal_format(self) -> str:
        return "0." + "0" * self.precision if self.precision else "0"

    def generate(self, table: Table, output_path) -> Path:
        workbook = self.build_workbook(table)
        return write_atomic(output_path, workbook.save)

    def build_workbook(self, table: Table) -> Workbook:
        kinds = column_kinds(table)
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = self.sheet_name

        headers = unique_headers(table.headers)
        sheet.append(headers)
        for cell in sheet[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal="center")

        widths = [len(h) for h in headers]
        for record in table.full_records():
            sheet.append([cell_value(v, kinds[i]) for i, v in enumerate(record)])
            for i, v in enumerate(record):
                widths[i] = max(widths[i], len(v))

        for col_idx, kind in enumerate(kinds, start=1):
            letter = get_column_letter(col_idx)
            for (cell,) in sheet.iter_rows(min_row=2, min_col=col_idx, max_col=col_idx):
                self._style_cell(cell, kind)
            # Room for the filter button beside the header text
            sheet.column_dimensions[letter].width = min(widths[col_idx - 1] + 4, MAX_EXCEL_COLUMN_WIDTH)

        last_row = max(len(table), 1) + 1
        ref = f"A1:{get_column_letter(table.width)}{last_row}"
        region = SheetTable(displayName=TABLE_NAME, ref=ref)
        region.tableStyleInfo = TableStyleInfo(
            name=TABLE_STYLE,
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        sheet.add_table(region)
        sheet.freeze_panes = "A2"
        logger.debug(f"Built worksheet '{self.sheet_name}' covering {ref}")
        return workbook

    def _style_cell(self, cell, kind: ColumnKind) -> None:
        if kind is ColumnKind.INTEGER:
            cell.number_format = "0"
        elif kind is ColumnKind.DOUBLE:
            cell.number_format = self.decimal_format
        elif kind is ColumnKind.FLAG:
            cell.alignment = Alignment(horizontal="center")
        else:
            cell.alignment = Alignment(horizontal="left")
