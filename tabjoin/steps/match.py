"""Regular-expression filter step."""

import logging
import re
import time
from enum import Enum
from typing import Optional, Pattern

from tabjoin.core.exceptions import ColumnNotFoundError, InvalidPatternError
from tabjoin.core.results import StepResult
from tabjoin.core.table import Table
from tabjoin.steps.base import RunContext, Step
from tabjoin.steps.registry import register_step

logger = logging.getLogger(__name__)


class MatchMode(Enum):
    """How a row's field is tested against the pattern."""
    INCLUDE = "include"
    EXCLUDE = "exclude"
    SUBSTRING = "substring"

    @property
    def description(self) -> str:
        return {
            MatchMode.INCLUDE: "Include records with a matching field.",
            MatchMode.EXCLUDE: "Include only records without a matching field.",
            MatchMode.SUBSTRING: "Include records with a matching substring in the field.",
        }[self]

    def keep(self, pattern: Pattern, value: str) -> bool:
        if self is MatchMode.INCLUDE:
            return pattern.fullmatch(value) is not None
        if self is MatchMode.EXCLUDE:
            return pattern.fullmatch(value) is None
        return pattern.search(value) is not None


@register_step("match")
class MatchStep(Step):
    """
    Keep or drop rows by matching one column against a regular expression.

    The pattern is compiled when the step is built, so a bad pattern is
    reported before anything runs.

    Configuration:
        params:
            column (str): Column to test
            pattern (str): Regular expression (or literal text, see below)
            mode (str): include | exclude | substring (default: include)
            ignore_case (bool): Case-insensitive matching (default: false)
            literal (bool): Treat the pattern as plain text (default: false)

    Example YAML:
        - type: match
          column: genus
          pattern: "escherichia"
          mode: include
          ignore_case: true

    Raises:
        InvalidPatternError: If the pattern does not compile
    """

    def __init__(self, params=None, name=None, base_dir=None):
        super().__init__(params, name, base_dir)
        self.column = self.param_str("column")
        self.mode = self._parse_mode(self.param_str("mode", "include"))
        self.pattern: Optional[Pattern] = self._compile(
            self.param_str("pattern"),
            ignore_case=self.param_bool("ignore_case"),
            literal=self.param_bool("literal"),
        )

    @staticmethod
    def _parse_mode(value: str) -> Optional[MatchMode]:
        try:
            return MatchMode(value.strip().lower())
        except ValueError:
            return None

    @staticmethod
    def _compile(text: str, ignore_case: bool, literal: bool) -> Optional[Pattern]:
        if not text:
            return None
        if literal:
            text = re.escape(text)
        flags = re.IGNORECASE if ignore_case else 0
        try:
            return re.compile(text, flags)
        except re.error as e:
            raise InvalidPatternError(text, str(e))

    def validate(self) -> bool:
        return bool(self.column.strip()) and self.pattern is not None and self.mode is not None

    def get_description(self) -> str:
        return self.mode.description if self.mode else "Invalid match mode."

    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        start_time = time.time()
        col_idx = table.find_column(self.column)
        if col_idx < 0:
            raise ColumnNotFoundError(self.column, role="match column")
        processed = 0
        for key in table.keys():
            processed += 1
            if not self.mode.keep(self.pattern, table.value(key, col_idx)):
                table.remove(key)
        kept = len(table)
        message = f"{processed} records processed, {kept} kept."
        return self._create_result(
            message,
            table,
            start_time,
            counters={'processed': processed, 'kept': kept, 'deleted': processed - kept},
        )
