"""
Save steps.

Each save step hands the current table to a reporter and passes the table
on unchanged, so several saves can follow one another at the end of a
pipeline.
"""

import logging
import time
from abc import abstractmethod
from typing import Optional

from tabjoin.core.constants import (
    DEFAULT_DECIMAL_PRECISION,
    DEFAULT_HTML_TITLE,
    DEFAULT_LINK_TEMPLATE,
    DEFAULT_SHEET_NAME,
)
from tabjoin.core.results import StepResult
from tabjoin.core.table import Table
from tabjoin.loaders.tab_loader import read_labels
from tabjoin.reporters.base import Reporter
from tabjoin.reporters.confusion_reporter import ConfusionReporter
from tabjoin.reporters.excel_reporter import ExcelReporter
from tabjoin.reporters.flat_reporter import FlatReporter
from tabjoin.reporters.html_reporter import HTMLReporter
from tabjoin.steps.base import RunContext, Step
from tabjoin.steps.registry import register_step

logger = logging.getLogger(__name__)


class SaveStep(Step):
    """
    Base for steps that write the table to a file.

    Configuration:
        params:
            path (str): Output file
    """

    is_output = True

    def validate(self) -> bool:
        return bool(self.param_str("path").strip())

    @abstractmethod
    def create_reporter(self) -> Reporter:
        """Build the reporter that writes this step's output."""
        pass

    def apply(self, table: Table, context: Optional[RunContext] = None) -> StepResult:
        start_time = time.time()
        output_path = self.resolve_path(self.param_str("path"))
        reporter = self.create_reporter()
        written = reporter.generate(table, output_path)
        logger.info(f"{self.step_type}: wrote {written}")
        return self._finish(reporter, table, str(written), start_time)

    def _finish(self, reporter: Reporter, table: Table, written: str, start_time: float) -> StepResult:
        message = f"{len(table)} records written to {written}."
        return self._create_result(
            message,
            table,
            start_time,
            counters={'records': len(table), 'columns': table.width},
            output_path=written,
        )


@register_step("save_flat")
class FlatSaveStep(SaveStep):
    """Save the table as a tab-delimited text file."""

    def create_reporter(self) -> Reporter:
        return FlatReporter()


@register_step("save_excel")
class ExcelSaveStep(SaveStep):
    """
    Save the table as a formatted Excel workbook.

    Configuration:
        params:
            path (str): Output .xlsx file
            sheet_name (str, optional): Worksheet title (default: "New File")
            precision (int, optional): Decimal places for floating-point columns (default: 4)
    """

    def validate(self) -> bool:
        if not super().validate():
            return False
        try:
            return int(self.params.get("precision", DEFAULT_DECIMAL_PRECISION)) >= 0
        except (TypeError, ValueError):
            return False

    def create_reporter(self) -> Reporter:
        return ExcelReporter(
            sheet_name=self.param_str("sheet_name", DEFAULT_SHEET_NAME),
            precision=int(self.params.get("precision", DEFAULT_DECIMAL_PRECISION)),
        )


@register_step("save_html")
class HtmlSaveStep(SaveStep):
    """
    Save the table as an HTML page.

    Configuration:
        params:
            path (str): Output .html file
            title (str, optional): Page title (default: "Combined Output")
            link_column (str, optional): Column whose values become links
            link_template (str, optional): URL template, "{}" receives the value
    """

    def create_reporter(self) -> Reporter:
        return HTMLReporter(
            title=self.param_str("title", DEFAULT_HTML_TITLE),
            link_column=self.param_str("link_column") or None,
            link_template=self.param_str("link_template", DEFAULT_LINK_TEMPLATE),
        )


@register_step("save_confusion")
class ConfusionSaveStep(SaveStep):
    """
    Write a confusion-matrix report comparing expected and predicted classes.

    Configuration:
        params:
            path (str): Output text file
            expect_column (str): Column holding the true class
            predict_column (str): Column holding the predicted class
            label_file (str): File with one label per line

    Example YAML:
        - type: save_confusion
          path: confusion.txt
          expect_column: actual
          predict_column: predicted
          label_file: labels.txt
    """

    def validate(self) -> bool:
        return super().validate() and all(
            self.param_str(key).strip() for key in ("expect_column", "predict_column", "label_file")
        )

    def create_reporter(self) -> Reporter:
        labels = read_labels(self.resolve_path(self.param_str("label_file")))
        return ConfusionReporter(
            expect_column=self.param_str("expect_column"),
            predict_column=self.param_str("predict_column"),
            labels=labels,
        )

    def _finish(self, reporter: Reporter, table: Table, written: str, start_time: float) -> StepResult:
        report = reporter.last_report
        message = (
            f"{report.valid} predictions found, {report.invalid} invalid, "
            f"accuracy {report.accuracy * 100.0:1.2f}%. Report written to {written}."
        )
        return self._create_result(
            message,
            table,
            start_time,
            counters={'valid': report.valid, 'invalid': report.invalid, 'correct': report.correct},
            label_counts=report.label_counts,
            output_path=written,
        )
