"""
Output reporters used by the save steps.

Key Components:
- FlatReporter: Tab-delimited text
- ExcelReporter: Formatted .xlsx workbook (openpyxl)
- HTMLReporter: HTML table page (jinja2)
- ConfusionReporter: Confusion-matrix classification report
"""

from .base import Reporter, write_atomic
from .flat_reporter import FlatReporter
from .excel_reporter import ExcelReporter
from .html_reporter import HTMLReporter
from .confusion_reporter import ConfusionReport, ConfusionReporter, build_confusion_report

__all__ = [
    'Reporter',
    'write_atomic',
    'FlatReporter',
    'ExcelReporter',
    'HTMLReporter',
    'ConfusionReport',
    'ConfusionReporter',
    'build_confusion_report',
]
