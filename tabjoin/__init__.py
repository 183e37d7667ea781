"""
tabjoin - keyed tabular join/transform pipeline.

Reads tab-delimited tables, applies an ordered list of steps (joins,
filters, binning, column analysis, stratified sampling) and writes the
result as flat text, Excel, HTML or a confusion-matrix report.
"""

__version__ = "0.1.0"

from tabjoin.core.table import Table
from tabjoin.core.column_typer import ColumnKind, ColumnTyper
from tabjoin.core.pipeline import Pipeline
from tabjoin.core.config import PipelineConfig

__all__ = [
    'Table',
    'ColumnKind',
    'ColumnTyper',
    'Pipeline',
    'PipelineConfig',
    '__version__',
]
