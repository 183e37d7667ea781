"""
Tabular file loaders.

Key Components:
- TabFileLoader: Reads a tab-delimited file into headers and string rows
- load_table: Reads a file into a keyed Table
- read_key_set / read_labels: Helpers for filter and label files
"""

from .tab_loader import TabFile, TabFileLoader, load_table, read_key_set, read_labels, read_tab_file

__all__ = [
    'TabFile',
    'TabFileLoader',
    'load_table',
    'read_key_set',
    'read_labels',
    'read_tab_file',
]
