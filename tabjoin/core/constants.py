"""
tabjoin Constants.

This module defines the magic numbers, configuration defaults, and fixed
strings used throughout the tabjoin pipeline. Centralizing these values keeps
step implementations and reporters consistent with one another.

Author: Daniel Edge
"""

# ============================================================================
# Tabular File Format
# ============================================================================

# Field delimiter for every table read or written by the pipeline
FIELD_DELIMITER: str = "\t"

# Encoding for all tabular input and output files
FILE_ENCODING: str = "utf-8"

# Default name for the key header when a table is created without one
DEFAULT_KEY_NAME: str = "key"

# Separator placed between a column qualifier and the header name
QUALIFIER_SEPARATOR: str = "."


# ============================================================================
# Configuration Security Limits
# ============================================================================

# Maximum YAML configuration file size (1MB)
# Pipeline definitions are small; anything larger is almost certainly wrong
MAX_YAML_FILE_SIZE: int = 1024 * 1024

# Maximum YAML nesting depth
MAX_YAML_NESTING_DEPTH: int = 20

# Maximum number of keys/items across the whole YAML document
MAX_YAML_KEY_COUNT: int = 10_000

# Maximum reasonable string length inside a configuration file
MAX_STRING_LENGTH: int = 64 * 1024


# ============================================================================
# Classification (binning) Defaults
# ============================================================================

# Default breakpoints: values up to 0.5 are "Low", everything else "High"
DEFAULT_CLASS_LIMITS = (("Low", 0.5), ("High", float("inf")))

# Default name of the column added by a classify step
DEFAULT_CLASS_COLUMN: str = "class"


# ============================================================================
# Analysis Defaults
# ============================================================================

# Key header of the table produced by an analyze step
DEFAULT_META_COLUMN: str = "column"

# Header of the trailing "best label" column in analysis output
BEST_COLUMN: str = "best"

# Minimum number of finite pairs needed to compute a correlation
MIN_CORRELATION_PAIRS: int = 2


# ============================================================================
# Output Defaults
# ============================================================================

# Default worksheet name for spreadsheet output
DEFAULT_SHEET_NAME: str = "New File"

# Default number of decimal places shown for floating-point spreadsheet cells
DEFAULT_DECIMAL_PRECISION: int = 4

# Upper bound on an auto-sized spreadsheet column width (characters)
MAX_EXCEL_COLUMN_WIDTH: int = 60

# Default page title for HTML output
DEFAULT_HTML_TITLE: str = "Combined Output"

# Default URL template for the HTML link column; "{}" receives the cell value
DEFAULT_LINK_TEMPLATE: str = "https://pubmed.ncbi.nlm.nih.gov/{}/"


# ============================================================================
# Confusion Report Layout
# ============================================================================

# Width of each matrix column in the confusion report
CONFUSION_COL_WIDTH: int = 10

# Width of the metric-name column in per-class statistics
CONFUSION_STATS_WIDTH: int = 20
