"""
tabjoin Exception Hierarchy.

This module defines the exception hierarchy for the tabjoin pipeline,
giving every failure a category and a severity so the pipeline driver,
the CLI, and observers can handle errors uniformly.

Exception Severity Levels:
    - FATAL: Configuration is unusable, nothing runs
    - CRITICAL: A step failed structurally, the pipeline run aborts
    - RECOVERABLE: Reserved for errors a caller may retry or skip
    - WARNING: Value-level problem, counted and skipped per row

Author: Daniel Edge
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorSeverity(Enum):
    """
    Classify error severity for handling decisions.

    Attributes:
        FATAL: Unusable configuration, stop before running
        CRITICAL: Structural step failure, abort the pipeline run
        RECOVERABLE: Error that a caller may choose to tolerate
        WARNING: Per-value problem, count it and continue
    """
    FATAL = "fatal"
    CRITICAL = "critical"
    RECOVERABLE = "recoverable"
    WARNING = "warning"


class TabJoinException(Exception):
    """
    Base exception for all tabjoin errors with enhanced context.

    Attributes:
        message (str): Human-readable error message
        severity (ErrorSeverity): Error severity level
        details (Dict[str, Any]): Additional context (file path, column, step)
        original_exception (Optional[Exception]): Original exception if wrapping

    Example:
        >>> try:
        ...     table = load_table('main.tbl')
        ... except OSError as e:
        ...     raise TabJoinException(
        ...         "Could not read input",
        ...         severity=ErrorSeverity.CRITICAL,
        ...         details={'file': 'main.tbl'},
        ...         original_exception=e
        ...     )
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.RECOVERABLE,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.details = details or {}
        self.original_exception = original_exception

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for logging/reporting.

        Returns:
            Dictionary containing exception details suitable for JSON serialization
        """
        return {
            'type': self.__class__.__name__,
            'message': self.message,
            'severity': self.severity.value,
            'details': self.details,
            'original_error': str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors (Fatal)
# ============================================================================

class ConfigError(TabJoinException):
    """
    Configuration file errors (fatal - nothing runs).

    Raised when:
    - Configuration file not found
    - Invalid YAML syntax
    - Required configuration fields missing
    - Unknown step type

    Attributes:
        field (Optional[str]): Specific config field that caused error
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.FATAL,
            details={'field': field} if field else {}
        )
        self.field = field


class YAMLSizeError(ConfigError):
    """YAML file too large."""

    def __init__(self, message: str, file_size: Optional[int] = None, max_size: Optional[int] = None):
        super().__init__(message)
        self.details.update({
            'file_size': file_size,
            'max_size': max_size
        })


class ConfigValidationError(ConfigError):
    """
    Configuration is well-formed YAML but does not describe a runnable pipeline.

    Example:
        >>> raise ConfigValidationError(
        ...     "First step must be a load step",
        ...     field="steps[0].type",
        ...     expected="load",
        ...     actual="left_join"
        ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None
    ):
        super().__init__(message, field)
        self.details.update({
            'expected': expected,
            'actual': actual
        })


class InvalidPatternError(ConfigError):
    """
    Regular expression failed to compile.

    Raised when a match step is constructed, never deferred to execution.
    """

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid match pattern '{pattern}': {reason}", field="pattern")
        self.pattern = pattern
        self.details['pattern'] = pattern


# ============================================================================
# Data Loading Errors (Critical)
# ============================================================================

class DataLoadError(TabJoinException):
    """
    Tabular file loading errors (critical - abort the run).

    Attributes:
        file_path (str): Path to file that failed to load
        line_number (Optional[int]): Line number where error occurred
    """

    def __init__(
        self,
        message: str,
        file_path: str,
        line_number: Optional[int] = None,
        original_exception: Optional[Exception] = None
    ):
        details = {'file_path': str(file_path)}
        if line_number is not None:
            details['line_number'] = line_number

        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details=details,
            original_exception=original_exception
        )
        self.file_path = str(file_path)
        self.line_number = line_number


class MissingFileError(DataLoadError):
    """Input, secondary, or label file does not exist."""

    def __init__(self, file_path: str):
        super().__init__(f"File not found: {file_path}", file_path)


class EmptyOrMalformedHeaderError(DataLoadError):
    """
    Tabular file has no header line, no columns, or rows wider than the header.
    """


# ============================================================================
# Step Execution Errors (Critical)
# ============================================================================

class StepExecutionError(TabJoinException):
    """
    Structural failure while a step is being applied.

    Attributes:
        step_type (Optional[str]): Type of the step that failed, when known
    """

    def __init__(
        self,
        message: str,
        step_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        merged = dict(details or {})
        if step_type:
            merged['step_type'] = step_type
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details=merged,
            original_exception=original_exception
        )
        self.step_type = step_type


class ColumnNotFoundError(StepExecutionError):
    """
    A named column (key, match, scatter, link, label...) is absent.

    Attributes:
        column (str): Column name that was requested
        role (str): What the column was needed for
        source (Optional[str]): File or table that was searched
    """

    def __init__(self, column: str, role: str = "column", source: Optional[str] = None):
        where = f" in {source}" if source else ""
        super().__init__(
            f"Could not find {role} '{column}'{where}.",
            details={'column': column, 'role': role, 'source': source}
        )
        self.column = column
        self.role = role
        self.source = source


class NoValidRecordsError(StepExecutionError):
    """A step found zero usable rows to compute its result from."""


class LabelColumnNotFoundError(StepExecutionError):
    """No column of a classification-shaped table holds only known labels."""

    def __init__(self, source: Optional[str] = None):
        super().__init__(
            "Label column not found in classification file.",
            details={'source': source} if source else None
        )


class TableWidthError(TabJoinException):
    """
    Record width does not agree with the table headers.

    Attributes:
        key (str): Key of the offending record
        expected (int): Number of data fields the headers call for
        actual (int): Number of data fields supplied
    """

    def __init__(self, key: str, expected: int, actual: int):
        super().__init__(
            f"Record '{key}' has {actual} data fields but the table has {expected} data columns.",
            severity=ErrorSeverity.CRITICAL,
            details={'key': key, 'expected': expected, 'actual': actual}
        )
        self.key = key
        self.expected = expected
        self.actual = actual


class OutputWriteError(TabJoinException):
    """A save step could not produce its artifact; the destination is untouched."""

    def __init__(self, message: str, file_path: str, original_exception: Optional[Exception] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details={'file_path': str(file_path)},
            original_exception=original_exception
        )
        self.file_path = str(file_path)


class StepFailedError(TabJoinException):
    """
    Raised by the pipeline when any step fails, identifying the step.

    The underlying error is kept as ``original_exception`` and its severity
    is carried over.

    Attributes:
        step_index (int): Zero-based position of the step in the pipeline
        step_name (str): Display name of the step
        step_type (str): Registry type of the step
        report (Optional[PipelineReport]): Report of the aborted run, set by the pipeline
    """

    def __init__(self, step_index: int, step_name: str, step_type: str, error: Exception):
        severity = error.severity if isinstance(error, TabJoinException) else ErrorSeverity.CRITICAL
        super().__init__(
            f"Step {step_index + 1} ({step_name}) failed: {error}",
            severity=severity,
            details={'step_index': step_index, 'step_name': step_name, 'step_type': step_type},
            original_exception=error
        )
        self.step_index = step_index
        self.step_name = step_name
        self.step_type = step_type
        self.report = None


# ============================================================================
# Value-Level Errors (Warning)
# ============================================================================

class InvalidNumericLiteral(TabJoinException):
    """
    A field that should be numeric could not be parsed.

    Never propagated out of a step: callers catch it, count the row as
    invalid, and carry on.
    """

    def __init__(self, value: Any):
        super().__init__(
            f"Not a valid number: '{value}'",
            severity=ErrorSeverity.WARNING,
            details={'value': value}
        )
        self.value = value
