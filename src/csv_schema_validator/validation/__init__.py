"""
Validation of CSV content against a compiled schema.
"""

from .validation_engine import ValidationEngine
from .validation_result import (
    FailMessage,
    SchemaMessage,
    ErrorMessage,
    WarningMessage,
    Severity,
    contains_error,
    pretty_print,
)
from .csv_source import CsvFileSource
from .progress import ProgressCallback, CommandLineProgress

__all__ = [
    'ValidationEngine',
    'FailMessage',
    'SchemaMessage',
    'ErrorMessage',
    'WarningMessage',
    'Severity',
    'contains_error',
    'pretty_print',
    'CsvFileSource',
    'ProgressCallback',
    'CommandLineProgress',
]
