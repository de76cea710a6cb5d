"""
csv-schema-validator - Validate CSV files against a declarative schema.

This package provides:
- A parser for the CSV Schema DSL producing an immutable Schema
- A validation engine for CSV files, row streams and pandas DataFrames
- A command line tool mapping validation results to exit codes
"""

from ._version import __version__
from .config import ValidatorConfig
from .exceptions import CsvValidatorError, SchemaParseError, CsvSourceError
from .schema import (
    Schema,
    GlobalDirectives,
    ColumnDefinition,
    SchemaParser,
    parse_schema,
)
from .validation import (
    ValidationEngine,
    FailMessage,
    SchemaMessage,
    ErrorMessage,
    WarningMessage,
    Severity,
    CsvFileSource,
    ProgressCallback,
    pretty_print,
)


__all__ = [
    # Schema components
    'Schema',
    'GlobalDirectives',
    'ColumnDefinition',
    'SchemaParser',
    'parse_schema',

    # Validation components
    'ValidationEngine',
    'FailMessage',
    'SchemaMessage',
    'ErrorMessage',
    'WarningMessage',
    'Severity',
    'CsvFileSource',
    'ProgressCallback',
    'pretty_print',

    # Configuration and errors
    'ValidatorConfig',
    'CsvValidatorError',
    'SchemaParseError',
    'CsvSourceError',

    # Version
    '__version__',
]
