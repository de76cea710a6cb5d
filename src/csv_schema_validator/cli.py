"""Command line entrypoint for csv-schema-validator.

Parses a schema file, validates a CSV file against it and maps the outcome
to an exit code:

- 0: the CSV is valid (warnings allowed)
- 1: incorrect arguments
- 2: the schema is invalid
- 3: the CSV is invalid
"""

import argparse
import codecs
import os
import sys
from enum import IntEnum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ._version import __version__
from .config import ValidatorConfig
from .exceptions import CsvSourceError, SchemaParseError
from .schema.parser import SchemaParser
from .utils.logger import set_log_level
from .utils.paths import PathResolver, PathSubstitution
from .validation.progress import CommandLineProgress, ProgressCallback
from .validation.validation_engine import ValidationEngine
from .validation.validation_result import contains_error, pretty_print


class ExitCode(IntEnum):
    VALID_CSV = 0
    INCORRECT_ARGUMENTS = 1
    INVALID_SCHEMA = 2
    INVALID_CSV = 3


ExitStatus = Tuple[str, ExitCode]


def _encoding(value: str) -> str:
    try:
        codecs.lookup(value)
    except LookupError:
        raise argparse.ArgumentTypeError(f'unknown encoding: {value}')

    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='csv-schema-validate',
        description='Validate a CSV file against a CSV Schema',
    )
    parser.add_argument('csv_path', help='The path to the CSV file to validate')
    parser.add_argument(
        'schema_path', help='The path to the CSV Schema file to use for validation'
    )
    parser.add_argument(
        '--trace-parser',
        '-t',
        action='store_true',
        help='Prints a trace of the schema parse',
    )
    parser.add_argument(
        '--fail-fast',
        '-f',
        action='store_true',
        help='Stops on the first validation error rather than reporting all errors',
    )
    parser.add_argument(
        '--path',
        '-p',
        action='append',
        nargs=2,
        metavar=('FROM', 'TO'),
        default=[],
        help='Substitute a file path (or part of) in the CSV for a different file path '
        '(can be specified multiple times)',
    )
    parser.add_argument(
        '--case-sensitive-paths',
        '-c',
        action='store_true',
        help='Enforces case-sensitive file path checking',
    )
    parser.add_argument(
        '--csv-encoding',
        '-x',
        type=_encoding,
        help='Defines the charset encoding used in the CSV file (default: utf-8)',
    )
    parser.add_argument(
        '--csv-schema-encoding',
        '-y',
        type=_encoding,
        help='Defines the charset encoding used in the CSV Schema file (default: utf-8)',
    )
    parser.add_argument(
        '--disable-utf8-validation',
        action='store_true',
        help='Disable UTF-8 validation for CSV files',
    )
    parser.add_argument(
        '--show-progress',
        action='store_true',
        help='Show progress',
    )
    parser.add_argument(
        '--env-file',
        help='Path to a .env file with CSV_VALIDATOR_* settings',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'csv-schema-validator {__version__}',
        help='Show version and exit',
    )

    return parser


def validate(
    csv_path: str | Path,
    schema_path: str | Path,
    config: ValidatorConfig,
    path_substitutions: Sequence[PathSubstitution] = (),
    progress: Optional[ProgressCallback] = None,
) -> ExitStatus:
    """
    Parse the schema, validate the CSV and classify the outcome.

    Returns:
        Tuple of (output text, exit code)
    """
    parser = SchemaParser(trace=config.trace_parser)

    try:
        schema = parser.parse_file(schema_path, encoding=config.schema_encoding)
    except SchemaParseError as e:
        return pretty_print(e.messages), ExitCode.INVALID_SCHEMA
    except (OSError, UnicodeDecodeError) as e:
        return f'Cannot read CSV Schema file: {e}', ExitCode.INVALID_SCHEMA

    engine = ValidationEngine(
        fail_fast=config.fail_fast,
        path_resolver=PathResolver(path_substitutions, config.case_sensitive_paths),
    )

    try:
        messages = engine.validate_file(
            schema,
            csv_path,
            encoding=config.csv_encoding,
            validate_utf8=not config.disable_utf8_validation,
            progress=progress,
        )
    except CsvSourceError as e:
        return f'Error:   {e}' + os.linesep + 'FAIL', ExitCode.INVALID_CSV

    if not messages:
        return 'PASS', ExitCode.VALID_CSV

    output = pretty_print(messages)

    # Only errors fail the run; warnings alone still pass
    if contains_error(messages):
        return output + os.linesep + 'FAIL', ExitCode.INVALID_CSV

    return output + os.linesep + 'PASS', ExitCode.VALID_CSV


def run(argv: Optional[List[str]] = None) -> ExitStatus:
    """Parse command line arguments and validate."""
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # --help and --version exit cleanly; anything else is bad usage
        if not e.code:
            return '', ExitCode.VALID_CSV

        return '', ExitCode.INCORRECT_ARGUMENTS

    try:
        config = ValidatorConfig.from_env(args.env_file)
    except ValueError as e:
        return str(e), ExitCode.INCORRECT_ARGUMENTS

    set_log_level(config.log_level)

    for label, path in (('CSV', args.csv_path), ('CSV Schema', args.schema_path)):
        if not Path(path).is_file() or not os.access(path, os.R_OK):
            return f'Cannot access {label} file: {path}', ExitCode.INCORRECT_ARGUMENTS

    config.fail_fast = config.fail_fast or args.fail_fast
    config.trace_parser = config.trace_parser or args.trace_parser
    config.case_sensitive_paths = config.case_sensitive_paths or args.case_sensitive_paths
    config.disable_utf8_validation = (
        config.disable_utf8_validation or args.disable_utf8_validation
    )

    if args.csv_encoding:
        config.csv_encoding = args.csv_encoding

    if args.csv_schema_encoding:
        config.schema_encoding = args.csv_schema_encoding

    substitutions = [PathSubstitution(source, target) for source, target in args.path]
    progress = CommandLineProgress() if args.show_progress else None

    return validate(args.csv_path, args.schema_path, config, substitutions, progress)


def main(argv: Optional[List[str]] = None) -> int:
    message, exit_code = run(argv)

    if message:
        print(message)

    return int(exit_code)


if __name__ == '__main__':
    sys.exit(main())
