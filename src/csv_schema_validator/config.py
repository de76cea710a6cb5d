"""
Configuration loaded from the environment and an optional .env file.
"""

import codecs
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv
from .utils.logger import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV, resolve_log_level

_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off')


def parse_bool(name: str, value: str) -> bool:
    """
    Parse a boolean environment value.

    Raises:
        ValueError: If the value is not a recognised boolean
    """
    normalized = value.strip().lower()

    if normalized in _TRUE_VALUES:
        return True

    if normalized in _FALSE_VALUES:
        return False

    raise ValueError(f'{name} must be a boolean (true/false), got {value!r}')


def parse_encoding(name: str, value: str) -> str:
    """
    Validate an encoding name.

    Raises:
        ValueError: If Python does not know the encoding
    """
    try:
        codecs.lookup(value)
    except LookupError:
        raise ValueError(f'{name} is not a known encoding: {value!r}')

    return value


@dataclass
class ValidatorConfig:
    """
    Settings shared by the command line and library callers.

    Attributes:
        fail_fast: Stop at the first validation error
        trace_parser: Log the schema parser's decisions
        case_sensitive_paths: Enforce exact path case for fileExists
        disable_utf8_validation: Skip the UTF-8 well-formedness check
        csv_encoding: CSV file encoding
        schema_encoding: Schema file encoding
        log_level: Logging level name
    """
    fail_fast: bool = False
    trace_parser: bool = False
    case_sensitive_paths: bool = False
    disable_utf8_validation: bool = False
    csv_encoding: str = 'utf-8'
    schema_encoding: str = 'utf-8'
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> 'ValidatorConfig':
        """
        Build a configuration from CSV_VALIDATOR_* environment variables.

        Args:
            dotenv_path (str, optional): Path to a .env file. When omitted a
                .env in the working directory is used if present.

        Raises:
            ValueError: If dotenv_path cannot be loaded or a variable is invalid
        """
        loaded = load_dotenv(dotenv_path=dotenv_path if dotenv_path else '.env')

        if dotenv_path and not loaded:
            raise ValueError(f'No .env file found at {dotenv_path}')

        config = cls()

        if (fail_fast := os.getenv('CSV_VALIDATOR_FAIL_FAST')) is not None:
            config.fail_fast = parse_bool('CSV_VALIDATOR_FAIL_FAST', fail_fast)

        if (trace := os.getenv('CSV_VALIDATOR_TRACE_PARSER')) is not None:
            config.trace_parser = parse_bool('CSV_VALIDATOR_TRACE_PARSER', trace)

        if (case_sensitive := os.getenv('CSV_VALIDATOR_CASE_SENSITIVE_PATHS')) is not None:
            config.case_sensitive_paths = parse_bool(
                'CSV_VALIDATOR_CASE_SENSITIVE_PATHS', case_sensitive
            )

        if (disable_utf8 := os.getenv('CSV_VALIDATOR_DISABLE_UTF8_VALIDATION')) is not None:
            config.disable_utf8_validation = parse_bool(
                'CSV_VALIDATOR_DISABLE_UTF8_VALIDATION', disable_utf8
            )

        if (csv_encoding := os.getenv('CSV_VALIDATOR_CSV_ENCODING')) is not None:
            config.csv_encoding = parse_encoding('CSV_VALIDATOR_CSV_ENCODING', csv_encoding)

        if (schema_encoding := os.getenv('CSV_VALIDATOR_SCHEMA_ENCODING')) is not None:
            config.schema_encoding = parse_encoding(
                'CSV_VALIDATOR_SCHEMA_ENCODING', schema_encoding
            )

        if (log_level := os.getenv(LOG_LEVEL_ENV)) is not None:
            resolve_log_level(log_level)
            config.log_level = log_level.upper()

        return config
