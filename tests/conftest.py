"""Pytest configuration and fixtures."""

import os
import pytest
from csv_schema_validator.schema import parse_schema
from csv_schema_validator.utils import set_log_level


@pytest.fixture(autouse=True)
def isolated_environment():
    """
    Hide CSV_VALIDATOR_* variables from tests, drop any a test loads and
    restore the package log level.
    """
    saved = {
        key: os.environ.pop(key) for key in list(os.environ) if key.startswith('CSV_VALIDATOR_')
    }

    yield

    for key in [k for k in os.environ if k.startswith('CSV_VALIDATOR_')]:
        del os.environ[key]

    os.environ.update(saved)
    set_log_level(None)


@pytest.fixture
def write_file(tmp_path):
    """Write text (or bytes) to a file under tmp_path and return its path."""

    def write(name, content, encoding='utf-8'):
        path = tmp_path / name

        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding=encoding)

        return path

    return write


@pytest.fixture
def digits_schema():
    """Two columns that only accept digits, no header row."""
    return parse_schema(
        '@TotalColumns 2 @noHeader\n'
        'A: regex("[0-9]+")\n'
        'B: regex("[0-9]+")'
    )
