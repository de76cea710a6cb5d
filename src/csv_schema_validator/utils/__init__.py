"""Utility modules for csv-schema-validator."""

from .logger import configure_logger, log_fail_message, set_log_level
from .paths import PathResolver, PathSubstitution

__all__ = [
    'configure_logger',
    'log_fail_message',
    'set_log_level',
    'PathResolver',
    'PathSubstitution',
]
