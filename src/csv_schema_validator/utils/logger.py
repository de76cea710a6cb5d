"""Logging utilities for csv-schema-validator."""

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = 'CSV_VALIDATOR_LOG_LEVEL'
DEFAULT_LOG_LEVEL = 'WARNING'
PACKAGE_LOGGER_PREFIXES = ('csv_schema_validator', 'csv-schema-validator')

# Level chosen by the application, wins over CSV_VALIDATOR_LOG_LEVEL
_applied_level: Optional[str] = None


def resolve_log_level(level: Optional[str] = None) -> int:
    """
    Resolve a log level name to its numeric value.

    Args:
        level: Level name such as 'DEBUG'. Falls back to the level given
            to set_log_level, the CSV_VALIDATOR_LOG_LEVEL environment
            variable, then WARNING.

    Returns:
        int: Numeric logging level

    Raises:
        ValueError: If the level name is not a known logging level
    """
    name = (level or _applied_level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    value = logging.getLevelName(name)

    if not isinstance(value, int):
        raise ValueError(f'Unknown log level: {name}')

    return value


def set_log_level(level: Optional[str]) -> None:
    """
    Apply a log level to every package logger, including ones configured later.

    Args:
        level: Level name, or None to fall back to the environment again

    Raises:
        ValueError: If the level name is not a known logging level
    """
    global _applied_level

    if level:
        resolve_log_level(level)

    _applied_level = level.upper() if level else None
    value = resolve_log_level()

    for name, logger in list(logging.root.manager.loggerDict.items()):
        if isinstance(logger, logging.Logger) and name.startswith(PACKAGE_LOGGER_PREFIXES):
            logger.setLevel(value)


def configure_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Configure a logger with consistent formatting across all environments.

    Args:
        name (str): Name for the logger, typically __name__
        level (str, optional): Level name overriding CSV_VALIDATOR_LOG_LEVEL

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_log_level(level))

    # An application that configured the root logger owns the output
    if logging.getLogger().handlers:
        logger.propagate = True

        return logger

    if not logger.handlers:
        formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False

    return logger


class LoggerUtility:
    """Utility class for consistent logging across modules."""

    def __init__(self, name: str):
        """Initialize logger with module name."""
        self.logger = configure_logger(name)

    def log_fail_message(
        self,
        severity: str,
        message: str,
        line: Optional[int] = None,
        column: Optional[object] = None,
        culprit: Optional[str] = None
    ) -> None:
        """
        Log a validation message in a consistent format.

        Messages are reported to the caller as values, so they are only
        traced here at DEBUG level.

        Args:
            severity: Severity level (schema, error, warning)
            message: The main message to log
            line: Source line or CSV line number
            column: Source column or CSV column name
            culprit: The rule or directive that produced the message
        """
        if not self.logger.isEnabledFor(logging.DEBUG):
            return

        location = ', '.join(
            f'{k}: {v}' for k, v in (('line', line), ('column', column)) if v is not None
        )
        self.logger.debug(f'[{severity.upper()}] {message}')

        if location:
            self.logger.debug(f'Location: {location}')

        if culprit:
            self.logger.debug(f'Culprit: {culprit}')


default_logger = LoggerUtility('csv-schema-validator')
log_fail_message = default_logger.log_fail_message
