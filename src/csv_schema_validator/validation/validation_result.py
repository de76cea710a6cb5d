"""
Validation message classes and utilities.
"""

import os
from enum import Enum
from dataclasses import dataclass
from typing import ClassVar, Iterable, Optional, Union
from ..utils.logger import log_fail_message


class Severity(Enum):
    """Severity levels for validation messages."""
    SCHEMA = 'schema'
    ERROR = 'error'
    WARNING = 'warning'


@dataclass(frozen=True)
class FailMessage:
    """
    Represents a single problem found while parsing or validating.

    Attributes:
        message: Human-readable description of the problem
        line: Schema source line, or CSV line number for data messages
        column: Schema source column, or CSV column name for data messages
        culprit: The rule or directive that produced the message
    """
    severity: ClassVar[Severity]

    message: str
    line: Optional[int] = None
    column: Optional[Union[int, str]] = None
    culprit: Optional[str] = None

    def __post_init__(self):
        """Log the message after initialization."""
        log_fail_message(
            severity=self.severity.value,
            message=self.message,
            line=self.line,
            column=self.column,
            culprit=self.culprit
        )

    def __str__(self) -> str:
        """String representation of the message."""
        location = ', '.join(
            f'{k}: {v}' for k, v in (('line', self.line), ('column', self.column)) if v is not None
        )

        if not location:
            return f'[{self.severity.value.upper()}] {self.message}'

        return f'[{self.severity.value.upper()}] {self.message} (at {location})'


@dataclass(frozen=True)
class SchemaMessage(FailMessage):
    """A problem in the schema text or its shape. Always fatal."""
    severity: ClassVar[Severity] = Severity.SCHEMA


@dataclass(frozen=True)
class ErrorMessage(FailMessage):
    """A CSV row or cell that violates the schema."""
    severity: ClassVar[Severity] = Severity.ERROR


@dataclass(frozen=True)
class WarningMessage(FailMessage):
    """An advisory finding that does not fail the run."""
    severity: ClassVar[Severity] = Severity.WARNING


def contains_error(messages: Iterable[FailMessage]) -> bool:
    """Check whether any message is an ErrorMessage."""
    return any(m.severity == Severity.ERROR for m in messages)


def pretty_print(messages: Iterable[FailMessage]) -> str:
    """
    Render messages one per line with their severity prefix.

    Warnings are prefixed 'Warning: ', errors 'Error:   ', and schema
    messages are printed as they are.
    """
    lines = []

    for m in messages:
        if m.severity == Severity.WARNING:
            lines.append('Warning: ' + m.message)
        elif m.severity == Severity.ERROR:
            lines.append('Error:   ' + m.message)
        else:
            lines.append(m.message)

    return os.linesep.join(lines)
