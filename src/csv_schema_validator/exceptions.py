"""
Exceptions raised by csv-schema-validator.
"""

from typing import List


class CsvValidatorError(Exception):
    """Base class for all csv-schema-validator errors."""


class SchemaParseError(CsvValidatorError):
    """
    Raised when schema text cannot be compiled into a Schema.

    Attributes:
        messages: Non-empty list of SchemaMessage describing the failure
    """

    def __init__(self, messages: List):
        if not messages:
            raise ValueError('SchemaParseError requires at least one message')
        
        self.messages = list(messages)
        super().__init__('; '.join(m.message for m in self.messages))


class CsvSourceError(CsvValidatorError):
    """Raised when the CSV source itself cannot be read."""
