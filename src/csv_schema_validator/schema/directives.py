"""
Global and column directives of the Schema DSL.
"""

from dataclasses import dataclass
from typing import ClassVar, Dict, Type


@dataclass(frozen=True)
class TotalColumnsDirective:
    """`@TotalColumns n`: the number of columns every row must have."""
    value: int

    def __post_init__(self):
        if self.value < 1:
            raise ValueError('@TotalColumns must be a positive integer')


@dataclass(frozen=True)
class NoHeaderDirective:
    """`@noHeader`: the first CSV row is data rather than a header."""


@dataclass(frozen=True)
class PermitEmptyDirective:
    """`@permitEmpty`: a CSV file without data rows is valid."""


class ColumnDirective:
    """Base class for directives that modify how a column is validated."""
    keyword: ClassVar[str]

    def __str__(self) -> str:
        return self.keyword


@dataclass(frozen=True)
class OptionalDirective(ColumnDirective):
    """An empty cell passes every rule of the column."""
    keyword: ClassVar[str] = '@Optional'


@dataclass(frozen=True)
class IgnoreCaseDirective(ColumnDirective):
    """Rules compare values case-insensitively."""
    keyword: ClassVar[str] = '@IgnoreCase'


@dataclass(frozen=True)
class WarningDirective(ColumnDirective):
    """Rule failures are reported as warnings instead of errors."""
    keyword: ClassVar[str] = '@Warning'


@dataclass(frozen=True)
class MatchIsFalseDirective(ColumnDirective):
    """Rule outcomes are inverted: a match is a failure."""
    keyword: ClassVar[str] = '@MatchIsFalse'


COLUMN_DIRECTIVES: Dict[str, Type[ColumnDirective]] = {
    cls.keyword.lower(): cls
    for cls in (OptionalDirective, IgnoreCaseDirective, WarningDirective, MatchIsFalseDirective)
}
