"""
Typed, immutable schema produced by the parser.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Type
from .directives import (
    ColumnDirective,
    IgnoreCaseDirective,
    MatchIsFalseDirective,
    NoHeaderDirective,
    OptionalDirective,
    PermitEmptyDirective,
    TotalColumnsDirective,
    WarningDirective,
)
from .rules import Rule


@dataclass(frozen=True)
class GlobalDirectives:
    """
    Schema-wide settings, written on the first line of the schema.

    Attributes:
        total_columns: Number of columns each row must have
        no_header: Present when the CSV has no header row
        permit_empty: Present when a CSV without data rows is valid
    """
    total_columns: TotalColumnsDirective
    no_header: Optional[NoHeaderDirective] = None
    permit_empty: Optional[PermitEmptyDirective] = None


@dataclass(frozen=True)
class ColumnDefinition:
    """
    A named column with its rules and directives, both in schema order.
    """
    name: str
    rules: Tuple[Rule, ...] = ()
    directives: Tuple[ColumnDirective, ...] = ()

    def __post_init__(self):
        if not self.name or self.name != self.name.strip():
            raise ValueError(f'Invalid column name: {self.name!r}')

        object.__setattr__(self, 'rules', tuple(self.rules))
        object.__setattr__(self, 'directives', tuple(self.directives))

    def has_directive(self, directive_type: Type[ColumnDirective]) -> bool:
        return any(isinstance(d, directive_type) for d in self.directives)

    @property
    def is_optional(self) -> bool:
        return self.has_directive(OptionalDirective)

    @property
    def ignore_case(self) -> bool:
        return self.has_directive(IgnoreCaseDirective)

    @property
    def is_warning(self) -> bool:
        return self.has_directive(WarningDirective)

    @property
    def match_is_false(self) -> bool:
        return self.has_directive(MatchIsFalseDirective)


@dataclass(frozen=True)
class Schema:
    """
    A compiled schema.

    Invariant: the number of columns equals the @TotalColumns value.
    """
    global_directives: GlobalDirectives
    columns: Tuple[ColumnDefinition, ...]

    def __post_init__(self):
        object.__setattr__(self, 'columns', tuple(self.columns))

        if len(self.columns) != self.total_columns:
            raise ValueError(
                f'@TotalColumns = {self.total_columns} '
                f'but number of columns defined = {len(self.columns)}'
            )

    @property
    def total_columns(self) -> int:
        return self.global_directives.total_columns.value

    @property
    def has_header(self) -> bool:
        return self.global_directives.no_header is None

    @property
    def permit_empty(self) -> bool:
        return self.global_directives.permit_empty is not None

    @property
    def column_names(self) -> Sequence[str]:
        return [c.name for c in self.columns]

    def column_index(self, name: str) -> int:
        """
        Index of the first column with the given name.

        Raises:
            KeyError: If no column has that name
        """
        for index, column in enumerate(self.columns):
            if column.name == name:
                return index

        raise KeyError(name)
