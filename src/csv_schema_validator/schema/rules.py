"""
Column rules of the Schema DSL.

Every rule is an immutable value object. Rules that need memory across
rows (such as `unique`) never keep it on themselves: they create a state
object with `new_state()` and the validation engine hands that object back
on every call during a single run.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, ClassVar, Dict, List, Optional, Sequence, TYPE_CHECKING, Union
from urllib.parse import urlparse
from ..utils.paths import PathResolver

if TYPE_CHECKING:
    from .model import Schema


@dataclass(frozen=True)
class RuleContext:
    """
    Everything a rule may consult besides the cell value.

    Attributes:
        row: All cells of the current row
        line_number: 1-based CSV line number of the row
        column_index: 0-based index of the cell being validated
        schema: The schema being validated against
        ignore_case: Whether the column carries @IgnoreCase
        path_resolver: Resolver for file-path-like values
    """
    row: Sequence[str]
    line_number: int
    column_index: int
    schema: 'Schema'
    ignore_case: bool = False
    path_resolver: Optional[PathResolver] = None

    def fold(self, value: str) -> str:
        """Fold case when the column ignores case."""
        return value.casefold() if self.ignore_case else value

    def cell(self, column_name: str) -> str:
        """Value of the named column in the current row."""
        return self.row[self.schema.column_index(column_name)]


@dataclass(frozen=True)
class Literal:
    """A quoted string argument."""
    value: str

    def resolve(self, context: RuleContext) -> str:
        return self.value

    def __str__(self) -> str:
        return '"' + self.value.replace('"', '\\"') + '"'


@dataclass(frozen=True)
class ColumnReference:
    """A `$column` argument, resolved against the current row."""
    name: str

    def resolve(self, context: RuleContext) -> str:
        return context.cell(self.name)

    def __str__(self) -> str:
        return '$' + self.name


@dataclass(frozen=True)
class BareArgument:
    """An unquoted argument such as a number or `*`."""
    value: str

    def __str__(self) -> str:
        return self.value


Argument = Union[Literal, ColumnReference, BareArgument]


class RuleArgumentError(ValueError):
    """Raised when a rule is written with arguments it does not accept."""


class Rule(ABC):
    """Base class for all column rules."""
    name: ClassVar[str]

    def new_state(self) -> Any:
        """Create the run-scoped state for this rule, None if stateless."""
        return None

    @abstractmethod
    def evaluate(self, value: str, context: RuleContext, state: Any = None) -> bool:
        """
        Check a single cell value.

        Args:
            value: The cell value
            context: Row and column information for the cell
            state: The object returned by new_state() for this run

        Returns:
            True if the value satisfies the rule
        """
        pass

    def arguments(self) -> Sequence[Any]:
        """Arguments as written in the schema."""
        return ()

    def column_references(self) -> List[str]:
        """Names of the columns this rule refers to."""
        return [a.name for a in self.arguments() if isinstance(a, ColumnReference)]

    def to_error(self) -> str:
        """Render the rule as it appears in the schema."""
        args = self.arguments()

        if not args:
            return self.name

        return f'{self.name}({", ".join(str(a) for a in args)})'

    def __str__(self) -> str:
        return self.to_error()


@dataclass(frozen=True)
class RegexRule(Rule):
    """Cell must match the whole pattern."""
    name: ClassVar[str] = 'regex'
    pattern: str
    _regex: Any = field(init=False, repr=False, compare=False)
    _regex_ignore_case: Any = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, '_regex', re.compile(self.pattern))
        object.__setattr__(self, '_regex_ignore_case', re.compile(self.pattern, re.IGNORECASE))

    def evaluate(self, value, context, state=None):
        regex = self._regex_ignore_case if context.ignore_case else self._regex

        return regex.fullmatch(value) is not None

    def arguments(self):
        return (Literal(self.pattern),)


@dataclass(frozen=True)
class _ComparisonRule(Rule):
    """A rule comparing the cell against a single string argument."""
    argument: Union[Literal, ColumnReference]

    def evaluate(self, value, context, state=None):
        expected = self.argument.resolve(context)

        return self.compare(context.fold(value), context.fold(expected))

    @abstractmethod
    def compare(self, value: str, expected: str) -> bool:
        pass

    def arguments(self):
        return (self.argument,)


@dataclass(frozen=True)
class IsRule(_ComparisonRule):
    name: ClassVar[str] = 'is'

    def compare(self, value, expected):
        return value == expected


@dataclass(frozen=True)
class NotRule(_ComparisonRule):
    name: ClassVar[str] = 'not'

    def compare(self, value, expected):
        return value != expected


@dataclass(frozen=True)
class InRule(_ComparisonRule):
    """Cell must occur within the argument."""
    name: ClassVar[str] = 'in'

    def compare(self, value, expected):
        return value in expected


@dataclass(frozen=True)
class StartsRule(_ComparisonRule):
    name: ClassVar[str] = 'starts'

    def compare(self, value, expected):
        return value.startswith(expected)


@dataclass(frozen=True)
class EndsRule(_ComparisonRule):
    name: ClassVar[str] = 'ends'

    def compare(self, value, expected):
        return value.endswith(expected)


@dataclass(frozen=True)
class NotEmptyRule(Rule):
    name: ClassVar[str] = 'notEmpty'

    def evaluate(self, value, context, state=None):
        return value != ''


@dataclass(frozen=True)
class EmptyRule(Rule):
    name: ClassVar[str] = 'empty'

    def evaluate(self, value, context, state=None):
        return value == ''


@dataclass(frozen=True)
class LengthRule(Rule):
    """
    Cell length bounds.

    `length(n)` requires exactly n characters; `length(min, max)` is
    inclusive, with None standing for an unbounded `*` side.
    """
    name: ClassVar[str] = 'length'
    min_length: Optional[int]
    max_length: Optional[int]
    exact: bool = False

    def evaluate(self, value, context, state=None):
        if self.min_length is not None and len(value) < self.min_length:
            return False

        if self.max_length is not None and len(value) > self.max_length:
            return False

        return True

    def arguments(self):
        if self.exact:
            return (BareArgument(str(self.min_length)),)

        return tuple(
            BareArgument('*' if bound is None else str(bound))
            for bound in (self.min_length, self.max_length)
        )


@dataclass(frozen=True)
class RangeRule(Rule):
    """Cell must be a number within inclusive bounds."""
    name: ClassVar[str] = 'range'
    min_value: Optional[Decimal]
    max_value: Optional[Decimal]

    def evaluate(self, value, context, state=None):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return False

        if not number.is_finite():
            return False

        if self.min_value is not None and number < self.min_value:
            return False

        if self.max_value is not None and number > self.max_value:
            return False

        return True

    def arguments(self):
        return tuple(
            BareArgument('*' if bound is None else str(bound))
            for bound in (self.min_value, self.max_value)
        )


_POSITIVE_INTEGER = re.compile(r'[0-9]+')
_UUID4 = re.compile(r'[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}')
_UUID4_IGNORE_CASE = re.compile(_UUID4.pattern, re.IGNORECASE)
_XSD_DATE = re.compile(r'-?[0-9]{4}-[0-9]{2}-[0-9]{2}')
_XSD_DATE_TIME = re.compile(
    r'(?P<base>-?[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2})'
    r'(\.[0-9]+)?'
    r'(?P<offset>Z|[+-][0-9]{2}:[0-9]{2})?'
)


@dataclass(frozen=True)
class PositiveIntegerRule(Rule):
    name: ClassVar[str] = 'positiveInteger'

    def evaluate(self, value, context, state=None):
        return _POSITIVE_INTEGER.fullmatch(value) is not None


@dataclass(frozen=True)
class Uuid4Rule(Rule):
    """Lower-case version 4 UUID, any case under @IgnoreCase."""
    name: ClassVar[str] = 'uuid4'

    def evaluate(self, value, context, state=None):
        regex = _UUID4_IGNORE_CASE if context.ignore_case else _UUID4

        return regex.fullmatch(value) is not None


@dataclass(frozen=True)
class UriRule(Rule):
    name: ClassVar[str] = 'uri'

    def evaluate(self, value, context, state=None):
        if not value or any(c.isspace() for c in value):
            return False

        try:
            parsed = urlparse(value)
        except ValueError:
            return False

        return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


@dataclass(frozen=True)
class XDateRule(Rule):
    """ISO 8601 calendar date, `YYYY-MM-DD`."""
    name: ClassVar[str] = 'xDate'

    def evaluate(self, value, context, state=None):
        if _XSD_DATE.fullmatch(value) is None:
            return False

        try:
            datetime.strptime(value, '%Y-%m-%d')
        except ValueError:
            return False

        return True


@dataclass(frozen=True)
class XDateTimeRule(Rule):
    """ISO 8601 date and time, `YYYY-MM-DDThh:mm:ss[.s]` with optional `Z` or `+hh:mm`."""
    name: ClassVar[str] = 'xDateTime'

    def evaluate(self, value, context, state=None):
        match = _XSD_DATE_TIME.fullmatch(value)

        if match is None:
            return False

        offset = match['offset'] or ''

        try:
            datetime.fromisoformat(match['base'] + ('+00:00' if offset == 'Z' else offset))
        except ValueError:
            return False

        return True


@dataclass(frozen=True)
class UniqueRule(Rule):
    """
    Cell value must not repeat within the column.

    The state maps each seen value to the line it first appeared on.
    """
    name: ClassVar[str] = 'unique'

    def new_state(self) -> Dict[str, int]:
        return {}

    def evaluate(self, value, context, state=None):
        key = context.fold(value)

        if key in state:
            return False

        state[key] = context.line_number

        return True


@dataclass(frozen=True)
class FileExistsRule(Rule):
    """Cell is a path, optionally relative to `root`, that must exist."""
    name: ClassVar[str] = 'fileExists'
    root: Optional[Union[Literal, ColumnReference]] = None

    def evaluate(self, value, context, state=None):
        path = value

        if self.root is not None:
            root = self.root.resolve(context)

            if root and not root.endswith(('/', '\\')) and not value.startswith(('/', '\\')):
                root += '/'

            path = root + value

        resolver = context.path_resolver or PathResolver()

        return resolver.exists(path)

    def arguments(self):
        return () if self.root is None else (self.root,)


@dataclass(frozen=True)
class OrRule(Rule):
    """Either side must be valid."""
    name: ClassVar[str] = 'or'
    left: Rule
    right: Rule

    def new_state(self):
        return (self.left.new_state(), self.right.new_state())

    def evaluate(self, value, context, state=None):
        left_state, right_state = state if state is not None else (None, None)

        return (
            self.left.evaluate(value, context, left_state)
            or self.right.evaluate(value, context, right_state)
        )

    def column_references(self):
        return self.left.column_references() + self.right.column_references()

    def to_error(self):
        return f'{self.left.to_error()} or {self.right.to_error()}'


def _string_argument(args: Optional[List[Argument]], rule_name: str):
    if not args or len(args) != 1:
        raise RuleArgumentError(f'{rule_name} expects exactly one argument')

    if not isinstance(args[0], (Literal, ColumnReference)):
        raise RuleArgumentError(f'{rule_name} expects a quoted string or a column reference')

    return args[0]


def _no_arguments(cls):
    def build(args):
        if args:
            raise RuleArgumentError(f'{cls.name} takes no arguments')

        return cls()

    return build


def _comparison(cls):
    def build(args):
        return cls(_string_argument(args, cls.name))

    return build


def _build_regex(args):
    argument = _string_argument(args, 'regex')

    if not isinstance(argument, Literal):
        raise RuleArgumentError('regex expects a quoted pattern')

    return RegexRule(argument.value)


def _bound(argument: Argument, rule_name: str, convert: Callable[[str], Any]):
    if not isinstance(argument, BareArgument):
        raise RuleArgumentError(f'{rule_name} expects unquoted numbers or *')

    if argument.value == '*':
        return None

    try:
        return convert(argument.value)
    except (ValueError, InvalidOperation):
        raise RuleArgumentError(f'{rule_name} bound {argument.value} is not a number')


def _build_length(args):
    if not args or len(args) > 2:
        raise RuleArgumentError('length expects one or two arguments')

    bounds = [_bound(a, 'length', int) for a in args]

    if any(b is not None and b < 0 for b in bounds):
        raise RuleArgumentError('length bounds must not be negative')

    if len(bounds) == 1:
        if bounds[0] is None:
            raise RuleArgumentError('length with one argument requires a number')

        return LengthRule(bounds[0], bounds[0], exact=True)

    if None not in bounds and bounds[0] > bounds[1]:
        raise RuleArgumentError('length minimum exceeds maximum')

    return LengthRule(bounds[0], bounds[1])


def _build_range(args):
    if not args or len(args) != 2:
        raise RuleArgumentError('range expects two arguments')

    low, high = (_bound(a, 'range', Decimal) for a in args)

    if low is not None and high is not None and low > high:
        raise RuleArgumentError('range minimum exceeds maximum')

    return RangeRule(low, high)


def _build_file_exists(args):
    if not args:
        return FileExistsRule()

    return FileExistsRule(_string_argument(args, 'fileExists'))


RULE_BUILDERS: Dict[str, Callable[[Optional[List[Argument]]], Rule]] = {
    'regex': _build_regex,
    'is': _comparison(IsRule),
    'not': _comparison(NotRule),
    'in': _comparison(InRule),
    'starts': _comparison(StartsRule),
    'ends': _comparison(EndsRule),
    'notEmpty': _no_arguments(NotEmptyRule),
    'empty': _no_arguments(EmptyRule),
    'length': _build_length,
    'range': _build_range,
    'positiveInteger': _no_arguments(PositiveIntegerRule),
    'uuid4': _no_arguments(Uuid4Rule),
    'uri': _no_arguments(UriRule),
    'xDate': _no_arguments(XDateRule),
    'xDateTime': _no_arguments(XDateTimeRule),
    'unique': _no_arguments(UniqueRule),
    'fileExists': _build_file_exists,
}


def build_rule(name: str, args: Optional[List[Argument]]) -> Rule:
    """
    Construct a rule from its DSL name and parsed arguments.

    Args:
        name: Rule keyword, e.g. 'regex'
        args: Parsed arguments, None when written without parentheses

    Raises:
        KeyError: If the rule name is unknown
        RuleArgumentError: If the arguments do not fit the rule
        re.error: If a regex pattern does not compile
    """
    return RULE_BUILDERS[name](args)
