"""
Schema DSL parser.

Converts schema text into an immutable Schema. Implements recursive
descent over the tokens of each line: the first non-blank line holds the
global directives, every following non-blank line defines one column.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from ..exceptions import SchemaParseError
from ..utils import configure_logger
from ..validation.validation_result import SchemaMessage
from .directives import (
    COLUMN_DIRECTIVES,
    ColumnDirective,
    NoHeaderDirective,
    PermitEmptyDirective,
    TotalColumnsDirective,
)
from .model import ColumnDefinition, GlobalDirectives, Schema
from .rules import (
    RULE_BUILDERS,
    Argument,
    BareArgument,
    ColumnReference,
    Literal,
    OrRule,
    Rule,
    RuleArgumentError,
    build_rule,
)
from .tokenizer import Token, TokenType, split_lines, tokenize_line

INVALID_COLUMN_TEXT = 'Column definition contains invalid text'
INVALID_COLUMN_DEFINITION = 'Invalid column definition'
INVALID_GLOBAL_TEXT = 'Global directives contain invalid text'
MISSING_TOTAL_COLUMNS = 'Schema must start with @TotalColumns directive'
INVALID_TOTAL_COLUMNS = '@TotalColumns must be a positive integer'

_POSITIVE_INTEGER = re.compile(r'[0-9]+')

# Optional global directives in the only order they may be written
_OPTIONAL_GLOBALS = (
    ('noheader', 'no_header', NoHeaderDirective),
    ('permitempty', 'permit_empty', PermitEmptyDirective),
)


class _LineCursor:
    """Position within the tokens of a single line."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def current(self) -> Token:
        return self.tokens[min(self.pos, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.current()

        if token.type != TokenType.EOL:
            self.pos += 1

        return token

    def at(self, token_type: TokenType) -> bool:
        return self.current().type == token_type


class SchemaParser:
    """
    Parses Schema DSL text.

    Args:
        trace: Log every parser decision at INFO level and keep it in
            trace_log. Has no effect on the parse result.
    """

    def __init__(self, trace: bool = False):
        self.__logger = configure_logger(__name__, 'INFO' if trace else None)
        self.trace = trace
        self.trace_log: List[str] = []

    def parse(self, text: str) -> Schema:
        """
        Parse schema text.

        Args:
            text: The schema source

        Returns:
            The compiled Schema

        Raises:
            SchemaParseError: If the text is not a valid schema
        """
        self.trace_log = []
        lines = [
            (number, tokenize_line(line, number))
            for number, line in enumerate(split_lines(text), 1)
            if line.strip()
        ]

        if not lines:
            self.__fail(MISSING_TOTAL_COLUMNS, Token(TokenType.EOL, '', 1, 1))

        global_line, global_tokens = lines[0]
        self.__trace(f'line {global_line}: parsing global directives')
        global_directives = self.__parse_global_directives(_LineCursor(global_tokens))

        columns: List[Tuple[ColumnDefinition, Token]] = []

        for number, tokens in lines[1:]:
            self.__trace(f'line {number}: parsing column definition')
            column = self.__parse_column_definition(_LineCursor(tokens))
            columns.append((column, tokens[0]))

        messages = self.__check_columns(global_directives, columns, global_tokens[0])

        if messages:
            self.__trace(f'schema rejected with {len(messages)} message(s)')
            raise SchemaParseError(messages)

        self.__trace(f'schema accepted with {len(columns)} column(s)')

        return Schema(global_directives, [column for column, _ in columns])

    def parse_file(self, file_path: str | Path, encoding: str = 'utf-8') -> Schema:
        """Read a schema file and parse it."""
        return self.parse(Path(file_path).read_text(encoding=encoding))

    def __trace(self, message: str) -> None:
        if self.trace:
            self.trace_log.append(message)
            self.__logger.info(message)

    def __fail(self, message: str, token: Token) -> None:
        self.__trace(f'line {token.line}, column {token.column}: failure: {message}')

        raise SchemaParseError([SchemaMessage(message, token.line, token.column)])

    def __parse_global_directives(self, cursor: _LineCursor) -> GlobalDirectives:
        token = cursor.current()

        if token.type != TokenType.DIRECTIVE or token.value.lower() != 'totalcolumns':
            self.__fail(MISSING_TOTAL_COLUMNS, token)

        cursor.advance()
        count = cursor.current()

        if count.type != TokenType.WORD or not _POSITIVE_INTEGER.fullmatch(count.value) \
                or int(count.value) < 1:
            self.__fail(INVALID_TOTAL_COLUMNS, count)

        cursor.advance()
        self.__trace(f'@TotalColumns {int(count.value)}')

        found: Dict[str, object] = {}
        next_slot = 0

        while not cursor.at(TokenType.EOL):
            token = cursor.current()
            slot = None

            if token.type == TokenType.DIRECTIVE:
                key = token.value.lower()
                slot = next(
                    (i for i in range(next_slot, len(_OPTIONAL_GLOBALS))
                     if _OPTIONAL_GLOBALS[i][0] == key),
                    None
                )

            if slot is None:
                self.__fail(INVALID_GLOBAL_TEXT, token)

            _, attribute, directive_type = _OPTIONAL_GLOBALS[slot]
            found[attribute] = directive_type()
            next_slot = slot + 1
            self.__trace(f'@{token.value}')
            cursor.advance()

        return GlobalDirectives(TotalColumnsDirective(int(count.value)), **found)

    def __parse_column_definition(self, cursor: _LineCursor) -> ColumnDefinition:
        name = cursor.current()

        if name.type != TokenType.WORD:
            self.__fail(INVALID_COLUMN_DEFINITION, name)

        cursor.advance()

        if not cursor.at(TokenType.COLON):
            self.__fail(INVALID_COLUMN_DEFINITION, cursor.current())

        cursor.advance()
        self.__trace(f'column "{name.value}"')

        rules: List[Rule] = []

        while cursor.at(TokenType.WORD):
            rules.append(self.__parse_rule_expression(cursor))

        directives: List[ColumnDirective] = []

        while cursor.at(TokenType.DIRECTIVE):
            directives.append(self.__parse_column_directive(cursor, directives))

        if not cursor.at(TokenType.EOL):
            self.__fail(INVALID_COLUMN_TEXT, cursor.current())

        return ColumnDefinition(name.value, rules, directives)

    def __parse_rule_expression(self, cursor: _LineCursor) -> Rule:
        rule = self.__parse_rule(cursor)

        while cursor.at(TokenType.WORD) and cursor.current().value == 'or':
            cursor.advance()
            rule = OrRule(rule, self.__parse_rule(cursor))
            self.__trace(f'  combined {rule.to_error()}')

        return rule

    def __parse_rule(self, cursor: _LineCursor) -> Rule:
        token = cursor.current()

        if token.type != TokenType.WORD:
            self.__fail(INVALID_COLUMN_TEXT, token)

        if token.value not in RULE_BUILDERS:
            self.__fail(f'Unknown rule "{token.value}"', token)

        cursor.advance()
        args: Optional[List[Argument]] = None

        if cursor.at(TokenType.LPAREN):
            args = self.__parse_arguments(cursor)

        try:
            rule = build_rule(token.value, args)
        except RuleArgumentError as e:
            self.__fail(f'Invalid arguments for rule {token.value}: {e}', token)
        except re.error as e:
            self.__fail(f'Invalid regex pattern "{args[0].value}": {e}', token)

        self.__trace(f'  rule {rule.to_error()}')

        return rule

    def __parse_arguments(self, cursor: _LineCursor) -> List[Argument]:
        cursor.advance()
        args: List[Argument] = []

        if cursor.at(TokenType.RPAREN):
            cursor.advance()
            return args

        while True:
            token = cursor.current()

            if token.type == TokenType.STRING:
                args.append(Literal(token.value))
            elif token.type == TokenType.COLUMN_REF:
                args.append(ColumnReference(token.value))
            elif token.type == TokenType.WORD:
                args.append(BareArgument(token.value))
            else:
                self.__fail(INVALID_COLUMN_TEXT, token)

            cursor.advance()

            if cursor.at(TokenType.COMMA):
                cursor.advance()
            elif cursor.at(TokenType.RPAREN):
                cursor.advance()
                return args
            else:
                self.__fail(INVALID_COLUMN_TEXT, cursor.current())

    def __parse_column_directive(
        self, cursor: _LineCursor, seen: List[ColumnDirective]
    ) -> ColumnDirective:
        token = cursor.advance()
        directive_type = COLUMN_DIRECTIVES.get('@' + token.value.lower())

        if directive_type is None:
            self.__fail(f'Unknown column directive "@{token.value}"', token)

        if any(isinstance(d, directive_type) for d in seen):
            self.__fail(
                f'Column definition contains duplicate directive {directive_type.keyword}', token
            )

        self.__trace(f'  directive {directive_type.keyword}')

        return directive_type()

    def __check_columns(
        self,
        global_directives: GlobalDirectives,
        columns: List[Tuple[ColumnDefinition, Token]],
        global_token: Token
    ) -> List[SchemaMessage]:
        """Checks that need the whole schema: column count and cross references."""
        messages = []
        expected = global_directives.total_columns.value

        if len(columns) != expected:
            messages.append(SchemaMessage(
                f'@TotalColumns = {expected} but number of columns defined = {len(columns)}',
                global_token.line,
                global_token.column
            ))

        names = {column.name for column, _ in columns}

        for column, token in columns:
            for rule in column.rules:
                if any(ref not in names for ref in rule.column_references()):
                    messages.append(SchemaMessage(
                        f'Column: {column.name} has invalid cross reference {rule.to_error()}',
                        token.line,
                        token.column
                    ))

        return messages


def parse_schema(text: str, trace: bool = False) -> Schema:
    """Parse schema text with a fresh parser."""
    return SchemaParser(trace=trace).parse(text)
