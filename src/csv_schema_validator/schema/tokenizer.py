"""
Line tokenizer for the Schema DSL.

Spaces and tabs separate tokens and are otherwise insignificant. Any
character that cannot start a token becomes an INVALID token so the parser
can report it at its exact position.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List


class TokenType(Enum):
    DIRECTIVE = 'directive'
    STRING = 'string'
    COLUMN_REF = 'column reference'
    WORD = 'word'
    COLON = ':'
    LPAREN = '('
    RPAREN = ')'
    COMMA = ','
    INVALID = 'invalid'
    EOL = 'end of line'


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int


_TOKEN_PATTERN = re.compile(
    r'''
    (?P<STRING>"(?:[^"\\]|\\.)*")
    | (?P<DIRECTIVE>@[A-Za-z][A-Za-z0-9_]*)
    | (?P<COLUMN_REF>\$[A-Za-z0-9_\-.]+)
    | (?P<WORD>[A-Za-z0-9_\-.*]+)
    | (?P<COLON>:)
    | (?P<LPAREN>\()
    | (?P<RPAREN>\))
    | (?P<COMMA>,)
    | (?P<SKIP>[ \t]+)
    | (?P<INVALID>.)
    ''',
    re.VERBOSE,
)


def unescape(literal: str) -> str:
    """Strip the quotes of a STRING token and unescape `\\"`."""
    return literal[1:-1].replace('\\"', '"')


def tokenize_line(text: str, line: int) -> List[Token]:
    """
    Split one schema line into tokens, always ending with EOL.

    Args:
        text: The line without its line terminator
        line: 1-based line number used for positions

    Returns:
        List of tokens with 1-based columns
    """
    tokens = []

    for match in _TOKEN_PATTERN.finditer(text):
        kind = match.lastgroup

        if kind == 'SKIP':
            continue

        value = match.group()

        if kind == 'STRING':
            value = unescape(value)
        elif kind in ('DIRECTIVE', 'COLUMN_REF'):
            value = value[1:]

        tokens.append(Token(TokenType[kind], value, line, match.start() + 1))

    tokens.append(Token(TokenType.EOL, '', line, len(text) + 1))

    return tokens


def split_lines(text: str) -> List[str]:
    """Split schema text on any line terminator, dropping a UTF-8 BOM."""
    if text.startswith('\ufeff'):
        text = text[1:]

    return text.splitlines()
