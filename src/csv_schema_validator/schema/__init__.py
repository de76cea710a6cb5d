"""
Schema DSL: model, rule catalog and parser.
"""

from .directives import (
    TotalColumnsDirective,
    NoHeaderDirective,
    PermitEmptyDirective,
    ColumnDirective,
    OptionalDirective,
    IgnoreCaseDirective,
    WarningDirective,
    MatchIsFalseDirective,
)
from .model import Schema, GlobalDirectives, ColumnDefinition
from .rules import Rule, RuleContext, Literal, ColumnReference
from .parser import SchemaParser, parse_schema

__all__ = [
    'Schema',
    'GlobalDirectives',
    'ColumnDefinition',
    'TotalColumnsDirective',
    'NoHeaderDirective',
    'PermitEmptyDirective',
    'ColumnDirective',
    'OptionalDirective',
    'IgnoreCaseDirective',
    'WarningDirective',
    'MatchIsFalseDirective',
    'Rule',
    'RuleContext',
    'Literal',
    'ColumnReference',
    'SchemaParser',
    'parse_schema',
]
