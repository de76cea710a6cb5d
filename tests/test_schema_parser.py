"""Tests for the Schema DSL parser."""

import pytest
from decimal import Decimal
from csv_schema_validator.exceptions import SchemaParseError
from csv_schema_validator.schema import (
    ColumnDefinition,
    GlobalDirectives,
    IgnoreCaseDirective,
    NoHeaderDirective,
    OptionalDirective,
    PermitEmptyDirective,
    Schema,
    SchemaParser,
    TotalColumnsDirective,
    WarningDirective,
    parse_schema,
)
from csv_schema_validator.schema.rules import (
    BareArgument,
    ColumnReference,
    IsRule,
    LengthRule,
    Literal,
    NotEmptyRule,
    OrRule,
    RangeRule,
    RegexRule,
    UniqueRule,
)


def failure_messages(schema_text):
    with pytest.raises(SchemaParseError) as excinfo:
        parse_schema(schema_text)

    return excinfo.value.messages


def test_minimal_schema():
    """Test a schema declaring three columns without rules."""
    schema = parse_schema(
        """@TotalColumns 3
           column1:
           column2:
           column3:"""
    )

    assert schema == Schema(
        GlobalDirectives(TotalColumnsDirective(3)),
        [ColumnDefinition('column1'), ColumnDefinition('column2'), ColumnDefinition('column3')],
    )


def test_whitespace_around_colon():
    """Test that spaces and tabs around ':' are insignificant."""
    spaced = parse_schema('@TotalColumns 2\nName :\nAge   :     ')
    tabbed = parse_schema('@TotalColumns\t2\n\tName\t:\t\nAge\t:')
    compact = parse_schema('@TotalColumns 2\nName:\nAge:')

    expected = Schema(
        GlobalDirectives(TotalColumnsDirective(2)),
        [ColumnDefinition('Name'), ColumnDefinition('Age')],
    )
    assert spaced == expected
    assert tabbed == expected
    assert compact == expected


def test_no_header_directive():
    """Test the @noHeader global flag."""
    schema = parse_schema(
        """@TotalColumns 2 @noHeader
           Name :
           Age   :     """
    )

    assert schema.global_directives == GlobalDirectives(
        TotalColumnsDirective(2), NoHeaderDirective(), None
    )
    assert schema.column_names == ['Name', 'Age']
    assert not schema.has_header


def test_all_global_directives():
    """Test @noHeader and @permitEmpty together in canonical order."""
    schema = parse_schema('@TotalColumns 1 @noHeader @permitEmpty\nA:')

    assert schema.global_directives == GlobalDirectives(
        TotalColumnsDirective(1), NoHeaderDirective(), PermitEmptyDirective()
    )
    assert schema.permit_empty


def test_global_directives_are_case_insensitive():
    """Test directive keywords match regardless of case."""
    schema = parse_schema('@totalcolumns 1 @NOHEADER\nA:')

    assert schema.total_columns == 1
    assert not schema.has_header


def test_directive_before_rule_is_rejected():
    """Test that a column directive may not precede a rule."""
    messages = failure_messages('@TotalColumns 1\nLastName: @IgnoreCase regex ("[a]")')

    assert [m.message for m in messages] == ['Column definition contains invalid text']
    assert (messages[0].line, messages[0].column) == (2, 23)


def test_global_directives_out_of_order():
    """Test @permitEmpty may not come before @noHeader."""
    messages = failure_messages('@TotalColumns 1 @permitEmpty @noHeader\nA:')

    assert [m.message for m in messages] == ['Global directives contain invalid text']


def test_duplicate_global_directive():
    """Test a repeated global directive is rejected."""
    messages = failure_messages('@TotalColumns 1 @noHeader @noHeader\nA:')

    assert [m.message for m in messages] == ['Global directives contain invalid text']


def test_schema_must_start_with_total_columns():
    """Test a schema without @TotalColumns on its first line."""
    assert failure_messages('Name:')[0].message == 'Schema must start with @TotalColumns directive'
    assert failure_messages('')[0].message == 'Schema must start with @TotalColumns directive'
    assert failure_messages('@noHeader @TotalColumns 1\nA:')[0].message == (
        'Schema must start with @TotalColumns directive'
    )


@pytest.mark.parametrize('count', ['0', 'abc', '-1', '2.5'])
def test_total_columns_must_be_positive_integer(count):
    """Test invalid column counts."""
    messages = failure_messages(f'@TotalColumns {count}\nA:')

    assert messages[0].message == '@TotalColumns must be a positive integer'


def test_column_count_must_match():
    """Test that the declared total must equal the defined columns."""
    messages = failure_messages('@TotalColumns 3\nA:\nB:')

    assert [m.message for m in messages] == [
        '@TotalColumns = 3 but number of columns defined = 2'
    ]
    assert messages[0].line == 1


def test_parsed_schema_honours_column_count():
    """Test the column count invariant on a successful parse."""
    schema = parse_schema('@TotalColumns 4\nA:\nB: notEmpty\nC:\nD: unique')

    assert len(schema.columns) == schema.global_directives.total_columns.value


def test_rules_and_directives():
    """Test rules followed by directives, both kept in order."""
    schema = parse_schema(
        '@TotalColumns 1\n'
        'Name: regex("[A-Z][a-z]+") notEmpty @IgnoreCase @Optional'
    )

    column = schema.columns[0]
    assert column.rules == (RegexRule('[A-Z][a-z]+'), NotEmptyRule())
    assert column.directives == (IgnoreCaseDirective(), OptionalDirective())
    assert column.ignore_case
    assert column.is_optional
    assert not column.is_warning


def test_blank_lines_are_ignored():
    """Test blank lines between definitions."""
    schema = parse_schema('\n@TotalColumns 2\n\nA: notEmpty\n   \nB:\n')

    assert schema.column_names == ['A', 'B']


def test_rule_arguments():
    """Test literal, column reference and bare arguments."""
    schema = parse_schema(
        '@TotalColumns 4\n'
        'A: is("say \\"hi\\"")\n'
        'B: is($A)\n'
        'C: length(1, *)\n'
        'D: range(0, 10.5)'
    )

    assert schema.columns[0].rules == (IsRule(Literal('say "hi"')),)
    assert schema.columns[1].rules == (IsRule(ColumnReference('A')),)
    assert schema.columns[2].rules == (LengthRule(1, None),)
    assert schema.columns[3].rules == (RangeRule(Decimal('0'), Decimal('10.5')),)
    assert str(schema.columns[3].rules[0]) == 'range(0, 10.5)'


def test_or_rule():
    """Test rules combined with 'or'."""
    schema = parse_schema('@TotalColumns 1\nA: is("a") or is("b") unique')

    assert schema.columns[0].rules == (
        OrRule(IsRule(Literal('a')), IsRule(Literal('b'))),
        UniqueRule(),
    )
    assert schema.columns[0].rules[0].to_error() == 'is("a") or is("b")'


def test_unknown_rule():
    """Test an unknown rule name."""
    messages = failure_messages('@TotalColumns 1\nA: foo("x")')

    assert messages[0].message == 'Unknown rule "foo"'
    assert (messages[0].line, messages[0].column) == (2, 4)


def test_invalid_regex():
    """Test a regex pattern that does not compile."""
    messages = failure_messages('@TotalColumns 1\nA: regex("[")')

    assert messages[0].message.startswith('Invalid regex pattern "["')


@pytest.mark.parametrize('body, detail', [
    ('regex($B)', 'regex expects a quoted pattern'),
    ('is("a", "b")', 'is expects exactly one argument'),
    ('notEmpty("x")', 'notEmpty takes no arguments'),
    ('length(*)', 'length with one argument requires a number'),
    ('length(5, 2)', 'length minimum exceeds maximum'),
    ('range(1)', 'range expects two arguments'),
    ('range("a", 2)', 'range expects unquoted numbers or *'),
])
def test_invalid_rule_arguments(body, detail):
    """Test rule argument validation."""
    messages = failure_messages(f'@TotalColumns 2\nA: {body}\nB:')

    assert messages[0].message == f'Invalid arguments for rule {body.split("(")[0]}: {detail}'


def test_unterminated_arguments():
    """Test a missing closing parenthesis."""
    messages = failure_messages('@TotalColumns 1\nA: regex("[a]"')

    assert messages[0].message == 'Column definition contains invalid text'


def test_unknown_column_directive():
    """Test an unknown @directive in a column body."""
    messages = failure_messages('@TotalColumns 1\nA: notEmpty @Foo')

    assert messages[0].message == 'Unknown column directive "@Foo"'


def test_duplicate_column_directive():
    """Test the same column directive written twice."""
    messages = failure_messages('@TotalColumns 1\nA: @Warning @warning')

    assert messages[0].message == 'Column definition contains duplicate directive @Warning'


def test_column_directive_case_insensitive():
    """Test column directives match regardless of case."""
    schema = parse_schema('@TotalColumns 1\nA: notEmpty @warning')

    assert schema.columns[0].directives == (WarningDirective(),)


def test_invalid_column_definition():
    """Test a column line without an identifier or colon."""
    assert failure_messages('@TotalColumns 1\nA notEmpty')[0].message == (
        'Invalid column definition'
    )
    assert failure_messages('@TotalColumns 1\n: notEmpty')[0].message == (
        'Invalid column definition'
    )


def test_invalid_character():
    """Test a character that cannot start any token."""
    messages = failure_messages('@TotalColumns 1\nA: notEmpty #')

    assert messages[0].message == 'Column definition contains invalid text'
    assert messages[0].column == 13


def test_invalid_cross_reference():
    """Test a column reference to an undefined column."""
    messages = failure_messages('@TotalColumns 2\nA: is($C)\nB:')

    assert [m.message for m in messages] == ['Column: A has invalid cross reference is($C)']
    assert messages[0].line == 2


def test_schema_checks_are_collected():
    """Test a count mismatch and a bad reference are reported together."""
    messages = failure_messages('@TotalColumns 3\nA: is($Z)\nB:')

    assert [m.message for m in messages] == [
        '@TotalColumns = 3 but number of columns defined = 2',
        'Column: A has invalid cross reference is($Z)',
    ]


def test_duplicate_column_names_allowed():
    """Test column names need not be unique."""
    schema = parse_schema('@TotalColumns 2\nA:\nA:')

    assert schema.column_names == ['A', 'A']


def test_trace_does_not_change_result():
    """Test trace mode records decisions without affecting the schema."""
    text = '@TotalColumns 2 @noHeader\nA: regex("[a-z]+")\nB: @Optional'
    tracing = SchemaParser(trace=True)
    quiet = SchemaParser()

    assert tracing.parse(text) == quiet.parse(text)
    assert tracing.trace_log
    assert any('regex("[a-z]+")' in line for line in tracing.trace_log)
    assert quiet.trace_log == []


def test_trace_records_failure():
    """Test the trace ends with the failure diagnostic."""
    parser = SchemaParser(trace=True)

    with pytest.raises(SchemaParseError):
        parser.parse('@TotalColumns 1\nLastName: @IgnoreCase regex ("[a]")')

    assert 'Column definition contains invalid text' in parser.trace_log[-1]


def test_parse_file(write_file):
    """Test parsing a schema from a file."""
    path = write_file('schema.csvs', '@TotalColumns 1\nName: notEmpty\n')

    schema = SchemaParser().parse_file(path)

    assert schema.columns == (ColumnDefinition('Name', [NotEmptyRule()]),)


def test_bare_argument_rendering():
    """Test bare arguments render without quotes."""
    assert str(BareArgument('*')) == '*'
    assert str(LengthRule(3, 3, exact=True)) == 'length(3)'
