"""Tests for the CSV file row source."""

import pytest
from csv_schema_validator.exceptions import CsvSourceError
from csv_schema_validator.validation import CsvFileSource


def test_missing_file(tmp_path):
    """Test a missing path is a source error."""
    with pytest.raises(CsvSourceError, match='File does not exist'):
        CsvFileSource(tmp_path / 'missing.csv')


def test_directory_is_rejected(tmp_path):
    """Test a directory is not a CSV file."""
    with pytest.raises(CsvSourceError, match='not a file'):
        CsvFileSource(tmp_path)


def test_utf8_by_default(write_file):
    """Test sources decode as UTF-8 unless told otherwise."""
    source = CsvFileSource(write_file('plain.csv', 'a,b\n1,2\n'))

    assert source.encoding == 'utf-8'
    assert source.is_utf8
    assert CsvFileSource(write_file('none.csv', 'a\n'), encoding=None).encoding == 'utf-8'


def test_detected_ascii_matches_utf8(write_file, caplog):
    """Test ASCII content raises no encoding mismatch for a UTF-8 source."""
    source = CsvFileSource(write_file('plain.csv', 'a,b\n1,2\n'))

    assert source.detect_encoding() == 'ascii'
    assert not [r for r in caplog.records if 'encoding mismatch' in r.getMessage()]


def test_detection_mismatch_only_warns(write_file, caplog):
    """Test a detected encoding that differs is logged but not used."""
    path = write_file('names.csv', 'Name\nJosé\nRenée\nZoë\nKraków\nMünchen\nGdańsk\nÅsa\n')
    source = CsvFileSource(path, encoding='latin-1')

    assert source.detect_encoding().lower() == 'utf-8'
    assert source.encoding == 'latin-1'
    assert [r.levelname for r in caplog.records if 'encoding mismatch' in r.getMessage()] == [
        'WARNING'
    ]


def test_empty_file(write_file):
    """Test an empty file has no rows."""
    source = CsvFileSource(write_file('empty.csv', ''))

    assert source.encoding == 'utf-8'
    assert list(source.rows()) == []
    assert source.count_rows() == 0


def test_rows_follow_csv_quoting(write_file):
    """Test quoted delimiters, quotes and newlines inside cells."""
    path = write_file('quoted.csv', 'name,note\n"Smith, J","said ""hi"""\n"a","line1\nline2"\n')

    rows = list(CsvFileSource(path).rows())

    assert rows == [
        ['name', 'note'],
        ['Smith, J', 'said "hi"'],
        ['a', 'line1\nline2'],
    ]


def test_custom_delimiter(write_file):
    """Test a non-comma delimiter."""
    path = write_file('tabs.tsv', 'a\tb\n1\t2\n')

    assert list(CsvFileSource(path, delimiter='\t').rows()) == [['a', 'b'], ['1', '2']]


def test_byte_order_mark_is_dropped(write_file):
    """Test a UTF-8 BOM does not leak into the first cell."""
    path = write_file('bom.csv', b'\xef\xbb\xbfa,b\n1,2\n')

    rows = list(CsvFileSource(path, encoding='utf-8').rows())

    assert rows[0] == ['a', 'b']


def test_check_utf8(write_file):
    """Test each malformed line is reported with its position."""
    path = write_file('bad.csv', b'a,b\n\xc3\x28,x\nok,\xfe\n')

    messages = CsvFileSource(path, encoding='utf-8').check_utf8()

    assert [(m.line, m.column) for m in messages] == [(2, 1), (3, 4)]
    assert messages[0].culprit == 'UTF-8'


def test_check_utf8_skipped_for_other_encodings(write_file):
    """Test the UTF-8 check only applies to UTF-8 sources."""
    path = write_file('latin.csv', 'caf\xe9\n', encoding='latin-1')

    assert CsvFileSource(path, encoding='latin-1').check_utf8() == []


def test_decode_failure_is_a_source_error(write_file):
    """Test undecodable content raises while reading rows."""
    path = write_file('bad.csv', b'a\n\xff\n')

    with pytest.raises(CsvSourceError, match='Failed to parse CSV file'):
        list(CsvFileSource(path, encoding='utf-8').rows())
