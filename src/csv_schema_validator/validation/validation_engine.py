"""
Validation engine that walks CSV rows against a compiled schema.
"""

import pandas as pd
from collections.abc import Sized
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from ..schema.model import Schema
from ..schema.rules import RuleContext
from ..utils import configure_logger
from ..utils.paths import PathResolver
from .csv_source import DEFAULT_ENCODING, CsvFileSource
from .progress import ProgressCallback
from .validation_result import ErrorMessage, FailMessage, Severity, WarningMessage

EMPTY_CSV_MESSAGE = 'CSV file contains no data rows and @permitEmpty was not specified'


class RunState:
    """
    Run-scoped state of every stateful rule, keyed by column and rule index.
    """

    def __init__(self, schema: Schema):
        self.__states: Dict[Tuple[int, int], Any] = {
            (column_index, rule_index): rule.new_state()
            for column_index, column in enumerate(schema.columns)
            for rule_index, rule in enumerate(column.rules)
        }

    def get(self, column_index: int, rule_index: int) -> Any:
        return self.__states[(column_index, rule_index)]


class ValidationEngine:
    """
    Validates CSV rows against a Schema.

    Messages are collected in row, then column, then rule order. Warnings
    never fail a run; `passed` is True as long as no ErrorMessage was
    produced.

    Args:
        fail_fast: Stop at the first ErrorMessage instead of reporting all
        path_resolver: Resolver used by fileExists rules
    """

    def __init__(
        self,
        fail_fast: bool = False,
        path_resolver: Optional[PathResolver] = None
    ):
        self.__logger = configure_logger(__name__)
        self.fail_fast = fail_fast
        self.path_resolver = path_resolver or PathResolver()
        self._results: List[FailMessage] = []

    def validate(
        self,
        schema: Schema,
        rows: Iterable[Sequence[str]],
        progress: Optional[ProgressCallback] = None,
        total: Optional[int] = None
    ) -> List[FailMessage]:
        """
        Validate rows against a schema.

        Args:
            schema: The compiled schema
            rows: CSV rows, starting with the header row unless the schema
                declares @noHeader
            progress: Optional progress callback
            total: Total number of rows for progress, defaults to len(rows)

        Returns:
            List of messages, empty for a clean pass
        """
        self._results = []

        if total is None and isinstance(rows, Sized):
            total = len(rows)

        state = RunState(schema)
        line_number = 0
        data_rows = 0
        self.__logger.info(
            f'Validating against {schema.total_columns} column(s), fail fast: {self.fail_fast}'
        )

        for row in rows:
            line_number += 1

            if line_number == 1 and schema.has_header:
                self.__report_progress(progress, total, line_number)
                continue

            data_rows += 1
            aborted = self.__validate_row(schema, list(row), line_number, state)
            self.__report_progress(progress, total, line_number)

            if aborted:
                self.__logger.info(f'Stopped at line {line_number} on first error')
                return self._results

        if data_rows == 0 and not schema.permit_empty:
            self._results.append(ErrorMessage(EMPTY_CSV_MESSAGE, culprit='@permitEmpty'))

        self.__logger.info(
            f'Validated {data_rows} row(s): {len(self.get_errors())} error(s), '
            f'{len(self.get_warnings())} warning(s)'
        )

        return self._results

    def validate_file(
        self,
        schema: Schema,
        file_path: str | Path,
        encoding: str = DEFAULT_ENCODING,
        validate_utf8: bool = True,
        progress: Optional[ProgressCallback] = None
    ) -> List[FailMessage]:
        """
        Validate a CSV file against a schema.

        Args:
            schema: The compiled schema
            file_path: Path to the CSV file
            encoding: File encoding, UTF-8 unless given
            validate_utf8: Report malformed UTF-8 lines before validating rows
            progress: Optional progress callback

        Returns:
            List of messages, empty for a clean pass

        Raises:
            CsvSourceError: If the file cannot be read
        """
        self._results = []
        source = CsvFileSource(file_path, encoding=encoding)

        # Level 1: file validation
        source.detect_encoding()

        if validate_utf8:
            file_results = source.check_utf8()

            if file_results:
                self._results = file_results
                return self._results

        # Level 2: row validation
        total = source.count_rows() if progress else None
        rows = source.rows()

        try:
            return self.validate(schema, rows, progress=progress, total=total)
        finally:
            rows.close()

    def validate_dataframe(
        self,
        schema: Schema,
        df: pd.DataFrame,
        progress: Optional[ProgressCallback] = None
    ) -> List[FailMessage]:
        """
        Validate a pandas DataFrame against a schema.

        The DataFrame's column labels act as the header row unless the
        schema declares @noHeader. Missing values are validated as empty
        strings.

        Args:
            df: pandas DataFrame to validate

        Returns:
            List of messages, empty for a clean pass
        """
        cells = df.astype(object).where(df.notna(), '').astype(str)
        rows = cells.values.tolist()

        if schema.has_header:
            rows.insert(0, [str(c) for c in df.columns])

        return self.validate(schema, rows, progress=progress)

    def __validate_row(
        self, schema: Schema, row: List[str], line_number: int, state: RunState
    ) -> bool:
        """
        Validate one row, appending its messages.

        Returns:
            True if validation must stop here (fail fast)
        """
        if len(row) != schema.total_columns:
            self._results.append(ErrorMessage(
                f'Expected @TotalColumns of {schema.total_columns} '
                f'and found {len(row)} on line {line_number}',
                line_number,
                culprit='@TotalColumns'
            ))

            return self.fail_fast

        for column_index, column in enumerate(schema.columns):
            value = row[column_index]

            if column.is_optional and value == '':
                continue

            context = RuleContext(
                row=row,
                line_number=line_number,
                column_index=column_index,
                schema=schema,
                ignore_case=column.ignore_case,
                path_resolver=self.path_resolver
            )

            for rule_index, rule in enumerate(column.rules):
                valid = rule.evaluate(value, context, state.get(column_index, rule_index))

                if column.match_is_false:
                    valid = not valid

                if valid:
                    continue

                culprit = rule.to_error()
                message = (
                    f'{culprit} fails for line: {line_number}, '
                    f'column: {column.name}, value: "{value}"'
                )

                if column.is_warning:
                    self._results.append(WarningMessage(message, line_number, column.name, culprit))
                    continue

                self._results.append(ErrorMessage(message, line_number, column.name, culprit))

                if self.fail_fast:
                    return True

        return False

    def __report_progress(
        self, progress: Optional[ProgressCallback], total: Optional[int], processed: int
    ) -> None:
        if progress is None or not total:
            return

        try:
            progress.update_count(total, processed)
            progress.update_percent(min(processed * 100.0 / total, 100.0))
        except Exception as e:
            self.__logger.warning(f'Progress callback failed: {e}')

    @property
    def results(self) -> List[FailMessage]:
        """Get all messages of the last run."""
        return self._results

    def get_errors(self) -> List[FailMessage]:
        """Get messages with ERROR severity."""
        return [r for r in self._results if r.severity == Severity.ERROR]

    def get_warnings(self) -> List[FailMessage]:
        """Get messages with WARNING severity."""
        return [r for r in self._results if r.severity == Severity.WARNING]

    def has_errors(self) -> bool:
        """Check if there are any ERROR severity messages."""
        return any(r.severity == Severity.ERROR for r in self._results)

    def has_warnings(self) -> bool:
        """Check if there are any WARNING severity messages."""
        return any(r.severity == Severity.WARNING for r in self._results)

    @property
    def passed(self) -> bool:
        """True when the last run produced no errors. Warnings are allowed."""
        return not self.has_errors()
