"""
CSV file row source.
"""

import codecs
import csv
import chardet
from pathlib import Path
from typing import Iterator, List, Optional
from ..exceptions import CsvSourceError
from ..utils import configure_logger
from .validation_result import ErrorMessage

DEFAULT_ENCODING = 'utf-8'
_UTF8_NAMES = ('utf-8', 'utf-8-sig')


class CsvFileSource:
    """
    Reads rows from a CSV file.

    Args:
        file_path: Path to the CSV file
        encoding: File encoding, UTF-8 when omitted
        delimiter: Field delimiter

    Raises:
        CsvSourceError: If the file does not exist or is not a file
    """

    def __init__(
        self,
        file_path: str | Path,
        encoding: Optional[str] = DEFAULT_ENCODING,
        delimiter: str = ',',
    ):
        self.__logger = configure_logger(__name__)
        self.file_path = Path(file_path)
        self.__delimiter = delimiter
        self.__validate_file_exists()
        self.encoding = encoding or DEFAULT_ENCODING

    def __validate_file_exists(self) -> None:
        """Check if file exists and is accessible."""
        if not self.file_path.exists():
            raise CsvSourceError(f'File does not exist: {self.file_path}')

        if not self.file_path.is_file():
            raise CsvSourceError(f'Path exists but is not a file: {self.file_path}')

    def detect_encoding(self) -> Optional[str]:
        """
        Detect the file encoding and warn when it differs from the expected one.

        Detection never changes how the file is decoded.

        Returns:
            The encoding chardet reports, None if it cannot tell
        """
        try:
            with open(self.file_path, 'rb') as f:
                detected = chardet.detect(f.read())
        except OSError as e:
            raise CsvSourceError(f'Failed to read CSV file {self.file_path}: {e}')

        encoding = detected['encoding']
        self.__logger.info(
            f'Detected encoding {encoding} for {self.file_path} '
            f'(confidence: {detected["confidence"]})'
        )

        if encoding and not self.__matches_expected(encoding):
            self.__logger.warning(
                f'File encoding mismatch for {self.file_path}. Expected {self.encoding}, '
                f'found {encoding} (confidence: {detected["confidence"]})'
            )

        return encoding

    def __matches_expected(self, detected: str) -> bool:
        try:
            name = codecs.lookup(detected).name
        except LookupError:
            return False

        # ASCII is a subset of UTF-8, and a BOM does not change the encoding
        if self.is_utf8 and name in ('ascii',) + _UTF8_NAMES:
            return True

        return name == codecs.lookup(self.encoding).name

    @property
    def is_utf8(self) -> bool:
        return codecs.lookup(self.encoding).name in _UTF8_NAMES

    def check_utf8(self) -> List[ErrorMessage]:
        """
        Report every line that is not well-formed UTF-8.

        Returns:
            One ErrorMessage per offending line, empty for non UTF-8 encodings
        """
        if not self.is_utf8:
            return []

        messages = []

        try:
            with open(self.file_path, 'rb') as f:
                for line_number, raw in enumerate(f, 1):
                    try:
                        raw.decode('utf-8')
                    except UnicodeDecodeError as e:
                        messages.append(ErrorMessage(
                            f'[UTF-8 Error][@{line_number}:{e.start + 1}] Invalid UTF-8 sequence',
                            line_number,
                            e.start + 1,
                            culprit='UTF-8'
                        ))
        except OSError as e:
            raise CsvSourceError(f'Failed to read CSV file {self.file_path}: {e}')

        return messages

    def rows(self) -> Iterator[List[str]]:
        """
        Yield the rows of the file as lists of strings.

        Raises:
            CsvSourceError: If the file cannot be read or tokenized
        """
        encoding = 'utf-8-sig' if self.is_utf8 else self.encoding

        try:
            with open(self.file_path, encoding=encoding, newline='') as f:
                reader = csv.reader(f, delimiter=self.__delimiter, quoting=csv.QUOTE_MINIMAL)

                for row in reader:
                    yield row
        except (csv.Error, UnicodeDecodeError, OSError) as e:
            raise CsvSourceError(f'Failed to parse CSV file {self.file_path}: {e}')

    def count_rows(self) -> int:
        """Count rows, including any header row."""
        return sum(1 for _ in self.rows())
