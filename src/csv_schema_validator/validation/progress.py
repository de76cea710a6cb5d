"""
Progress reporting for long validation runs.
"""

import sys
from typing import TextIO


class ProgressCallback:
    """
    Receives progress updates from the validation engine.

    Both hooks are advisory: the engine logs and ignores any exception they
    raise. Override either or both.
    """

    def update_percent(self, complete: float) -> None:
        """Called with the completed percentage, 0 to 100."""
        pass

    def update_count(self, total: int, processed: int) -> None:
        """Called with the number of rows processed so far out of `total`."""
        pass


class CommandLineProgress(ProgressCallback):
    """Prints progress lines to a stream, stdout by default."""

    def __init__(self, stream: TextIO = None):
        self.stream = stream or sys.stdout

    def update_percent(self, complete: float) -> None:
        print(f'{complete:.0f}%', file=self.stream)

    def update_count(self, total: int, processed: int) -> None:
        print(f'processing {processed} of {total}', file=self.stream)
