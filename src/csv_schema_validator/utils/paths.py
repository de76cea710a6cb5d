"""Path substitution and existence checks used by the fileExists rule."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple
from urllib.parse import unquote, urlparse

FILE_URI_PREFIX = 'file://'


@dataclass(frozen=True)
class PathSubstitution:
    """Replace a leading `source` fragment of a path with `target`."""
    source: str
    target: str

    def apply(self, path: str) -> Optional[str]:
        """Return the substituted path, or None if `source` does not prefix `path`."""
        if not self.source or not path.startswith(self.source):
            return None

        return self.target + path[len(self.source):]


class PathResolver:
    """
    Resolves file-path-like cell values and checks they exist.

    Args:
        substitutions: Ordered substitutions, the first match wins
        case_sensitive: Require every path component to match the on-disk
            name exactly, even on case-insensitive filesystems
    """

    def __init__(
        self,
        substitutions: Optional[Iterable[PathSubstitution]] = None,
        case_sensitive: bool = False
    ):
        self.substitutions: Tuple[PathSubstitution, ...] = tuple(substitutions or ())
        self.case_sensitive = case_sensitive

    def resolve(self, path: str) -> str:
        """
        Apply the first matching substitution and convert file URIs.

        Args:
            path: Raw path or file URI from a CSV cell

        Returns:
            A local filesystem path
        """
        for substitution in self.substitutions:
            substituted = substitution.apply(path)

            if substituted is not None:
                path = substituted
                break

        if path.startswith(FILE_URI_PREFIX):
            parsed = urlparse(path)
            path = unquote(parsed.path)

            # file:///C:/dir yields /C:/dir
            if len(path) > 2 and path[0] == '/' and path[2] == ':':
                path = path[1:]

        return path

    def exists(self, path: str) -> bool:
        """Check whether the resolved path exists."""
        resolved = Path(self.resolve(path))

        if not resolved.exists():
            return False

        if not self.case_sensitive:
            return True

        return self.__matches_case(resolved)

    @staticmethod
    def __matches_case(path: Path) -> bool:
        """Check each component against the directory listing of its parent."""
        current = Path(path.anchor) if path.is_absolute() else Path('.')

        for part in path.parts[1:] if path.is_absolute() else path.parts:
            if part in ('.', '..'):
                current = current / part
                continue

            try:
                entries = os.listdir(current)
            except OSError:
                return False

            if part not in entries:
                return False

            current = current / part

        return True
