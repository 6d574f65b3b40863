"""
File discovery infrastructure.
Breadth-first walk over the search roots, applying include patterns and exclude rules.
"""

import logging
import os
from collections import deque
from pathlib import Path, PureWindowsPath
from typing import Deque, List, Sequence, Union

from ..domain.entities import ResultLine
from ..domain.patterns import is_excluded, matches


logger = logging.getLogger(__name__)


def _is_absolute_rule(rule: str) -> bool:
    return rule.startswith("/") or PureWindowsPath(rule).is_absolute()


class FileContentReader:
    """Reads matched files as UTF-8 text."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def read_file(self, file_path: Path) -> ResultLine:
        """Read a single file. Raises OSError or UnicodeDecodeError."""
        with open(file_path, "r", encoding=self.encoding) as f:
            return ResultLine(path=file_path, content=f.read())


class DirectoryWalker:
    """Collects matching files from one or more search roots."""

    def __init__(self, content_reader: FileContentReader = None):
        """Initialize with optional custom content reader."""
        self.content_reader = content_reader or FileContentReader()
        self.warnings: List[str] = []

    def collect(
        self,
        root_path: Path,
        extensions: Sequence[str],
        search_roots: Union[str, Sequence[str]],
        exclude: Sequence[str],
    ) -> List[ResultLine]:
        """Walk the search roots breadth-first and read every matching file."""
        root_path = Path(os.path.abspath(root_path))
        if isinstance(search_roots, str):
            search_roots = [search_roots]

        self.warnings = []
        results: List[ResultLine] = []
        queue: Deque[Path] = deque(self._resolve_root(root_path, folder) for folder in search_roots)

        while queue:
            directory = queue.popleft()

            if not directory.exists():
                logger.debug("Search path %s does not exist, skipping", directory)
                continue
            if self._is_excluded(directory, root_path, exclude):
                logger.debug("Excluded %s", directory)
                continue

            try:
                children = sorted(directory.iterdir(), key=lambda p: p.name)
            except OSError as e:
                self._warn(f"Could not list {directory}: {e}")
                continue

            for child in children:
                if self._is_excluded(child, root_path, exclude):
                    logger.debug("Excluded %s", child)
                    continue

                try:
                    if child.is_dir():
                        queue.append(child)
                    elif child.is_file() and matches(child.name, extensions):
                        results.append(self.content_reader.read_file(child))
                except (OSError, UnicodeDecodeError) as e:
                    self._warn(f"Could not read {child}: {e}")

        logger.debug("Collected %d files under %s", len(results), root_path)
        return results

    @staticmethod
    def _resolve_root(root_path: Path, folder: str) -> Path:
        return Path(os.path.abspath(root_path / folder))

    @staticmethod
    def _is_excluded(path: Path, root_path: Path, exclude: Sequence[str]) -> bool:
        """Test exclude rules against the path.

        Absolute rules see the absolute path; all other rules see the path
        relative to the project root when it lies under it.
        """
        if not exclude:
            return False

        absolute_rules = [rule for rule in exclude if _is_absolute_rule(rule)]
        if absolute_rules and is_excluded(path.as_posix(), absolute_rules):
            return True

        try:
            candidate = path.relative_to(root_path).as_posix()
        except ValueError:
            candidate = path.as_posix()
        if candidate == ".":
            candidate = ""
        return is_excluded(candidate, [rule for rule in exclude if not _is_absolute_rule(rule)])

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)
