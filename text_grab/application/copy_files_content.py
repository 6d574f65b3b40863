"""
Application use case for copying file contents.
Loads the layered config, fills missing fields by prompting, walks and aggregates.
"""

import os
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..domain.entities import AggregationResult, Configuration, ResultLine
from ..infrastructure.config_loader import JsonConfigLoader
from ..infrastructure.file_discovery import DirectoryWalker


# Called with (prompt, placeholder); returns the raw answer, or None when dismissed.
PromptCallback = Callable[[str, str], Optional[str]]


class WorkspaceError(Exception):
    """Raised when there is no usable project root."""
    pass


class NoInputError(Exception):
    """Raised when required include settings are still missing after prompting."""
    pass


def parse_comma_list(raw: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated answer into trimmed items.

    An empty answer means "no value" and yields None rather than [].
    """
    if raw is None or not raw.strip():
        return None
    items = [item.strip() for item in raw.split(",")]
    return [item for item in items if item] or None


def aggregate_results(lines: Iterable[ResultLine]) -> str:
    """Join formatted results with one blank line between entries."""
    return "\n".join(line.formatted for line in lines)


class CopyFilesContentUseCase:
    """Aggregate the configured project files into one text blob."""

    def __init__(
        self,
        config_loader: Optional[JsonConfigLoader] = None,
        walker: Optional[DirectoryWalker] = None,
    ):
        """Initialize with optional dependencies for testing."""
        self.config_loader = config_loader or JsonConfigLoader()
        self.walker = walker or DirectoryWalker()

    def execute(self, root_path: Path, prompt: Optional[PromptCallback] = None) -> AggregationResult:
        """Execute the copy: load config, resolve fallbacks, walk, aggregate."""
        start_time = time.time()
        root_path = self._check_workspace(root_path)

        loaded = self.config_loader.load(root_path)
        config = self._resolve_fallbacks(loaded.config, prompt)

        lines = self.walker.collect(
            root_path,
            config.extensions,
            config.search_roots,
            config.exclude,
        )

        return AggregationResult(
            content=aggregate_results(lines),
            files=lines,
            warnings=[*loaded.warnings, *self.walker.warnings],
            execution_time_seconds=time.time() - start_time,
        )

    @staticmethod
    def _check_workspace(root_path: Optional[Path]) -> Path:
        if root_path is None:
            raise WorkspaceError("No project folder given.")
        root_path = Path(os.path.abspath(root_path))
        if not root_path.is_dir():
            raise WorkspaceError(f"Project folder not found: {root_path}")
        return root_path

    def _resolve_fallbacks(self, config: Configuration, prompt: Optional[PromptCallback]) -> Configuration:
        """Ask for any include settings the config leaves empty."""
        ask = prompt or (lambda message, placeholder: None)

        extensions = config.extensions or parse_comma_list(
            ask("Enter file patterns (e.g., *.ts, *.js)", "*.ts, *.js")
        )
        search_roots = config.search_roots or parse_comma_list(
            ask("Enter folders to include (e.g., src, lib)", "src")
        )
        exclude = config.exclude or parse_comma_list(
            ask("Enter folders/files to exclude (e.g., node_modules, dist)", "node_modules, dist")
        )

        if not extensions or not search_roots:
            raise NoInputError("No file patterns or folders to include were given.")

        return config.model_copy(
            update={
                "extensions": extensions,
                "search_path": search_roots,
                "exclude": exclude or [],
            }
        )
