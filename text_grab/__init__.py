"""
text-grab

Aggregate the contents of project files, selected by filename patterns,
search folders and exclude rules, into one annotated text blob.
"""

__version__ = "1.0.0"
__description__ = (
    "Copy project file contents to the clipboard for pasting into chat prompts"
)

# Public API exports
from .application.copy_files_content import (
    CopyFilesContentUseCase,
    NoInputError,
    WorkspaceError,
    aggregate_results,
    parse_comma_list,
)
from .domain.entities import (
    AggregationResult,
    Configuration,
    ConfigLoadResult,
    ResultLine,
    Template,
)
from .domain.patterns import is_excluded, matches
from .infrastructure.config_loader import (
    ConfigurationError,
    JsonConfigLoader,
    initialize_project_config,
    load_configuration,
    set_project_template,
)
from .infrastructure.file_discovery import DirectoryWalker
from .infrastructure.templates import TEMPLATES

__all__ = [
    "CopyFilesContentUseCase",
    "NoInputError",
    "WorkspaceError",
    "aggregate_results",
    "parse_comma_list",
    "AggregationResult",
    "Configuration",
    "ConfigLoadResult",
    "ResultLine",
    "Template",
    "matches",
    "is_excluded",
    "ConfigurationError",
    "JsonConfigLoader",
    "initialize_project_config",
    "load_configuration",
    "set_project_template",
    "DirectoryWalker",
    "TEMPLATES",
]
