"""
Domain entities for text-grab.
Configuration, templates and the per-file results produced by a walk.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


PROJECT_CONFIG_KEYS = ("extensions", "searchPath", "exclude", "template")


@dataclass(frozen=True)
class ResultLine:
    """Content of a single matched file, tagged with its source path."""

    path: Path
    content: str

    @property
    def formatted(self) -> str:
        """Render as a header line followed by the file content."""
        return f"// File: {self.path}\n{self.content}\n"


@dataclass(frozen=True)
class ProjectConfigParse:
    """Outcome of parsing a project config file: either data or an error."""

    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None


class Template(BaseModel):
    """A named, built-in bundle of extensions and exclude rules."""

    model_config = ConfigDict(frozen=True)

    name: str
    extensions: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)


class Configuration(BaseModel):
    """Effective configuration for one aggregation run."""

    model_config = ConfigDict(populate_by_name=True)

    extensions: List[str] = Field(default_factory=list)
    search_path: Union[str, List[str]] = Field(
        default=".",
        validation_alias=AliasChoices("searchPath", "includeFolders"),
        serialization_alias="searchPath",
    )
    exclude: List[str] = Field(default_factory=list)
    template: Optional[str] = None

    @field_validator("extensions", "exclude", mode="before")
    @classmethod
    def _coerce_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @property
    def search_roots(self) -> List[str]:
        """Search roots as a list, whatever shape the config used."""
        if isinstance(self.search_path, str):
            return [self.search_path] if self.search_path else []
        return list(self.search_path)

    def to_file_dict(self) -> Dict[str, Any]:
        """Serialize using the on-disk key names."""
        return self.model_dump(by_alias=True)

    def merged_with(self, overrides: Dict[str, Any]) -> "Configuration":
        """Shallow merge: keys present in ``overrides`` replace ours."""
        if "includeFolders" in overrides and "searchPath" not in overrides:
            overrides = {**overrides, "searchPath": overrides["includeFolders"]}
        return Configuration.model_validate({**self.to_file_dict(), **overrides})

    def with_template(self, template: Template) -> "Configuration":
        """Overlay a template: extensions replace, exclude is unioned."""
        exclude = list(dict.fromkeys([*self.exclude, *template.exclude]))
        return self.model_copy(
            update={
                "extensions": list(template.extensions),
                "exclude": exclude,
                "template": template.name,
            }
        )


@dataclass
class ConfigLoadResult:
    """A loaded configuration paired with the non-fatal warnings raised."""

    config: Configuration
    warnings: List[str] = field(default_factory=list)


class AggregationResult(BaseModel):
    """Result of a copy-files-content run."""

    content: str
    files: List[ResultLine]
    warnings: List[str] = Field(default_factory=list)
    execution_time_seconds: float = 0.0

    @property
    def is_empty(self) -> bool:
        """Whether nothing usable was aggregated."""
        return not self.content.strip()

    def get_summary(self) -> str:
        """Get a human-readable summary of the results."""
        return (
            f"Copied {len(self.files)} files "
            f"({len(self.content)} characters) "
            f"in {self.execution_time_seconds:.2f}s"
        )
