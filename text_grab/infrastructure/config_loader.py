"""
Configuration loading infrastructure.
Layers the global user config, the project config and a named template.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..domain.entities import (
    PROJECT_CONFIG_KEYS,
    ConfigLoadResult,
    Configuration,
    ProjectConfigParse,
)
from .templates import NO_TEMPLATE, TemplateNotFoundError, find_template, get_template


logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILENAME = "text-grab.config.json"
GLOBAL_CONFIG_FILENAME = ".text-grab.config.json"


class ConfigurationError(Exception):
    """Raised when a config operation cannot be carried out."""
    pass


def default_global_config_path() -> Path:
    return Path.home() / GLOBAL_CONFIG_FILENAME


def project_config_path(root_path: Path) -> Path:
    return Path(root_path) / PROJECT_CONFIG_FILENAME


def parse_project_config(text: str) -> ProjectConfigParse:
    """Parse project config text, checking that every known key is present.

    Values are not type-checked here; only key presence is.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return ProjectConfigParse(error=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        return ProjectConfigParse(error="expected a JSON object")

    missing = [key for key in PROJECT_CONFIG_KEYS if key not in data]
    if missing:
        return ProjectConfigParse(error=f"missing keys: {', '.join(missing)}")

    return ProjectConfigParse(data=data)


def discard_invalid_project_config(path: Path) -> None:
    """Recovery policy for a broken project config: delete it."""
    try:
        path.unlink()
        logger.debug("Deleted invalid project config %s", path)
    except FileNotFoundError:
        pass


class JsonConfigLoader:
    """Loads the effective configuration for a project root."""

    def __init__(self, global_config_path: Optional[Path] = None):
        """Initialize with optional custom global config path."""
        self.global_config_path = global_config_path or default_global_config_path()

    def load(self, root_path: Path) -> ConfigLoadResult:
        """Load and merge every config layer. Never raises."""
        result = ConfigLoadResult(config=Configuration())

        try:
            global_data = self._read_global_config(result.warnings)
            if global_data is not None:
                result.config = self._merge(result.config, global_data, "global config", result.warnings)

            project_data = self._read_project_config(Path(root_path), result.warnings)
            if project_data is not None:
                result.config = self._merge(result.config, project_data, "project config", result.warnings)

            result.config = self._apply_template(result.config, result.warnings)

        except Exception as e:
            self._warn(result.warnings, f"Unexpected error loading configuration: {e}")

        return result

    def _read_global_config(self, warnings: List[str]) -> Optional[Dict[str, Any]]:
        path = self.global_config_path
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as file:
                data = json.load(file)
        except (OSError, ValueError) as e:
            self._warn(warnings, f"Ignoring global config {path}: {e}")
            return None

        if not isinstance(data, dict):
            self._warn(warnings, f"Ignoring global config {path}: expected a JSON object")
            return None

        logger.debug("Loaded global config from %s", path)
        return data

    def _read_project_config(self, root_path: Path, warnings: List[str]) -> Optional[Dict[str, Any]]:
        path = project_config_path(root_path)
        if not path.exists():
            return None

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            parsed = ProjectConfigParse(error=str(e))
        else:
            parsed = parse_project_config(text)

        if not parsed.ok:
            discard_invalid_project_config(path)
            self._warn(
                warnings,
                f"Invalid project config {path} ({parsed.error}) was removed. "
                "Run 'text-grab init' to re-initialize.",
            )
            return None

        logger.debug("Loaded project config from %s", path)
        return parsed.data

    def _merge(
        self,
        config: Configuration,
        data: Dict[str, Any],
        source: str,
        warnings: List[str],
    ) -> Configuration:
        try:
            return config.merged_with(data)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            self._warn(warnings, f"Ignoring {source}: {errors}")
            return config

    def _apply_template(self, config: Configuration, warnings: List[str]) -> Configuration:
        if not config.template or config.template == NO_TEMPLATE:
            return config

        template = find_template(config.template)
        if template is None:
            self._warn(warnings, f"Unknown template '{config.template}' ignored")
            return config

        return config.with_template(template)

    @staticmethod
    def _warn(warnings: List[str], message: str) -> None:
        logger.warning(message)
        warnings.append(message)


def load_configuration(root_path: Path, global_config_path: Optional[Path] = None) -> ConfigLoadResult:
    """Convenience function to load the effective configuration."""
    return JsonConfigLoader(global_config_path).load(root_path)


def write_project_config(root_path: Path, config: Configuration) -> Path:
    """Persist a configuration as the project config file."""
    path = project_config_path(root_path)
    try:
        with open(path, "w", encoding="utf-8") as file:
            json.dump(config.to_file_dict(), file, indent=2)
            file.write("\n")
    except OSError as e:
        raise ConfigurationError(f"Could not write {path}: {e}") from e
    return path


def initialize_project_config(root_path: Path, template_name: str) -> Path:
    """Write a fresh project config, overwriting any existing file."""
    if template_name == NO_TEMPLATE:
        config = Configuration()
    else:
        try:
            template = get_template(template_name)
        except TemplateNotFoundError as e:
            raise ConfigurationError(str(e)) from e
        config = Configuration(
            extensions=list(template.extensions),
            exclude=list(template.exclude),
            template=template.name,
        )

    path = write_project_config(root_path, config)
    logger.info("Initialized %s with template '%s'", path, template_name)
    return path


def set_project_template(root_path: Path, template_name: str) -> Configuration:
    """Switch the template recorded in an existing project config."""
    path = project_config_path(root_path)
    if not path.exists():
        raise ConfigurationError(
            f"No project config found at {path}. Run 'text-grab init' first."
        )

    try:
        parsed = parse_project_config(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Could not read {path}: {e}") from e
    if not parsed.ok:
        raise ConfigurationError(
            f"Project config {path} is invalid ({parsed.error}). Run 'text-grab init' first."
        )

    try:
        config = Configuration.model_validate(parsed.data)
    except ValidationError as e:
        raise ConfigurationError(f"Project config {path} is invalid: {e}") from e

    if template_name == NO_TEMPLATE:
        config = config.model_copy(update={"template": None, "extensions": [], "exclude": []})
    else:
        try:
            config = config.with_template(get_template(template_name))
        except TemplateNotFoundError as e:
            raise ConfigurationError(str(e)) from e

    write_project_config(root_path, config)
    logger.info("Set template '%s' in %s", template_name, path)
    return config
