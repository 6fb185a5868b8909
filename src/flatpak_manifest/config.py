# SPDX-License-Identifier: MIT
"""Configuration loading from pyproject.toml.

Settings live in the ``[tool.flatpak-manifest]`` table:

    [tool.flatpak-manifest]
    default-format = "json"
    json-indent = 2
    resolve = true
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .errors import ManifestError, UnrecognizedFormat
from .format import ManifestFormat

TOOL_NAME = "flatpak-manifest"
SETTINGS = {"default-format", "json-indent", "yaml-indent", "resolve"}


class ConfigError(ManifestError):
    """Raised when configuration loading fails."""

    pass


@dataclass
class ManifestConfig:
    """Defaults used when reading and writing manifests.

    Attributes:
        default_format: Encoding used when none is given or implied by a file extension
        json_indent: Indentation width for JSON output
        yaml_indent: Indentation width for YAML output
        resolve: Whether module references are resolved when loading manifests
        project_dir: Directory the configuration was loaded from, if any
    """

    default_format: ManifestFormat = ManifestFormat.YAML
    json_indent: int = 4
    yaml_indent: int = 2
    resolve: bool = False
    project_dir: Optional[Path] = None

    def indent_for(self, format: ManifestFormat) -> int:
        """Return the configured indentation width for ``format``."""
        if format is ManifestFormat.JSON:
            return self.json_indent
        return self.yaml_indent

    @classmethod
    def from_pyproject(cls, project_dir: str | Path) -> ManifestConfig:
        """Load configuration from pyproject.toml.

        Args:
            project_dir: Directory containing pyproject.toml

        Returns:
            ManifestConfig instance

        Raises:
            ConfigError: If the file is invalid or holds invalid settings
            FileNotFoundError: If pyproject.toml doesn't exist
        """
        project_path = Path(project_dir)
        pyproject_path = project_path / "pyproject.toml"

        if not pyproject_path.exists():
            raise FileNotFoundError(f"pyproject.toml not found in {project_path}")

        try:
            with open(pyproject_path, "rb") as f:
                pyproject = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML syntax: {e}") from e

        return cls.from_pyproject_dict(pyproject, project_path)

    @classmethod
    def from_pyproject_dict(
        cls,
        pyproject: dict[str, Any],
        project_dir: Optional[Path] = None,
    ) -> ManifestConfig:
        """Create a ManifestConfig from a parsed pyproject.toml dictionary.

        Raises:
            ConfigError: If a setting has the wrong type or value
        """
        tool_config = pyproject.get("tool", {}).get(TOOL_NAME, {})
        if not isinstance(tool_config, dict):
            raise ConfigError(f"[tool.{TOOL_NAME}] must be a table")

        unknown = sorted(set(tool_config) - SETTINGS)
        if unknown:
            raise ConfigError(f"Unknown setting(s) in [tool.{TOOL_NAME}]: {', '.join(unknown)}")

        try:
            default_format = ManifestFormat.parse(tool_config.get("default-format", "yaml"))
        except (UnrecognizedFormat, AttributeError) as e:
            value = tool_config.get("default-format")
            raise ConfigError(f"Invalid default-format: {value!r}") from e

        json_indent = _positive_int(tool_config, "json-indent", 4)
        yaml_indent = _positive_int(tool_config, "yaml-indent", 2)

        resolve = tool_config.get("resolve", False)
        if not isinstance(resolve, bool):
            raise ConfigError("resolve must be a boolean")

        return cls(
            default_format=default_format,
            json_indent=json_indent,
            yaml_indent=yaml_indent,
            resolve=resolve,
            project_dir=project_dir,
        )


def _positive_int(table: dict[str, Any], key: str, default: int) -> int:
    value = table.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{key} must be a positive integer, got {value!r}")
    return value


def find_project_root(start_dir: Optional[str | Path] = None) -> Optional[Path]:
    """Find the nearest directory containing pyproject.toml.

    Args:
        start_dir: Directory to start searching from (defaults to cwd)

    Returns:
        Path to the project root, or None if there is none
    """
    current = Path(start_dir) if start_dir else Path.cwd()
    current = current.resolve()

    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    return None


def load_config(project_dir: Optional[str | Path] = None) -> ManifestConfig:
    """Load configuration for the given or nearest project directory.

    Returns:
        ManifestConfig instance, with defaults when no pyproject.toml is found

    Raises:
        ConfigError: If configuration cannot be loaded
    """
    project_path = Path(project_dir) if project_dir else find_project_root()

    if project_path is not None and (project_path / "pyproject.toml").exists():
        return ManifestConfig.from_pyproject(project_path)

    return ManifestConfig(project_dir=project_path)
