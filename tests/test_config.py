# SPDX-License-Identifier: MIT
"""Tests for configuration loading."""

from pathlib import Path

import pytest

from flatpak_manifest.config import (
    ConfigError,
    ManifestConfig,
    find_project_root,
    load_config,
)
from flatpak_manifest.format import ManifestFormat


class TestManifestConfig:
    """Tests for ManifestConfig."""

    def test_defaults(self):
        """An empty pyproject gives the default settings."""
        config = ManifestConfig.from_pyproject_dict({})
        assert config.default_format is ManifestFormat.YAML
        assert config.json_indent == 4
        assert config.yaml_indent == 2
        assert config.resolve is False

    def test_settings_read(self):
        """Settings are read from [tool.flatpak-manifest]."""
        config = ManifestConfig.from_pyproject_dict(
            {
                "tool": {
                    "flatpak-manifest": {
                        "default-format": "json",
                        "json-indent": 2,
                        "yaml-indent": 4,
                        "resolve": True,
                    }
                }
            }
        )
        assert config.default_format is ManifestFormat.JSON
        assert config.json_indent == 2
        assert config.yaml_indent == 4
        assert config.resolve is True

    def test_indent_for(self):
        """Each format has its own indentation width."""
        config = ManifestConfig(json_indent=3, yaml_indent=5)
        assert config.indent_for(ManifestFormat.JSON) == 3
        assert config.indent_for(ManifestFormat.YAML) == 5

    @pytest.mark.parametrize(
        "settings,message",
        [
            ({"default-format": "toml"}, "default-format"),
            ({"default-format": 1}, "default-format"),
            ({"json-indent": 0}, "json-indent"),
            ({"yaml-indent": "2"}, "yaml-indent"),
            ({"json-indent": True}, "json-indent"),
            ({"resolve": "yes"}, "resolve"),
            ({"colour": "blue"}, "colour"),
        ],
    )
    def test_invalid_settings(self, settings, message):
        """Invalid settings raise ConfigError naming the setting."""
        with pytest.raises(ConfigError) as exc_info:
            ManifestConfig.from_pyproject_dict({"tool": {"flatpak-manifest": settings}})
        assert message in str(exc_info.value)

    def test_table_required(self):
        """The tool section must be a table."""
        with pytest.raises(ConfigError):
            ManifestConfig.from_pyproject_dict({"tool": {"flatpak-manifest": "json"}})

    def test_from_pyproject(self, tmp_path: Path):
        """Settings are read from pyproject.toml on disk."""
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "x"\n\n[tool.flatpak-manifest]\ndefault-format = "yml"\n'
        )
        config = ManifestConfig.from_pyproject(tmp_path)
        assert config.default_format is ManifestFormat.YAML
        assert config.project_dir == tmp_path

    def test_from_pyproject_missing(self, tmp_path: Path):
        """A missing pyproject.toml raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ManifestConfig.from_pyproject(tmp_path)

    def test_from_pyproject_invalid_toml(self, tmp_path: Path):
        """Invalid TOML raises ConfigError."""
        (tmp_path / "pyproject.toml").write_text("[tool\n")
        with pytest.raises(ConfigError) as exc_info:
            ManifestConfig.from_pyproject(tmp_path)
        assert "Invalid TOML" in str(exc_info.value)


class TestLoadConfig:
    """Tests for load_config and find_project_root."""

    def test_find_project_root(self, tmp_path: Path):
        """The nearest directory with a pyproject.toml is found."""
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == tmp_path.resolve()

    def test_load_config_without_pyproject(self, tmp_path: Path):
        """A directory without pyproject.toml gives defaults."""
        config = load_config(tmp_path)
        assert config == ManifestConfig(project_dir=tmp_path)

    def test_load_config_with_pyproject(self, tmp_path: Path):
        """A directory with pyproject.toml is read."""
        (tmp_path / "pyproject.toml").write_text("[tool.flatpak-manifest]\nresolve = true\n")
        assert load_config(tmp_path).resolve is True
