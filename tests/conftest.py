# SPDX-License-Identifier: MIT
"""Shared fixtures for flatpak-manifest tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Callable, Generator

import pytest
import structlog
from click.testing import CliRunner

from flatpak_manifest.errors import ReferenceNotFound

MINIMAL_YAML = textwrap.dedent(
    """\
    app-id: net.example.App
    runtime: org.freedesktop.Platform
    runtime-version: '23.08'
    sdk: org.freedesktop.Sdk
    modules:
      - name: core
        buildsystem: simple
        sources:
          - type: git
            url: https://example.com/r.git
            branch: main
    """
)

EXAMPLE_YAML = textwrap.dedent(
    """\
    app-id: net.example.App
    runtime: org.freedesktop.Platform
    runtime-version: '23.08'
    sdk: org.freedesktop.Sdk
    command: example
    modules:
      - name: core
        buildsystem: simple
        sources:
          - type: git
            url: https://example.com/r.git
            branch: main
      - shared/lib.json
    """
)

LIB_FRAGMENT = json.dumps({"name": "lib", "buildsystem": "simple", "sources": []})


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_fetch() -> Callable[[dict[str, str]], Callable[[str], str]]:
    """Build a fetch capability serving fragments from a dictionary."""

    def factory(fragments: dict[str, str]) -> Callable[[str], str]:
        def fetch(name: str) -> str:
            try:
                return fragments[name]
            except KeyError:
                raise ReferenceNotFound(name) from None

        return fetch

    return factory


@pytest.fixture
def manifest_dir(tmp_path: Path) -> Path:
    """Create a directory holding an application manifest and the fragment it references."""
    project_dir = tmp_path / "manifests"
    (project_dir / "shared").mkdir(parents=True)
    (project_dir / "net.example.App.yaml").write_text(EXAMPLE_YAML)
    (project_dir / "shared" / "lib.json").write_text(LIB_FRAGMENT)
    return project_dir


@pytest.fixture
def minimal_yaml() -> str:
    """A valid application manifest with a single inline module."""
    return MINIMAL_YAML


@pytest.fixture
def example_yaml() -> str:
    """An application manifest with an inline module followed by a reference."""
    return EXAMPLE_YAML


@pytest.fixture
def lib_fragment() -> str:
    """The JSON fragment referenced as shared/lib.json."""
    return LIB_FRAGMENT
