# SPDX-License-Identifier: MIT
"""Tests for reading and writing manifests on disk."""

import json
from pathlib import Path

import pytest

from flatpak_manifest.errors import DecodeError, ReferenceNotFound, UnrecognizedFormat
from flatpak_manifest.loader import FileFetcher, dump_application, load_application


class TestFileFetcher:
    """Tests for FileFetcher."""

    def test_reads_relative_file(self, manifest_dir: Path, lib_fragment: str):
        """Fragments are read relative to the base directory."""
        fetch = FileFetcher(manifest_dir)
        assert fetch("shared/lib.json") == lib_fragment

    def test_missing_file(self, manifest_dir: Path):
        """A missing fragment raises ReferenceNotFound."""
        with pytest.raises(ReferenceNotFound) as exc_info:
            FileFetcher(manifest_dir)("shared/missing.json")
        assert exc_info.value.name == "shared/missing.json"

    def test_directory_is_not_a_fragment(self, manifest_dir: Path):
        """Directories cannot be fetched."""
        with pytest.raises(ReferenceNotFound):
            FileFetcher(manifest_dir)("shared")

    def test_outside_base_directory(self, manifest_dir: Path):
        """Names escaping the base directory are rejected."""
        (manifest_dir.parent / "secret.json").write_text("{}")
        with pytest.raises(ReferenceNotFound) as exc_info:
            FileFetcher(manifest_dir)("../secret.json")
        assert "outside" in str(exc_info.value)


class TestLoadApplication:
    """Tests for load_application function."""

    def test_load_unresolved(self, manifest_dir: Path):
        """References are kept unless resolution is requested."""
        app = load_application(manifest_dir / "net.example.App.yaml")
        assert app.id == "net.example.App"
        assert not app.is_resolved

    def test_load_resolved(self, manifest_dir: Path):
        """References are resolved relative to the manifest."""
        app = load_application(manifest_dir / "net.example.App.yaml", resolve_modules=True)
        assert [module.name for module in app.modules] == ["core", "lib"]

    def test_missing_manifest(self, tmp_path: Path):
        """A missing manifest raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_application(tmp_path / "net.example.App.yaml")

    def test_extension_decides_format(self, tmp_path: Path):
        """A .json file is parsed as JSON even when it looks like YAML."""
        path = tmp_path / "net.example.App.json"
        path.write_text("app-id: net.example.App\n")
        with pytest.raises(DecodeError) as exc_info:
            load_application(path)
        assert "Invalid JSON" in str(exc_info.value)
        assert str(path) in str(exc_info.value)

    def test_invalid_utf8(self, tmp_path: Path):
        """A manifest that is not UTF-8 raises DecodeError naming the file."""
        path = tmp_path / "net.example.App.yaml"
        path.write_bytes(b"app-id: net.example.App\ncommand: caf\xe9\n")
        with pytest.raises(DecodeError) as exc_info:
            load_application(path)
        assert "not valid UTF-8" in str(exc_info.value)
        assert exc_info.value.source == str(path)

    def test_invalid_utf8_without_extension(self, tmp_path: Path):
        """Without an extension, undecodable bytes cannot be sniffed."""
        path = tmp_path / "manifest"
        path.write_bytes(b"\xff\xfe")
        with pytest.raises(UnrecognizedFormat):
            load_application(path)

    def test_load_resolves_sources_files(self, manifest_dir: Path):
        """Sources files are read relative to the manifest."""
        path = manifest_dir / "net.example.App.json"
        module = {"name": "app", "sources": ["cargo-sources.json"]}
        path.write_text(
            json.dumps(
                {
                    "app-id": "net.example.App",
                    "runtime": "org.freedesktop.Platform",
                    "runtime-version": "23.08",
                    "sdk": "org.freedesktop.Sdk",
                    "modules": [module],
                }
            )
        )
        (manifest_dir / "cargo-sources.json").write_text(
            json.dumps([{"type": "dir", "path": "vendor"}])
        )
        app = load_application(path, resolve_modules=True)
        assert [source.kind for source in app.modules[0].sources] == ["dir"]

    def test_format_detected_without_extension(self, manifest_dir: Path, example_yaml: str):
        """Files without a known extension are sniffed."""
        path = manifest_dir / "manifest"
        path.write_text(example_yaml)
        assert load_application(path).command == "example"


class TestDumpApplication:
    """Tests for dump_application function."""

    def test_dump_by_extension(self, manifest_dir: Path, tmp_path: Path):
        """The output extension selects the format."""
        app = load_application(manifest_dir / "net.example.App.yaml", resolve_modules=True)
        written = dump_application(app, tmp_path / "out.json")
        document = json.loads(written.read_text())
        assert [module["name"] for module in document["modules"]] == ["core", "lib"]
        assert load_application(written) == app

    def test_dump_defaults_to_yaml(self, manifest_dir: Path, tmp_path: Path):
        """Unknown extensions are written as YAML."""
        app = load_application(manifest_dir / "net.example.App.yaml")
        written = dump_application(app, tmp_path / "manifest.txt")
        assert written.read_text().startswith("app-id: net.example.App\n")

    def test_explicit_format(self, manifest_dir: Path, tmp_path: Path):
        """An explicit format overrides the extension."""
        app = load_application(manifest_dir / "net.example.App.yaml")
        written = dump_application(app, tmp_path / "out.yaml", format="json", indent=2)
        assert written.read_text().startswith('{\n  "app-id"')
