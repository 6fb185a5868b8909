# SPDX-License-Identifier: MIT
"""Tests for reverse-DNS naming helpers."""

import pytest

from flatpak_manifest.reverse_dns import (
    MAX_APP_ID_LENGTH,
    from_url,
    is_reverse_dns_filename,
    is_valid_app_id,
)


class TestIsValidAppId:
    """Tests for is_valid_app_id function."""

    @pytest.mark.parametrize(
        "app_id",
        [
            "net.example.App",
            "org.gnome.Builder",
            "io.github.user.repo",
            "com.example.App_Name",
            "org.example.app-devel",
        ],
    )
    def test_valid_ids(self, app_id):
        """Identifiers with three or more segments are valid."""
        assert is_valid_app_id(app_id) is True

    @pytest.mark.parametrize(
        "app_id",
        [
            "",
            "example.App",
            "net..App",
            "net.example.",
            "1net.example.App",
            "net.example.2App",
            "net.example.App name",
        ],
    )
    def test_invalid_ids(self, app_id):
        """Short, empty or malformed identifiers are invalid."""
        assert is_valid_app_id(app_id) is False

    def test_too_long(self):
        """Identifiers longer than the maximum are invalid."""
        app_id = "net.example." + "a" * MAX_APP_ID_LENGTH
        assert is_valid_app_id(app_id) is False


class TestIsReverseDnsFilename:
    """Tests for is_reverse_dns_filename function."""

    @pytest.mark.parametrize(
        "path",
        [
            "com.example.appName.yaml",
            "/path/to/com.example.appName.yaml",
            "org.gnome.Builder.json",
            "io.github.user.repo.Devel.yml",
        ],
    )
    def test_manifest_names(self, path):
        """Reverse-DNS file names with a manifest extension match."""
        assert is_reverse_dns_filename(path) is True

    @pytest.mark.parametrize(
        "path",
        [
            "/path/to/example.com.json",
            "manifest.yaml",
            "com.example.appName.txt",
            "com.example.appName",
        ],
    )
    def test_other_names(self, path):
        """Other file names do not match."""
        assert is_reverse_dns_filename(path) is False


class TestFromUrl:
    """Tests for from_url function."""

    def test_github_url(self):
        """The host is reversed and the path appended, without .git."""
        assert from_url("https://github.com/louib/flatpak-rs.git") == "com.github.louib.flatpak-rs"

    def test_nested_path(self):
        """Every path segment is kept."""
        assert (
            from_url("https://gitlab.freedesktop.org/xorg/lib/libxmu")
            == "org.freedesktop.gitlab.xorg.lib.libxmu"
        )

    def test_trailing_slash(self):
        """Empty path segments are ignored."""
        assert from_url("https://gitlab.com/inkscape/inkscape/") == "com.gitlab.inkscape.inkscape"

    @pytest.mark.parametrize("url", ["http://github.com/a/b", "git@github.com:a/b.git", "b"])
    def test_non_https_url(self, url):
        """Only https URLs are accepted."""
        with pytest.raises(ValueError):
            from_url(url)
