# SPDX-License-Identifier: MIT
"""Encoding detection for Flatpak manifests.

Application, module and source manifests can all be written in either JSON or
YAML. JSON manifests may additionally carry C-style ``/* ... */`` comment lines,
which flatpak-builder tolerates.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import PurePath

from .errors import UnrecognizedFormat


class ManifestFormat(str, Enum):
    """Supported manifest encodings."""

    JSON = "json"
    YAML = "yaml"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @classmethod
    def parse(cls, value: str | ManifestFormat) -> ManifestFormat:
        """Convert a format name (``json``, ``yaml`` or ``yml``) to a ManifestFormat."""
        if isinstance(value, ManifestFormat):
            return value
        name = value.strip().lower().lstrip(".")
        if name == "yml":
            name = "yaml"
        try:
            return cls(name)
        except ValueError:
            raise UnrecognizedFormat(f"Unknown manifest format: {value!r}") from None


# A mapping line at the top level of a YAML document, e.g. "app-id: org.example.App"
_YAML_MAPPING_LINE = re.compile(r"""^(?:"[^"]*"|'[^']*'|[^\s#:\-{}\[\]][^:#]*?)\s*:(?:\s|$)""")


def format_from_path(path: str | PurePath) -> ManifestFormat | None:
    """Return the manifest format implied by a file extension, if any.

    Examples:
        >>> format_from_path("org.example.App.yml")
        <ManifestFormat.YAML: 'yaml'>
        >>> format_from_path("README.md") is None
        True
    """
    suffix = PurePath(str(path)).suffix.lower()
    if suffix == ".json":
        return ManifestFormat.JSON
    if suffix in (".yaml", ".yml"):
        return ManifestFormat.YAML
    return None


def strip_json_comments(content: str) -> str:
    """Remove whole-line and multi-line ``/* */`` comments from JSON text.

    Comment lines are blanked rather than dropped so that line numbers in
    parse errors still match the original text. Comments trailing other
    content on the same line are left untouched.
    """
    lines = []
    in_comment = False
    for line in content.split("\n"):
        stripped = line.strip()
        if not in_comment and stripped.startswith("/*"):
            if not stripped.endswith("*/"):
                in_comment = True
            lines.append("")
            continue
        if in_comment:
            if stripped.endswith("*/"):
                in_comment = False
            lines.append("")
            continue
        lines.append(line)
    return "\n".join(lines)


def _as_text(data: str | bytes) -> str:
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise UnrecognizedFormat(f"Manifest is not valid UTF-8: {e}") from e
    return data.lstrip("\ufeff")


def detect_format(
    data: str | bytes,
    hint: str | ManifestFormat | None = None,
) -> ManifestFormat:
    """Detect whether a manifest is JSON or YAML.

    Args:
        data: Raw manifest text or bytes
        hint: Explicit format that bypasses detection entirely

    Returns:
        The detected ManifestFormat

    Raises:
        UnrecognizedFormat: If neither encoding's top-level structure is found

    Example:
        >>> detect_format('{"app-id": "org.example.App"}')
        <ManifestFormat.JSON: 'json'>
        >>> detect_format("app-id: org.example.App")
        <ManifestFormat.YAML: 'yaml'>
    """
    if hint is not None:
        return ManifestFormat.parse(hint)

    text = strip_json_comments(_as_text(data))
    significant = [
        line for line in text.splitlines() if line.strip() and not line.lstrip().startswith("#")
    ]
    if not significant:
        raise UnrecognizedFormat("Manifest is empty")

    first = significant[0].lstrip()
    if first.startswith(("{", "[")):
        return ManifestFormat.JSON
    if first.startswith("---") or first == "-" or first.startswith("- "):
        return ManifestFormat.YAML
    if _YAML_MAPPING_LINE.match(first):
        return ManifestFormat.YAML

    raise UnrecognizedFormat(
        "Manifest has neither a brace-delimited nor an indentation-delimited top-level structure"
    )
