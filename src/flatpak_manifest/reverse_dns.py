# SPDX-License-Identifier: MIT
"""Reverse-DNS naming rules for Flatpak application identifiers.

References:
- https://docs.flatpak.org/en/latest/conventions.html#application-ids
"""

from __future__ import annotations

import re
from pathlib import PurePath

MAX_APP_ID_LENGTH = 255

# At least three dot-separated segments, none starting with a digit
APP_ID_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*(?:\.[A-Za-z_][A-Za-z0-9_-]*){2,}$")

# Application manifest file names, e.g. "org.example.App.yaml" or "io.github.user.repo.Devel.json"
MANIFEST_FILENAME_PATTERN = re.compile(
    r"^[a-z][a-z]+\.[a-z][0-9a-z_\-]+\.[a-z][0-9a-z_\-]+(?:\.[a-z][0-9a-z_\-]+)*\.(?:json|yaml|yml)$"
)


def is_valid_app_id(value: str) -> bool:
    """Check whether ``value`` is a well-formed application identifier.

    Examples:
        >>> is_valid_app_id("net.example.App")
        True
        >>> is_valid_app_id("example.App")
        False
    """
    if not value or len(value) > MAX_APP_ID_LENGTH:
        return False
    return APP_ID_PATTERN.match(value) is not None


def is_reverse_dns_filename(path: str | PurePath) -> bool:
    """Check whether a file name follows the application manifest naming convention.

    Only the final path component is considered and the comparison is
    case-insensitive.

    Examples:
        >>> is_reverse_dns_filename("/path/to/com.example.appName.yaml")
        True
        >>> is_reverse_dns_filename("/path/to/example.com.json")
        False
    """
    name = PurePath(str(path)).name.lower()
    return MANIFEST_FILENAME_PATTERN.match(name) is not None


def from_url(url: str) -> str:
    """Derive a reverse-DNS identifier from an https repository URL.

    Args:
        url: Repository URL, optionally ending in ``.git``

    Returns:
        The reversed host followed by the path segments

    Raises:
        ValueError: If the URL is not an https URL

    Examples:
        >>> from_url("https://github.com/louib/flatpak-rs.git")
        'com.github.louib.flatpak-rs'
        >>> from_url("https://gitlab.freedesktop.org/xorg/lib/libxmu")
        'org.freedesktop.gitlab.xorg.lib.libxmu'
    """
    if not url.startswith("https://"):
        raise ValueError(f"Only https URLs are supported: {url}")

    remainder = url[len("https://") :]
    if remainder.endswith(".git"):
        remainder = remainder[: -len(".git")]

    host, _, path = remainder.partition("/")
    parts = list(reversed(host.split(".")))
    parts.extend(segment for segment in path.split("/") if segment)
    return ".".join(parts)
