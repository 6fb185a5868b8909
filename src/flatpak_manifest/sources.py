# SPDX-License-Identifier: MIT
"""Source kinds that a Flatpak module can build from.

Each kind is its own dataclass holding only the fields that kind accepts, so an
invalid combination (a git source with a digest, an archive with a branch)
cannot be represented. Field names map to manifest keys by replacing
underscores with hyphens.

A bare string in a ``sources`` list is a SourceReference naming a separate
file of sources, usually one written by a generator such as
flatpak-cargo-generator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from .schema import CODE_SOURCE_TYPES, VCS_SOURCE_TYPES

# Archive suffixes recognised by flatpak-builder, longest match first
ARCHIVE_TYPES: list[tuple[tuple[str, ...], str]] = [
    ((".tar.gz", ".tgz", ".taz"), "tar-gzip"),
    ((".tar.z", ".taz"), "tar-compress"),
    ((".tar.bz2", ".tz2", ".tbz2", ".tbz"), "tar-bzip2"),
    ((".tar.lz",), "tar-lzip"),
    ((".tar.lzma", ".tlz"), "tar-lzma"),
    ((".tar.lzo",), "tar-lzop"),
    ((".tar.xz", ".txz"), "tar-xz"),
    ((".tar",), "tar"),
    ((".zip",), "zip"),
    ((".rpm",), "rpm"),
    ((".7z",), "7z"),
]

SOURCE_CLASSES: dict[str, type[Source]] = {}


def source_key(field_name: str) -> str:
    """Return the manifest key for a source field name."""
    return field_name.replace("_", "-")


def _register(cls: type[Source]) -> type[Source]:
    SOURCE_CLASSES[cls.kind] = cls
    return cls


def detect_archive_type(url: str) -> str | None:
    """Guess the flatpak ``archive-type`` from a URL or file name.

    Examples:
        >>> detect_archive_type("https://example.com/foo-1.0.tar.xz")
        'tar-xz'
        >>> detect_archive_type("https://example.com/foo.deb") is None
        True
    """
    lowered = url.lower()
    for suffixes, archive_type in ARCHIVE_TYPES:
        if lowered.endswith(suffixes):
            return archive_type
    return None


@dataclass(kw_only=True)
class Source:
    """Fields shared by every source kind."""

    kind: ClassVar[str] = ""

    dest: str | None = None
    only_arches: list[str] = field(default_factory=list)
    skip_arches: list[str] = field(default_factory=list)
    x_checker_data: dict[str, Any] | None = None

    @property
    def is_code(self) -> bool:
        return self.kind in CODE_SOURCE_TYPES

    @property
    def is_vcs(self) -> bool:
        return self.kind in VCS_SOURCE_TYPES

    def all_urls(self) -> list[str]:
        """Return the primary URL followed by any mirror URLs."""
        urls: list[str] = []
        url = getattr(self, "url", None)
        if url:
            urls.append(url)
        urls.extend(getattr(self, "mirror_urls", []))
        return urls


@_register
@dataclass(kw_only=True)
class ArchiveSource(Source):
    """A tarball or other archive, extracted into the build directory."""

    kind: ClassVar[str] = "archive"

    url: str | None = None
    path: str | None = None
    sha256: str | None = None
    sha512: str | None = None
    sha1: str | None = None
    md5: str | None = None
    mirror_urls: list[str] = field(default_factory=list)
    strip_components: int | None = None
    dest_filename: str | None = None
    archive_type: str | None = None
    git_init: bool | None = None

    @property
    def detected_archive_type(self) -> str | None:
        """The explicit archive-type, or one guessed from the URL or path."""
        if self.archive_type:
            return self.archive_type
        location = self.url or self.path
        return detect_archive_type(location) if location else None


@_register
@dataclass(kw_only=True)
class GitSource(Source):
    """A git repository checked out at a branch, tag or commit."""

    kind: ClassVar[str] = "git"

    url: str | None = None
    path: str | None = None
    branch: str | None = None
    tag: str | None = None
    commit: str | None = None
    disable_fsckobjects: bool | None = None
    disable_shallow_clone: bool | None = None
    disable_submodules: bool | None = None


@_register
@dataclass(kw_only=True)
class BzrSource(Source):
    kind: ClassVar[str] = "bzr"

    url: str
    revision: str | None = None


@_register
@dataclass(kw_only=True)
class SvnSource(Source):
    kind: ClassVar[str] = "svn"

    url: str
    revision: str | None = None


@_register
@dataclass(kw_only=True)
class DirSource(Source):
    """A local directory copied into the build directory."""

    kind: ClassVar[str] = "dir"

    path: str
    skip: list[str] = field(default_factory=list)


@_register
@dataclass(kw_only=True)
class FileSource(Source):
    """A single local or downloaded file."""

    kind: ClassVar[str] = "file"

    path: str | None = None
    url: str | None = None
    sha256: str | None = None
    sha512: str | None = None
    sha1: str | None = None
    md5: str | None = None
    mirror_urls: list[str] = field(default_factory=list)
    dest_filename: str | None = None


@_register
@dataclass(kw_only=True)
class ScriptSource(Source):
    """Inline shell commands written out as an executable script."""

    kind: ClassVar[str] = "script"

    commands: list[str]
    dest_filename: str | None = None


@_register
@dataclass(kw_only=True)
class ShellSource(Source):
    """Inline shell commands run in the source directory."""

    kind: ClassVar[str] = "shell"

    commands: list[str]


@_register
@dataclass(kw_only=True)
class PatchSource(Source):
    kind: ClassVar[str] = "patch"

    path: str | None = None
    paths: list[str] = field(default_factory=list)
    strip_components: int | None = None
    use_git: bool | None = None
    use_git_am: bool | None = None
    options: list[str] = field(default_factory=list)


@_register
@dataclass(kw_only=True)
class ExtraDataSource(Source):
    """Data downloaded at install time rather than bundled at build time."""

    kind: ClassVar[str] = "extra-data"

    filename: str
    url: str
    sha256: str
    size: int
    installed_size: int | None = None


# File names written by the flatpak-builder-tools generators
KNOWN_GENERATED_SOURCES_PATHS = [
    "cargo-sources.json",
    "generated-sources.json",
    "-sources.json",
    "python2-modules.json",
    "python3-modules.json",
    "python2-requirements.json",
    "python3-requirements.json",
    "pypi-dependencies.json",
    "generated-poetry-sources.json",
    "rubygems.json",
]


@dataclass(frozen=True, slots=True)
class SourceReference:
    """Sources stored in another manifest file.

    The file holds a single source object or a list of them.

    Attributes:
        path: Name of the file, relative to the manifest that references it
    """

    path: str

    @property
    def is_generated(self) -> bool:
        """Whether the file name is one a source generator writes."""
        return self.path.endswith(tuple(KNOWN_GENERATED_SOURCES_PATHS))


SourceItem = Union[Source, SourceReference]
