# SPDX-License-Identifier: MIT
"""In-memory model of a Flatpak application manifest.

An Application owns an ordered list of module items. Each item is exactly one
of two variants, decided once when the document is decoded:

- ModuleReference: a bare string naming an external module fragment
- ModuleDefinition: an inline module with its own sources and sub-modules

Source lists follow the same pattern: a bare string is a SourceReference naming
a file of sources. After resolution every reachable item is a ModuleDefinition
and every source is a Source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from .schema import DEFAULT_BUILDSYSTEM
from .sources import Source, SourceItem, SourceReference


@dataclass(frozen=True, slots=True)
class ModuleReference:
    """A module stored in another manifest file.

    Attributes:
        path: Name of the fragment, relative to the manifest that references it
    """

    path: str


@dataclass
class ModuleDefinition:
    """An inline module definition.

    Attributes:
        name: Module name
        buildsystem: Build system kind (autotools, cmake, cmake-ninja, meson, qmake, simple)
        config_opts: Options passed to the configure step, in order
        make_args: Arguments passed to make
        make_install_args: Arguments passed to make install
        build_commands: Commands for the simple build system
        post_install: Commands run after installation
        cleanup: Glob patterns of files removed after the build
        sources: Sources fetched before building, in order, or references to files of sources
        modules: Nested module items, built before this module
        disabled: Whether the module is skipped
        subdir: Subdirectory of the sources to build in
        builddir: Whether to build in a separate directory
        build_options: Module-specific build options
        extra: Other recognised module keys, in declaration order
    """

    name: str
    buildsystem: str = DEFAULT_BUILDSYSTEM
    config_opts: list[str] = field(default_factory=list)
    make_args: list[str] = field(default_factory=list)
    make_install_args: list[str] = field(default_factory=list)
    build_commands: list[str] = field(default_factory=list)
    post_install: list[str] = field(default_factory=list)
    cleanup: list[str] = field(default_factory=list)
    sources: list[SourceItem] = field(default_factory=list)
    modules: list[ModuleItem] = field(default_factory=list)
    disabled: bool = False
    subdir: str = ""
    builddir: bool | None = None
    build_options: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def effective_buildsystem(self) -> str:
        """The build system, honouring the deprecated ``cmake: true`` flag."""
        if self.extra.get("cmake"):
            return "cmake"
        return self.buildsystem

    @property
    def inline_sources(self) -> list[Source]:
        """Sources written in this module, skipping references to source files."""
        return [source for source in self.sources if isinstance(source, Source)]

    @property
    def source_references(self) -> list[SourceReference]:
        return [source for source in self.sources if isinstance(source, SourceReference)]

    @property
    def is_patched(self) -> bool:
        return any(source.kind == "patch" for source in self.inline_sources)

    @property
    def is_composite(self) -> bool:
        """Whether more than one source provides code."""
        return sum(1 for source in self.inline_sources if source.is_code) > 1

    @property
    def max_depth(self) -> int:
        """Depth of the module tree rooted here, counting this module as 1."""
        depths = [item.max_depth for item in self.modules if isinstance(item, ModuleDefinition)]
        return max(depths, default=0) + 1

    def urls(self) -> list[str]:
        """Return the URLs of this module's sources and of its sub-modules' sources."""
        urls: list[str] = []
        for item in self.modules:
            if isinstance(item, ModuleDefinition):
                urls.extend(item.urls())
        for source in self.inline_sources:
            urls.extend(source.all_urls())
        return urls

    def main_url(self) -> str | None:
        """Return the URL of the first source, if it has one."""
        if not self.sources or isinstance(self.sources[0], SourceReference):
            return None
        return getattr(self.sources[0], "url", None)

    def iter_modules(self) -> Iterator[ModuleItem]:
        """Yield nested module items depth-first, in declaration order."""
        for item in self.modules:
            yield item
            if isinstance(item, ModuleDefinition):
                yield from item.iter_modules()


ModuleItem = Union[ModuleDefinition, ModuleReference]


@dataclass
class Application:
    """A Flatpak application manifest.

    Attributes:
        id: Reverse-DNS application identifier
        runtime: Runtime identifier (e.g., org.freedesktop.Platform)
        runtime_version: Runtime branch
        sdk: SDK identifier
        modules: Module items in build order
        command: Command run when the application starts
        branch: Branch of the application
        tags: Free-form tags
        sdk_extensions: SDK extensions installed for the build
        finish_args: Arguments for build-finish (permissions, etc.)
        cleanup: Glob patterns removed from the final application
        cleanup_commands: Commands run after the build
        build_options: Application-wide build options
        extra: Other recognised top-level keys, in declaration order
        id_key: Manifest key the identifier was read from ("app-id" or "id")
    """

    id: str
    runtime: str
    runtime_version: str
    sdk: str
    modules: list[ModuleItem] = field(default_factory=list)
    command: str | None = None
    branch: str = ""
    tags: list[str] = field(default_factory=list)
    sdk_extensions: list[str] = field(default_factory=list)
    finish_args: list[str] = field(default_factory=list)
    cleanup: list[str] = field(default_factory=list)
    cleanup_commands: list[str] = field(default_factory=list)
    build_options: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    id_key: str = "app-id"

    def iter_modules(self) -> Iterator[ModuleItem]:
        """Yield every module item in the tree, depth-first and pre-order."""
        for item in self.modules:
            yield item
            if isinstance(item, ModuleDefinition):
                yield from item.iter_modules()

    @property
    def module_count(self) -> int:
        """Number of module items in the flattened tree."""
        return sum(1 for _ in self.iter_modules())

    @property
    def is_resolved(self) -> bool:
        """Whether no module or source references remain anywhere in the tree."""
        return not any(
            isinstance(item, ModuleReference) or item.source_references
            for item in self.iter_modules()
        )

    @property
    def is_extension(self) -> bool:
        return bool(self.extra.get("build-extension", False))

    @property
    def max_depth(self) -> int:
        depths = [item.max_depth for item in self.modules if isinstance(item, ModuleDefinition)]
        return max(depths, default=1)

    def all_urls(self) -> list[str]:
        """Return every source URL (including mirrors) in the module tree."""
        urls: list[str] = []
        for item in self.modules:
            if isinstance(item, ModuleDefinition):
                urls.extend(item.urls())
        return urls

    def main_module_url(self) -> str | None:
        """Return the main URL of the last module, conventionally the application itself."""
        if not self.modules:
            return None
        main_module = self.modules[-1]
        if isinstance(main_module, ModuleReference):
            return None
        return main_module.main_url()
