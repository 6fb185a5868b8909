# SPDX-License-Identifier: MIT
"""Resolve module references into a fully inline module tree.

A module item written as a bare string names another manifest file holding
one module or a list of modules. Resolution replaces each reference, in
place and in order, with the fragment's own (recursively resolved) modules.

References inside a fragment are relative to the fragment's directory, the
same way flatpak-builder reads them: ``dep.json`` referenced from
``shared/lib.json`` is fetched as ``shared/dep.json``.

Source lists are resolved the same way: a bare string naming a file of sources
is replaced by the sources that file holds.
"""

from __future__ import annotations

import copy
import posixpath
from dataclasses import fields, replace
from typing import Any, Callable

import structlog

from .decoder import decode_fragment, decode_sources
from .errors import CyclicReference, DecodeError, UnrecognizedFormat
from .format import ManifestFormat, detect_format, format_from_path
from .model import Application, ModuleDefinition, ModuleItem, ModuleReference
from .sources import Source, SourceItem, SourceReference

logger = structlog.get_logger()

Fetch = Callable[[str], str]
"""Fetch capability: returns a fragment's text by name or raises ReferenceNotFound."""

# Maximum nesting of module fragments
MAX_REFERENCE_DEPTH = 100


def reference_name(path: str, base_dir: str = "") -> str:
    """Normalize a reference relative to the directory of the manifest holding it.

    Examples:
        >>> reference_name("dep.json", "shared")
        'shared/dep.json'
        >>> reference_name("../common/lib.yml", "shared")
        'common/lib.yml'
    """
    if posixpath.isabs(path):
        return posixpath.normpath(path)
    return posixpath.normpath(posixpath.join(base_dir, path))


def _copied(obj: Any, **changes: Any) -> Any:
    """Return a copy of a dataclass with ``changes`` applied and every other field deep-copied."""
    values = {
        f.name: copy.deepcopy(getattr(obj, f.name)) for f in fields(obj) if f.name not in changes
    }
    return replace(obj, **values, **changes)


def _fragment_format(name: str, text: str) -> ManifestFormat:
    try:
        return format_from_path(name) or detect_format(text)
    except UnrecognizedFormat as e:
        raise DecodeError(str(e), source=name) from e


class ModuleResolver:
    """Expands module and source references depth-first using a fetch capability.

    Cycle detection only tracks the references currently being expanded, so
    the same fragment may be used by several unrelated branches. Fragments may
    nest at most ``max_depth`` levels deep.

    The resolved tree shares no mutable state with the input.
    """

    def __init__(self, fetch: Fetch, max_depth: int = MAX_REFERENCE_DEPTH) -> None:
        self.fetch = fetch
        self.max_depth = max_depth
        self._in_flight: list[str] = []

    def resolve(self, application: Application) -> Application:
        return _copied(application, modules=self.expand(application.modules, ""))

    def expand(self, items: list[ModuleItem], base_dir: str) -> list[ModuleItem]:
        """Return ``items`` with every reference replaced by its fragment's modules."""
        expanded: list[ModuleItem] = []
        for item in items:
            if isinstance(item, ModuleReference):
                expanded.extend(self._expand_reference(item, base_dir))
            else:
                expanded.append(self._expand_definition(item, base_dir))
        return expanded

    def expand_sources(self, items: list[SourceItem], base_dir: str) -> list[Source]:
        """Return ``items`` with every reference replaced by the sources it names."""
        expanded: list[Source] = []
        for item in items:
            if isinstance(item, SourceReference):
                expanded.extend(self._expand_source_reference(item, base_dir))
            else:
                expanded.append(copy.deepcopy(item))
        return expanded

    def _expand_definition(self, module: ModuleDefinition, base_dir: str) -> ModuleDefinition:
        return _copied(
            module,
            sources=self.expand_sources(module.sources, base_dir),
            modules=self.expand(module.modules, base_dir),
        )

    def _expand_reference(self, reference: ModuleReference, base_dir: str) -> list[ModuleItem]:
        name = reference_name(reference.path, base_dir)
        if name in self._in_flight:
            raise CyclicReference([*self._in_flight, name])
        if len(self._in_flight) >= self.max_depth:
            raise DecodeError(
                f"Module references nested more than {self.max_depth} levels deep",
                source=name,
            )

        self._in_flight.append(name)
        try:
            text = self.fetch(name)
            items = decode_fragment(text, _fragment_format(name, text), source=name)
            resolved = self.expand(items, posixpath.dirname(name))
        finally:
            self._in_flight.pop()

        logger.debug("resolved_reference", name=name, modules=len(resolved))
        return resolved

    def _expand_source_reference(self, reference: SourceReference, base_dir: str) -> list[Source]:
        name = reference_name(reference.path, base_dir)
        text = self.fetch(name)
        sources = decode_sources(text, _fragment_format(name, text), source=name)
        logger.debug("resolved_source_reference", name=name, sources=len(sources))
        return sources


def resolve(application: Application, fetch: Fetch) -> Application:
    """Resolve every module and source reference in an application.

    Args:
        application: A decoded application, possibly containing references
        fetch: Returns the text of a fragment by name, or raises ReferenceNotFound

    Returns:
        A new Application whose module tree is entirely inline. The input is
        not modified and shares no mutable state with the result. Resolving
        an already inline application returns an equal value.

    Raises:
        ReferenceNotFound: If ``fetch`` cannot locate a fragment
        CyclicReference: If a fragment references itself, directly or indirectly
        DecodeError: If a fragment is not a valid module or sources manifest, or
            fragments nest more than MAX_REFERENCE_DEPTH levels deep
    """
    resolved = ModuleResolver(fetch).resolve(application)
    logger.debug("resolved_application", app_id=resolved.id, modules=resolved.module_count)
    return resolved
