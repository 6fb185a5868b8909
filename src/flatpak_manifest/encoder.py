# SPDX-License-Identifier: MIT
"""Serialize the manifest model back to JSON or YAML.

Output is canonical. Keys follow a fixed order that does not depend on how
the document was written, and optional fields holding their default value are
left out. Ordering and omission are done by ``to_document``, which produces
plain data. Only the last step depends on the requested encoding.
"""

from __future__ import annotations

import json
from dataclasses import fields
from typing import Any, Sequence

import structlog
import yaml

from .errors import EncodeError
from .format import ManifestFormat
from .model import Application, ModuleDefinition, ModuleItem, ModuleReference
from .reverse_dns import is_valid_app_id
from .schema import APPLICATION_DEFAULTS, BUILD_SYSTEMS, MODULE_DEFAULTS, SOURCE_SCHEMAS
from .sources import SOURCE_CLASSES, Source, SourceItem, SourceReference, source_key

logger = structlog.get_logger()

DEFAULT_JSON_INDENT = 4
DEFAULT_YAML_INDENT = 2

APPLICATION_KEY_ORDER = [
    "app-id",
    "id",
    "app-name",
    "branch",
    "default-branch",
    "collection-id",
    "runtime",
    "runtime-version",
    "runtime-commit",
    "sdk",
    "sdk-commit",
    "sdk-extensions",
    "base",
    "base-version",
    "base-extensions",
    "inherit-extensions",
    "inherit-sdk-extensions",
    "build-runtime",
    "build-extension",
    "separate-locales",
    "writable-sdk",
    "var",
    "metadata",
    "command",
    "tags",
    "add-extensions",
    "add-build-extensions",
    "rename-desktop-file",
    "rename-appdata-file",
    "rename-icon",
    "appdata-license",
    "copy-icon",
    "desktop-file-name-prefix",
    "desktop-file-name-suffix",
    "finish-args",
    "build-options",
    "cleanup",
    "cleanup-commands",
    "cleanup-platform",
    "cleanup-platform-commands",
    "prepare-platform-commands",
    "modules",
]

MODULE_KEY_ORDER = [
    "name",
    "disabled",
    "buildsystem",
    "cmake",
    "subdir",
    "builddir",
    "config-opts",
    "make-args",
    "make-install-args",
    "rm-configure",
    "no-autogen",
    "no-parallel-make",
    "install-rule",
    "no-make-install",
    "no-python-timestamp-fix",
    "build-options",
    "build-commands",
    "post-install",
    "cleanup",
    "cleanup-platform",
    "ensure-writable",
    "only-arches",
    "skip-arches",
    "run-tests",
    "test-rule",
    "test-commands",
    "sources",
    "modules",
]

SOURCE_KEY_ORDER = [
    "type",
    "url",
    "path",
    "paths",
    "mirror-urls",
    "branch",
    "tag",
    "commit",
    "revision",
    "filename",
    "dest-filename",
    "sha256",
    "sha512",
    "sha1",
    "md5",
    "size",
    "installed-size",
    "archive-type",
    "strip-components",
    "git-init",
    "disable-fsckobjects",
    "disable-shallow-clone",
    "disable-submodules",
    "use-git",
    "use-git-am",
    "options",
    "skip",
    "commands",
    "dest",
    "only-arches",
    "skip-arches",
    "x-checker-data",
]


def _ordered(document: dict[str, Any], key_order: list[str], entity: str) -> dict[str, Any]:
    unknown = [key for key in document if key not in key_order]
    if unknown:
        raise EncodeError(f"Unknown {entity} field(s): {', '.join(unknown)}")
    return {key: document[key] for key in key_order if key in document}


def _without_defaults(document: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value
        for key, value in document.items()
        if value is not None and not (key in defaults and value == defaults[key])
    }


def _missing_alternatives(document: dict[str, Any], constraint: dict) -> list[str]:
    """Return the keys of an unmet ``anyOf`` constraint, or an empty list."""
    if "if" in constraint:
        if not all(key in document for key in constraint["if"]["required"]):
            return []
        constraint = constraint["then"]
    keys = [alternative["required"][0] for alternative in constraint.get("anyOf", [])]
    if keys and not any(key in document for key in keys):
        return keys
    return []


def source_to_document(source: Source) -> dict[str, Any]:
    """Return the canonical plain-data form of a source."""
    if not isinstance(source, Source) or SOURCE_CLASSES.get(source.kind) is not type(source):
        raise EncodeError(f"Unsupported source: {source!r}")

    required = SOURCE_SCHEMAS[source.kind].get("required", [])
    document: dict[str, Any] = {"type": source.kind}
    for f in fields(source):
        key = source_key(f.name)
        value = getattr(source, f.name)
        if key in required:
            if value is None:
                raise EncodeError(f"{source.kind} source is missing required field: {key}")
            document[key] = list(value) if isinstance(value, list) else value
        elif value is not None and value != []:
            document[key] = list(value) if isinstance(value, list) else value

    for constraint in SOURCE_SCHEMAS[source.kind].get("allOf", []):
        missing = _missing_alternatives(document, constraint)
        if missing:
            raise EncodeError(f"{source.kind} source needs one of: {', '.join(missing)}")
    return _ordered(document, SOURCE_KEY_ORDER, "source")


def source_item_to_document(item: SourceItem) -> str | dict[str, Any]:
    """Return the canonical plain-data form of a source or a reference to a sources file."""
    if isinstance(item, SourceReference):
        if not item.path:
            raise EncodeError("Source reference must not be empty")
        return item.path
    return source_to_document(item)


def module_to_document(item: ModuleItem) -> str | dict[str, Any]:
    """Return the canonical plain-data form of a module item.

    References stay bare strings; inline modules become nested mappings.
    """
    if isinstance(item, ModuleReference):
        if not item.path:
            raise EncodeError("Module reference must not be empty")
        return item.path

    if not isinstance(item, ModuleDefinition):
        raise EncodeError(f"Unsupported module item: {item!r}")
    if not item.name:
        raise EncodeError("Module name must not be empty")
    if item.buildsystem not in BUILD_SYSTEMS:
        raise EncodeError(f"Module {item.name!r} has unknown buildsystem {item.buildsystem!r}")

    document: dict[str, Any] = {
        "name": item.name,
        "buildsystem": item.buildsystem,
        "config-opts": list(item.config_opts),
        "make-args": list(item.make_args),
        "make-install-args": list(item.make_install_args),
        "build-commands": list(item.build_commands),
        "post-install": list(item.post_install),
        "cleanup": list(item.cleanup),
        "disabled": item.disabled,
        "subdir": item.subdir,
        "builddir": item.builddir,
        "build-options": item.build_options,
        "sources": [source_item_to_document(source) for source in item.sources],
        "modules": [module_to_document(child) for child in item.modules],
    }
    document = _without_defaults(document, MODULE_DEFAULTS)
    document.update(item.extra)
    return _ordered(document, MODULE_KEY_ORDER, "module")


def to_document(application: Application) -> dict[str, Any]:
    """Return the canonical plain-data form of an application.

    Raises:
        EncodeError: If the application violates an invariant of the format
    """
    if not application.id:
        raise EncodeError("Application identifier must not be empty")
    if not is_valid_app_id(application.id):
        raise EncodeError(f"Invalid application identifier: {application.id!r}")
    if application.id_key not in ("app-id", "id"):
        raise EncodeError(f"Invalid identifier key: {application.id_key!r}")
    for key, value in (
        ("runtime", application.runtime),
        ("runtime-version", application.runtime_version),
        ("sdk", application.sdk),
    ):
        if not value:
            raise EncodeError(f"Required field {key} must not be empty")

    document: dict[str, Any] = {
        application.id_key: application.id,
        "runtime": application.runtime,
        "runtime-version": application.runtime_version,
        "sdk": application.sdk,
        "branch": application.branch,
        "command": application.command,
        "tags": list(application.tags),
        "sdk-extensions": list(application.sdk_extensions),
        "finish-args": list(application.finish_args),
        "build-options": application.build_options,
        "cleanup": list(application.cleanup),
        "cleanup-commands": list(application.cleanup_commands),
    }
    document = _without_defaults(document, APPLICATION_DEFAULTS)
    document.update(application.extra)
    document["modules"] = [module_to_document(item) for item in application.modules]
    return _ordered(document, APPLICATION_KEY_ORDER, "application")


def _serialize(document: Any, format: ManifestFormat | str, indent: int | None) -> str:
    manifest_format = ManifestFormat.parse(format)
    if manifest_format is ManifestFormat.JSON:
        return json.dumps(document, indent=indent or DEFAULT_JSON_INDENT, ensure_ascii=False) + "\n"
    return yaml.safe_dump(
        document,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        indent=indent or DEFAULT_YAML_INDENT,
    )


def encode(
    application: Application,
    format: ManifestFormat | str = ManifestFormat.YAML,
    *,
    indent: int | None = None,
) -> str:
    """Serialize an application manifest.

    Args:
        application: The application to serialize, resolved or not
        format: Target encoding
        indent: Indentation width (defaults to 4 for JSON and 2 for YAML)

    Returns:
        The manifest text, ending with a newline

    Raises:
        EncodeError: If the application violates an invariant of the format
        UnrecognizedFormat: If ``format`` names an unsupported encoding
    """
    manifest_format = ManifestFormat.parse(format)
    text = _serialize(to_document(application), manifest_format, indent)
    logger.debug("encoded_application", app_id=application.id, format=manifest_format.value)
    return text


def encode_fragment(
    items: Sequence[ModuleItem],
    format: ManifestFormat | str = ManifestFormat.YAML,
    *,
    indent: int | None = None,
) -> str:
    """Serialize module items as a fragment that other manifests can reference.

    A single inline module is written as a mapping, anything else as a list.
    """
    if len(items) == 1 and isinstance(items[0], ModuleDefinition):
        document: Any = module_to_document(items[0])
    else:
        document = [module_to_document(item) for item in items]
    return _serialize(document, format, indent)
