# SPDX-License-Identifier: MIT
"""JSON Schema definitions for Flatpak manifests.

The same schema validates JSON and YAML documents: both are parsed into plain
Python data before validation. Module items are either a bare string naming an
external fragment or a module object. Source items are likewise either a bare
string naming a sources file or a source object, one of a closed set of kinds
selected by its ``type`` key.

References:
- https://docs.flatpak.org/en/latest/flatpak-builder-command-reference.html
"""

from __future__ import annotations

import copy

from .reverse_dns import APP_ID_PATTERN, MAX_APP_ID_LENGTH

BUILD_SYSTEMS = ["autotools", "cmake", "cmake-ninja", "meson", "qmake", "simple"]
DEFAULT_BUILDSYSTEM = "autotools"

SOURCE_TYPES = [
    "archive",
    "git",
    "bzr",
    "svn",
    "dir",
    "file",
    "script",
    "shell",
    "patch",
    "extra-data",
]
# Source kinds that provide code, as opposed to auxiliary files
CODE_SOURCE_TYPES = ["archive", "git", "bzr", "svn", "dir"]
VCS_SOURCE_TYPES = ["git", "bzr", "svn"]

DIGEST_KEYS = ["sha256", "sha512", "sha1", "md5"]

_STRING: dict = {"type": "string"}
_NON_EMPTY_STRING: dict = {"type": "string", "minLength": 1}
_STRING_LIST: dict = {"type": "array", "items": {"type": "string"}}
_BOOLEAN: dict = {"type": "boolean"}
_COUNT: dict = {"type": "integer", "minimum": 0}
_OBJECT: dict = {"type": "object"}


def _one_of_keys(*keys: str) -> dict:
    return {"anyOf": [{"required": [key]} for key in keys]}


# Keys accepted on every source kind
_COMMON_SOURCE_PROPERTIES: dict = {
    "dest": _STRING,
    "only-arches": _STRING_LIST,
    "skip-arches": _STRING_LIST,
    "x-checker-data": _OBJECT,
}

_DIGEST_PROPERTIES: dict = {key: _NON_EMPTY_STRING for key in DIGEST_KEYS}

_URL_NEEDS_DIGEST: dict = {"if": {"required": ["url"]}, "then": _one_of_keys(*DIGEST_KEYS)}


def _source_schema(
    kind: str,
    properties: dict,
    required: list[str] | None = None,
    constraints: list[dict] | None = None,
) -> dict:
    schema: dict = {
        "type": "object",
        "properties": {"type": {"const": kind}, **_COMMON_SOURCE_PROPERTIES, **properties},
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    if constraints:
        schema["allOf"] = constraints
    return schema


SOURCE_SCHEMAS: dict = {
    "archive": _source_schema(
        "archive",
        {
            "url": _NON_EMPTY_STRING,
            "path": _NON_EMPTY_STRING,
            **_DIGEST_PROPERTIES,
            "mirror-urls": _STRING_LIST,
            "strip-components": _COUNT,
            "dest-filename": _STRING,
            "archive-type": _STRING,
            "git-init": _BOOLEAN,
        },
        constraints=[_one_of_keys("url", "path"), _URL_NEEDS_DIGEST],
    ),
    "git": _source_schema(
        "git",
        {
            "url": _NON_EMPTY_STRING,
            "path": _NON_EMPTY_STRING,
            "branch": _NON_EMPTY_STRING,
            "tag": _NON_EMPTY_STRING,
            "commit": _NON_EMPTY_STRING,
            "disable-fsckobjects": _BOOLEAN,
            "disable-shallow-clone": _BOOLEAN,
            "disable-submodules": _BOOLEAN,
        },
        constraints=[_one_of_keys("url", "path"), _one_of_keys("branch", "tag", "commit")],
    ),
    "bzr": _source_schema(
        "bzr",
        {"url": _NON_EMPTY_STRING, "revision": _STRING},
        required=["url"],
    ),
    "svn": _source_schema(
        "svn",
        {"url": _NON_EMPTY_STRING, "revision": _STRING},
        required=["url"],
    ),
    "dir": _source_schema(
        "dir",
        {"path": _NON_EMPTY_STRING, "skip": _STRING_LIST},
        required=["path"],
    ),
    "file": _source_schema(
        "file",
        {
            "path": _NON_EMPTY_STRING,
            "url": _NON_EMPTY_STRING,
            **_DIGEST_PROPERTIES,
            "mirror-urls": _STRING_LIST,
            "dest-filename": _STRING,
        },
        constraints=[_one_of_keys("path", "url"), _URL_NEEDS_DIGEST],
    ),
    "script": _source_schema(
        "script",
        {"commands": _STRING_LIST, "dest-filename": _STRING},
        required=["commands"],
    ),
    "shell": _source_schema(
        "shell",
        {"commands": _STRING_LIST},
        required=["commands"],
    ),
    "patch": _source_schema(
        "patch",
        {
            "path": _NON_EMPTY_STRING,
            "paths": {**_STRING_LIST, "minItems": 1},
            "strip-components": _COUNT,
            "use-git": _BOOLEAN,
            "use-git-am": _BOOLEAN,
            "options": _STRING_LIST,
        },
        constraints=[_one_of_keys("path", "paths")],
    ),
    "extra-data": _source_schema(
        "extra-data",
        {
            "filename": _NON_EMPTY_STRING,
            "url": _NON_EMPTY_STRING,
            "sha256": _NON_EMPTY_STRING,
            "size": _COUNT,
            "installed-size": _COUNT,
        },
        required=["filename", "url", "sha256", "size"],
    ),
}

# Recognised top-level keys that are carried through without interpretation
APPLICATION_PASSTHROUGH_PROPERTIES: dict = {
    "app-name": _STRING,
    "default-branch": _STRING,
    "collection-id": _STRING,
    "runtime-commit": _STRING,
    "sdk-commit": _STRING,
    "base": _STRING,
    "base-version": _STRING,
    "base-extensions": _STRING_LIST,
    "inherit-extensions": _STRING_LIST,
    "inherit-sdk-extensions": _STRING_LIST,
    "add-extensions": _OBJECT,
    "add-build-extensions": _OBJECT,
    "build-runtime": _BOOLEAN,
    "build-extension": _BOOLEAN,
    "separate-locales": _BOOLEAN,
    "writable-sdk": _BOOLEAN,
    "var": _STRING,
    "metadata": _STRING,
    "cleanup-platform": _STRING_LIST,
    "cleanup-platform-commands": _STRING_LIST,
    "prepare-platform-commands": _STRING_LIST,
    "rename-desktop-file": _STRING,
    "rename-appdata-file": _STRING,
    "rename-icon": _STRING,
    "appdata-license": _STRING,
    "copy-icon": _BOOLEAN,
    "desktop-file-name-prefix": _STRING,
    "desktop-file-name-suffix": _STRING,
}

MODULE_PASSTHROUGH_PROPERTIES: dict = {
    "rm-configure": _BOOLEAN,
    "no-autogen": _BOOLEAN,
    "no-parallel-make": _BOOLEAN,
    "install-rule": _STRING,
    "no-make-install": _BOOLEAN,
    "no-python-timestamp-fix": _BOOLEAN,
    "cmake": _BOOLEAN,
    "ensure-writable": _STRING_LIST,
    "only-arches": _STRING_LIST,
    "skip-arches": _STRING_LIST,
    "cleanup-platform": _STRING_LIST,
    "run-tests": _BOOLEAN,
    "test-rule": _STRING,
    "test-commands": _STRING_LIST,
}

APPLICATION_PASSTHROUGH_KEYS = tuple(APPLICATION_PASSTHROUGH_PROPERTIES)
MODULE_PASSTHROUGH_KEYS = tuple(MODULE_PASSTHROUGH_PROPERTIES)

_APP_ID: dict = {
    "type": "string",
    "minLength": 1,
    "maxLength": MAX_APP_ID_LENGTH,
    "pattern": APP_ID_PATTERN.pattern,
}

_DEFS: dict = {
    "build-options": {
        "type": "object",
        "description": "Compiler flags, environment and per-arch overrides",
    },
    "source": {
        "type": "object",
        "required": ["type"],
        "properties": {"type": {"enum": SOURCE_TYPES}},
        "allOf": [
            {
                "if": {
                    "type": "object",
                    "properties": {"type": {"const": kind}},
                    "required": ["type"],
                },
                "then": {"$ref": f"#/$defs/{kind}-source"},
            }
            for kind in SOURCE_TYPES
        ],
    },
    **{f"{kind}-source": schema for kind, schema in SOURCE_SCHEMAS.items()},
    # A bare string names a file of sources; anything else must be a source object
    "source-item": {
        "if": {"type": "string"},
        "then": {"minLength": 1},
        "else": {"$ref": "#/$defs/source"},
    },
    "module": {
        "type": "object",
        "required": ["name"],
        "properties": {
            "name": _NON_EMPTY_STRING,
            "buildsystem": {"enum": BUILD_SYSTEMS, "default": DEFAULT_BUILDSYSTEM},
            "disabled": {**_BOOLEAN, "default": False},
            "subdir": {**_STRING, "default": ""},
            "builddir": _BOOLEAN,
            "config-opts": {**_STRING_LIST, "default": []},
            "make-args": {**_STRING_LIST, "default": []},
            "make-install-args": {**_STRING_LIST, "default": []},
            "build-commands": {**_STRING_LIST, "default": []},
            "post-install": {**_STRING_LIST, "default": []},
            "cleanup": {**_STRING_LIST, "default": []},
            "build-options": {"$ref": "#/$defs/build-options"},
            "sources": {
                "type": "array",
                "items": {"$ref": "#/$defs/source-item"},
                "default": [],
            },
            "modules": {
                "type": "array",
                "items": {"$ref": "#/$defs/module-item"},
                "default": [],
            },
            **MODULE_PASSTHROUGH_PROPERTIES,
        },
        "additionalProperties": False,
    },
    # A bare string names an external fragment; anything else must be a module object
    "module-item": {
        "if": {"type": "string"},
        "then": {"minLength": 1},
        "else": {"$ref": "#/$defs/module"},
    },
}

APPLICATION_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://flatpak.org/schemas/application-manifest.json",
    "title": "Flatpak Application Manifest",
    "description": "Build manifest for a Flatpak application",
    "type": "object",
    "required": ["runtime", "runtime-version", "sdk", "modules"],
    "allOf": [
        _one_of_keys("app-id", "id"),
        {"not": {"required": ["app-id", "id"]}},
    ],
    "properties": {
        "app-id": _APP_ID,
        "id": _APP_ID,
        "branch": {**_STRING, "default": ""},
        "runtime": _NON_EMPTY_STRING,
        "runtime-version": _NON_EMPTY_STRING,
        "sdk": _NON_EMPTY_STRING,
        "sdk-extensions": {**_STRING_LIST, "default": []},
        "command": {"type": ["string", "null"], "default": None},
        "tags": {**_STRING_LIST, "default": []},
        "finish-args": {**_STRING_LIST, "default": []},
        "build-options": {"$ref": "#/$defs/build-options"},
        "cleanup": {**_STRING_LIST, "default": []},
        "cleanup-commands": {**_STRING_LIST, "default": []},
        "modules": {"type": "array", "items": {"$ref": "#/$defs/module-item"}},
        **APPLICATION_PASSTHROUGH_PROPERTIES,
    },
    "additionalProperties": False,
    "$defs": _DEFS,
}

# A module fragment holds one module object or a list of module items
FRAGMENT_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://flatpak.org/schemas/module-manifest.json",
    "title": "Flatpak Module Manifest",
    "if": {"type": "array"},
    "then": {"items": {"$ref": "#/$defs/module-item"}},
    "else": {"$ref": "#/$defs/module"},
    "$defs": _DEFS,
}

# A sources file holds one source object or a list of them
SOURCES_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://flatpak.org/schemas/sources-manifest.json",
    "title": "Flatpak Sources Manifest",
    "if": {"type": "array"},
    "then": {"items": {"$ref": "#/$defs/source"}},
    "else": {"$ref": "#/$defs/source"},
    "$defs": _DEFS,
}


def _defaults_from(properties: dict) -> dict:
    return {key: prop["default"] for key, prop in properties.items() if "default" in prop}


# Default values for optional fields
APPLICATION_DEFAULTS: dict = _defaults_from(APPLICATION_SCHEMA["properties"])
MODULE_DEFAULTS: dict = _defaults_from(_DEFS["module"]["properties"])


def get_application_schema() -> dict:
    """Return a copy of the application manifest JSON schema.

    Returns:
        A dictionary containing the JSON Schema for application manifests
    """
    return copy.deepcopy(APPLICATION_SCHEMA)


def get_fragment_schema() -> dict:
    """Return a copy of the module fragment JSON schema."""
    return copy.deepcopy(FRAGMENT_SCHEMA)


def get_sources_schema() -> dict:
    """Return a copy of the sources file JSON schema."""
    return copy.deepcopy(SOURCES_SCHEMA)


def get_default_values() -> dict:
    """Return default values for optional application and module fields.

    Returns:
        A dictionary with ``application`` and ``module`` mappings of
        field names to their default values
    """
    return {
        "application": copy.deepcopy(APPLICATION_DEFAULTS),
        "module": copy.deepcopy(MODULE_DEFAULTS),
    }
