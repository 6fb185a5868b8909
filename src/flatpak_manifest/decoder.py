# SPDX-License-Identifier: MIT
"""Decode JSON or YAML manifests into the manifest model.

Decoding runs in two steps. The text is parsed into plain data and checked
against the JSON Schema in ``schema.py``, collecting every violation. Only
when the document is valid is it mapped onto the model, so callers get either
a complete value or a DecodeError and never a partial result.
"""

from __future__ import annotations

import json
import re
from dataclasses import fields
from typing import Any

import structlog
import yaml
from jsonschema import Draft202012Validator, ValidationError

from .errors import DecodeError, ValidationErrorDetail
from .format import ManifestFormat, detect_format, strip_json_comments
from .model import Application, ModuleDefinition, ModuleItem, ModuleReference
from .schema import (
    APPLICATION_DEFAULTS,
    APPLICATION_PASSTHROUGH_KEYS,
    APPLICATION_SCHEMA,
    FRAGMENT_SCHEMA,
    MODULE_DEFAULTS,
    MODULE_PASSTHROUGH_KEYS,
    SOURCES_SCHEMA,
)
from .sources import SOURCE_CLASSES, Source, SourceItem, SourceReference, source_key

logger = structlog.get_logger()

_APPLICATION_VALIDATOR = Draft202012Validator(APPLICATION_SCHEMA)
_FRAGMENT_VALIDATOR = Draft202012Validator(FRAGMENT_SCHEMA)
_SOURCES_VALIDATOR = Draft202012Validator(SOURCES_SCHEMA)

_REQUIRED_MESSAGE = re.compile(r"^'(?P<key>.+)' is a required property$")


def _json_path_from_error(error: ValidationError) -> str:
    """Convert a jsonschema error path to a readable field path."""
    if not error.absolute_path:
        return "<root>"
    parts = []
    for part in error.absolute_path:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        else:
            if parts:
                parts.append(f".{part}")
            else:
                parts.append(str(part))
    return "".join(parts)


def _alternative_keys(subschemas: list) -> list[str] | None:
    """Return the keys of an ``anyOf`` made only of single ``required`` clauses."""
    keys = []
    for subschema in subschemas:
        if not isinstance(subschema, dict) or set(subschema) != {"required"}:
            return None
        keys.extend(subschema["required"])
    return keys


def _format_error_message(error: ValidationError) -> str:
    """Format a jsonschema error into a human-readable message."""
    if error.validator == "required":
        match = _REQUIRED_MESSAGE.match(error.message)
        if match:
            return f"Missing required field: {match.group('key')}"
        missing = [key for key in error.validator_value if key not in error.instance]
        return f"Missing required fields: {', '.join(missing)}"

    if error.validator == "anyOf":
        keys = _alternative_keys(error.validator_value)
        if keys:
            return f"Missing one of required fields: {', '.join(keys)}"

    if error.validator == "not" and "required" in error.validator_value:
        return f"Fields cannot be used together: {', '.join(error.validator_value['required'])}"

    if error.validator == "additionalProperties":
        allowed = error.schema.get("properties", {})
        unexpected = [key for key in error.instance if key not in allowed]
        message = f"Unexpected field(s): {', '.join(map(str, unexpected))}"
        kind = allowed.get("type", {}).get("const")
        if kind:
            message += f" (not valid for {kind} sources)"
        return message

    if error.validator == "type":
        expected = error.validator_value
        if isinstance(expected, list):
            expected = " or ".join(expected)
        actual = type(error.instance).__name__
        return f"Expected {expected}, got {actual}"

    if error.validator == "pattern":
        return f"Value {error.instance!r} does not match required pattern"

    if error.validator == "enum":
        allowed = ", ".join(repr(v) for v in error.validator_value)
        return f"Value {error.instance!r} must be one of: {allowed}"

    if error.validator == "minLength":
        if error.validator_value == 1:
            return "Value must not be empty"
        return f"String must be at least {error.validator_value} character(s)"

    if error.validator == "maxLength":
        return f"String must be at most {error.validator_value} character(s)"

    if error.validator == "minItems":
        return f"List must have at least {error.validator_value} item(s)"

    if error.validator == "minimum":
        return f"Value must be at least {error.validator_value}"

    if error.validator == "const":
        return f"Value must be {error.validator_value!r}"

    return error.message


def validate_document(data: Any, validator: Draft202012Validator) -> list[ValidationErrorDetail]:
    """Validate parsed manifest data and return every violation found.

    Args:
        data: Parsed JSON or YAML data
        validator: Validator for the application or fragment schema

    Returns:
        Error details ordered by field path (empty if the document is valid)
    """
    errors = sorted(
        validator.iter_errors(data),
        key=lambda e: [str(part) for part in e.absolute_path],
    )
    return [
        ValidationErrorDetail(
            field=_json_path_from_error(error),
            message=_format_error_message(error),
            value=error.instance if error.absolute_path else None,
        )
        for error in errors
    ]


def parse_text(text: str | bytes, format: ManifestFormat | str | None = None) -> Any:
    """Parse manifest text into plain Python data without validating it.

    Raises:
        UnrecognizedFormat: If no format is given and none can be detected
        DecodeError: If the text is not syntactically valid
    """
    manifest_format = detect_format(text, format)
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Manifest is not valid UTF-8: {e}") from e
    text = text.lstrip("\ufeff")

    if manifest_format is ManifestFormat.JSON:
        try:
            return json.loads(strip_json_comments(text))
        except json.JSONDecodeError as e:
            raise DecodeError(
                f"Invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}"
            ) from e

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        problem = getattr(e, "problem", None) or str(e)
        if mark is not None:
            raise DecodeError(
                f"Invalid YAML at line {mark.line + 1}, column {mark.column + 1}: {problem}"
            ) from e
        raise DecodeError(f"Invalid YAML: {problem}") from e


def _optional(data: dict, key: str, defaults: dict) -> Any:
    if key in data:
        return data[key]
    default = defaults[key]
    return default.copy() if isinstance(default, (list, dict)) else default


def _passthrough(data: dict, keys: tuple[str, ...]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key in keys}


def _build_source(data: dict) -> Source:
    source_cls = SOURCE_CLASSES[data["type"]]
    kwargs = {
        f.name: data[source_key(f.name)] for f in fields(source_cls) if source_key(f.name) in data
    }
    return source_cls(**kwargs)


def _build_source_item(data: str | dict) -> SourceItem:
    if isinstance(data, str):
        return SourceReference(data)
    return _build_source(data)


def _build_module(data: dict) -> ModuleDefinition:
    return ModuleDefinition(
        name=data["name"],
        buildsystem=_optional(data, "buildsystem", MODULE_DEFAULTS),
        config_opts=_optional(data, "config-opts", MODULE_DEFAULTS),
        make_args=_optional(data, "make-args", MODULE_DEFAULTS),
        make_install_args=_optional(data, "make-install-args", MODULE_DEFAULTS),
        build_commands=_optional(data, "build-commands", MODULE_DEFAULTS),
        post_install=_optional(data, "post-install", MODULE_DEFAULTS),
        cleanup=_optional(data, "cleanup", MODULE_DEFAULTS),
        sources=[_build_source_item(source) for source in data.get("sources", [])],
        modules=[_build_module_item(item) for item in data.get("modules", [])],
        disabled=_optional(data, "disabled", MODULE_DEFAULTS),
        subdir=_optional(data, "subdir", MODULE_DEFAULTS),
        builddir=data.get("builddir"),
        build_options=data.get("build-options"),
        extra=_passthrough(data, MODULE_PASSTHROUGH_KEYS),
    )


def _build_module_item(data: str | dict) -> ModuleItem:
    if isinstance(data, str):
        return ModuleReference(data)
    return _build_module(data)


def _build_application(data: dict) -> Application:
    id_key = "app-id" if "app-id" in data else "id"
    return Application(
        id=data[id_key],
        runtime=data["runtime"],
        runtime_version=data["runtime-version"],
        sdk=data["sdk"],
        modules=[_build_module_item(item) for item in data["modules"]],
        command=_optional(data, "command", APPLICATION_DEFAULTS),
        branch=_optional(data, "branch", APPLICATION_DEFAULTS),
        tags=_optional(data, "tags", APPLICATION_DEFAULTS),
        sdk_extensions=_optional(data, "sdk-extensions", APPLICATION_DEFAULTS),
        finish_args=_optional(data, "finish-args", APPLICATION_DEFAULTS),
        cleanup=_optional(data, "cleanup", APPLICATION_DEFAULTS),
        cleanup_commands=_optional(data, "cleanup-commands", APPLICATION_DEFAULTS),
        build_options=data.get("build-options"),
        extra=_passthrough(data, APPLICATION_PASSTHROUGH_KEYS),
        id_key=id_key,
    )


def decode(
    text: str | bytes,
    format: ManifestFormat | str | None = None,
    *,
    source: str | None = None,
) -> Application:
    """Decode an application manifest.

    Args:
        text: Manifest content
        format: Encoding of the content; detected from the content when omitted
        source: Name of the manifest, used to attribute errors

    Returns:
        The decoded Application. Module and source references are left unresolved.

    Raises:
        UnrecognizedFormat: If no format is given and none can be detected
        DecodeError: If the content is malformed or violates the schema

    Example:
        >>> app = decode("app-id: net.example.App\\nruntime: org.freedesktop.Platform\\n"
        ...              "runtime-version: '23.08'\\nsdk: org.freedesktop.Sdk\\nmodules: []\\n")
        >>> app.id
        'net.example.App'
    """
    try:
        data = parse_text(text, format)
    except DecodeError as e:
        raise (e.with_source(source) if source else e) from e.__cause__

    if not isinstance(data, dict):
        detail = ValidationErrorDetail(
            field="<root>",
            message=f"Manifest must be a mapping, got {type(data).__name__}",
            value=data,
        )
        raise DecodeError.from_details([detail], source)

    errors = validate_document(data, _APPLICATION_VALIDATOR)
    if errors:
        raise DecodeError.from_details(errors, source)

    application = _build_application(data)
    logger.debug(
        "decoded_application",
        app_id=application.id,
        modules=len(application.modules),
        source=source,
    )
    return application


def decode_fragment(
    text: str | bytes,
    format: ManifestFormat | str | None = None,
    *,
    source: str | None = None,
) -> list[ModuleItem]:
    """Decode a module fragment referenced from another manifest.

    A fragment holds either a single module object or a list of module items.

    Returns:
        The fragment's module items, in declaration order

    Raises:
        UnrecognizedFormat: If no format is given and none can be detected
        DecodeError: If the content is malformed or violates the schema
    """
    try:
        data = parse_text(text, format)
    except DecodeError as e:
        raise (e.with_source(source) if source else e) from e.__cause__

    errors = validate_document(data, _FRAGMENT_VALIDATOR)
    if errors:
        raise DecodeError.from_details(errors, source)

    if isinstance(data, list):
        items = [_build_module_item(item) for item in data]
    else:
        items = [_build_module(data)]
    logger.debug("decoded_fragment", modules=len(items), source=source)
    return items


def decode_sources(
    text: str | bytes,
    format: ManifestFormat | str | None = None,
    *,
    source: str | None = None,
) -> list[Source]:
    """Decode a sources file referenced from a module.

    A sources file holds either a single source object or a list of them, as
    written by the flatpak-builder-tools generators.

    Raises:
        UnrecognizedFormat: If no format is given and none can be detected
        DecodeError: If the content is malformed or violates the schema
    """
    try:
        data = parse_text(text, format)
    except DecodeError as e:
        raise (e.with_source(source) if source else e) from e.__cause__

    errors = validate_document(data, _SOURCES_VALIDATOR)
    if errors:
        raise DecodeError.from_details(errors, source)

    entries = data if isinstance(data, list) else [data]
    sources = [_build_source(entry) for entry in entries]
    logger.debug("decoded_sources", sources=len(sources), source=source)
    return sources
