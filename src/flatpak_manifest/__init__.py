# SPDX-License-Identifier: MIT
"""Read, resolve and write Flatpak application build manifests.

This package provides utilities for working with Flatpak manifests:
- Detection of the JSON or YAML encoding of a manifest
- Decoding into a typed model with structured error reporting
- Resolution of module references into a self-contained module tree
- Canonical encoding back to JSON or YAML

Example:
    >>> from flatpak_manifest import FileFetcher, decode, encode, resolve
    >>>
    >>> # Decode a manifest that references an external module
    >>> app = decode(open("net.example.App.yaml").read())
    >>> app.is_resolved
    False
    >>>
    >>> # Inline the referenced module and write the result as JSON
    >>> app = resolve(app, FileFetcher("."))
    >>> print(encode(app, "json"))
"""

__version__ = "0.1.0"

from .config import ConfigError, ManifestConfig, load_config
from .decoder import decode, decode_fragment, decode_sources, parse_text
from .encoder import encode, encode_fragment, to_document
from .errors import (
    CyclicReference,
    DecodeError,
    EncodeError,
    ManifestError,
    ReferenceNotFound,
    UnrecognizedFormat,
    ValidationErrorDetail,
)
from .format import ManifestFormat, detect_format, format_from_path
from .loader import FileFetcher, dump_application, load_application
from .model import Application, ModuleDefinition, ModuleItem, ModuleReference
from .resolver import Fetch, ModuleResolver, resolve
from .reverse_dns import from_url, is_reverse_dns_filename, is_valid_app_id
from .schema import (
    BUILD_SYSTEMS,
    SOURCE_TYPES,
    get_application_schema,
    get_default_values,
    get_fragment_schema,
    get_sources_schema,
)
from .sources import (
    ArchiveSource,
    BzrSource,
    DirSource,
    ExtraDataSource,
    FileSource,
    GitSource,
    PatchSource,
    ScriptSource,
    ShellSource,
    Source,
    SourceItem,
    SourceReference,
    SvnSource,
    detect_archive_type,
)

__all__ = [
    # Format
    "ManifestFormat",
    "detect_format",
    "format_from_path",
    # Model
    "Application",
    "ModuleDefinition",
    "ModuleReference",
    "ModuleItem",
    "Source",
    "ArchiveSource",
    "GitSource",
    "BzrSource",
    "SvnSource",
    "DirSource",
    "FileSource",
    "ScriptSource",
    "ShellSource",
    "PatchSource",
    "ExtraDataSource",
    "SourceReference",
    "SourceItem",
    "detect_archive_type",
    # Schema
    "BUILD_SYSTEMS",
    "SOURCE_TYPES",
    "get_application_schema",
    "get_fragment_schema",
    "get_sources_schema",
    "get_default_values",
    # Decoding and encoding
    "decode",
    "decode_fragment",
    "decode_sources",
    "parse_text",
    "encode",
    "encode_fragment",
    "to_document",
    # Resolution
    "resolve",
    "ModuleResolver",
    "Fetch",
    "FileFetcher",
    "load_application",
    "dump_application",
    # Naming
    "is_valid_app_id",
    "is_reverse_dns_filename",
    "from_url",
    # Configuration
    "ManifestConfig",
    "ConfigError",
    "load_config",
    # Errors
    "ManifestError",
    "UnrecognizedFormat",
    "DecodeError",
    "ValidationErrorDetail",
    "ReferenceNotFound",
    "CyclicReference",
    "EncodeError",
]
