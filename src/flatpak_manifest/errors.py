# SPDX-License-Identifier: MIT
"""Error types raised while reading, resolving and writing Flatpak manifests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence


class ManifestError(Exception):
    """Base exception for manifest-related errors."""

    pass


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """Details about a single schema violation.

    Attributes:
        field: Path to the invalid field (e.g., "modules[0].sources[1]" or "runtime")
        message: Human-readable error message
        value: The invalid value that caused the error (if available)
    """

    field: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        if self.field == "<root>":
            return self.message
        return f"{self.field}: {self.message}"


class UnrecognizedFormat(ManifestError):
    """Raised when input is neither a JSON nor a YAML document."""

    pass


class DecodeError(ManifestError):
    """Raised when a document cannot be decoded into the manifest model.

    Attributes:
        errors: Every schema violation found, in document order
        source: Name of the file or fragment being decoded, if known
    """

    def __init__(
        self,
        message: str,
        errors: Sequence[ValidationErrorDetail] = (),
        source: str | None = None,
    ):
        self.errors = list(errors)
        self.source = source
        self.reason = message
        if source:
            message = f"{source}: {message}"
        super().__init__(message)

    @classmethod
    def from_details(
        cls, errors: Sequence[ValidationErrorDetail], source: str | None = None
    ) -> DecodeError:
        message = f"Manifest validation failed with {len(errors)} error(s)"
        if errors:
            message += f": {errors[0]}"
        return cls(message, errors, source)

    def with_source(self, source: str) -> DecodeError:
        """Return a copy of this error attributed to ``source``."""
        if self.source:
            source = f"{source} -> {self.source}"
        return DecodeError(self.reason, self.errors, source)


class ReferenceNotFound(ManifestError):
    """Raised when a referenced module fragment cannot be fetched."""

    def __init__(self, name: str, reason: str = ""):
        self.name = name
        message = f"Module reference not found: {name}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class CyclicReference(ManifestError):
    """Raised when module references form a cycle.

    Attributes:
        chain: Reference names along the cycle, ending with the repeated one
    """

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(f"Cyclic module reference: {' -> '.join(self.chain)}")


class EncodeError(ManifestError):
    """Raised when an application cannot be serialized."""

    pass
