# SPDX-License-Identifier: MIT
"""CLI command implementations."""

from . import convert, info, resolve, validate

__all__ = ["validate", "resolve", "convert", "info"]
