# SPDX-License-Identifier: MIT
"""Command line interface for flatpak-manifest."""

from .main import cli, main

__all__ = ["cli", "main"]
