# SPDX-License-Identifier: MIT
"""Flatten module references into a single manifest."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ...encoder import encode
from ...errors import ManifestError
from ...format import ManifestFormat, format_from_path
from ...loader import dump_application
from ..main import (
    Context,
    echo_manifest_error,
    echo_success,
    load_context_config,
    load_manifest,
    pass_context,
)


def output_format_for(
    path: Path,
    output: Optional[Path],
    requested: Optional[str],
    default: ManifestFormat,
) -> ManifestFormat:
    """Pick the output encoding: explicit choice, then output extension, then input extension."""
    if requested:
        return ManifestFormat.parse(requested)
    if output is not None and format_from_path(output):
        return format_from_path(output)
    return format_from_path(path) or default


@click.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the resolved manifest to this file instead of stdout.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["json", "yaml", "yml"], case_sensitive=False),
    help="Output encoding (defaults to the output or input file extension).",
)
@pass_context
def resolve(
    ctx: Context,
    path: Path,
    output: Optional[Path],
    output_format: Optional[str],
) -> None:
    """Resolve every module reference in a manifest.

    References are read relative to the manifest's directory and replaced by
    the modules they contain, producing a self-contained manifest.

    \b
    Examples:
        flatpak-manifest resolve net.example.App.yaml
        flatpak-manifest resolve net.example.App.yaml -o resolved.json
        flatpak-manifest resolve net.example.App.json --format yaml
    """
    config = load_context_config(ctx)
    path = ctx.resolve_path(path)
    application = load_manifest(path, resolve_modules=True)

    manifest_format = output_format_for(path, output, output_format, config.default_format)
    indent = config.indent_for(manifest_format)

    try:
        if output is None:
            click.echo(encode(application, manifest_format, indent=indent), nl=False)
            return
        written = dump_application(
            application, ctx.resolve_path(output), format=manifest_format, indent=indent
        )
    except ManifestError as e:
        echo_manifest_error(e)
        raise SystemExit(1)

    echo_success(f"Resolved {application.module_count} module(s) into {written}")
