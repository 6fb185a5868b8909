# SPDX-License-Identifier: MIT
"""Re-encode a manifest as JSON or YAML."""

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
    echo_warning,
    load_context_config,
    load_manifest,
    pass_context,
)


@click.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "--to",
    "target",
    required=True,
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    help="Target encoding.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the converted manifest to this file instead of stdout.",
)
@pass_context
def convert(ctx: Context, path: Path, target: str, output: Optional[Path]) -> None:
    """Convert a manifest between JSON and YAML.

    Module references are kept as they are. The output is canonical: keys
    follow a fixed order and fields holding their default value are left out.

    \b
    Examples:
        flatpak-manifest convert net.example.App.json --to yaml
        flatpak-manifest convert net.example.App.yml --to json -o net.example.App.json
    """
    config = load_context_config(ctx)
    path = ctx.resolve_path(path)
    application = load_manifest(path)

    manifest_format = ManifestFormat.parse(target)
    indent = config.indent_for(manifest_format)

    if output is not None and format_from_path(output) not in (None, manifest_format):
        echo_warning(f"Writing {manifest_format.value} to {output.name}")

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

    echo_success(f"Converted {path.name} to {written}")
