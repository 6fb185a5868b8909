# SPDX-License-Identifier: MIT
"""Summarize a manifest."""

from __future__ import annotations

from pathlib import Path

import click

from ...model import ModuleDefinition
from ..main import (
    Context,
    echo_info,
    echo_warning,
    load_context_config,
    load_manifest,
    pass_context,
)


@click.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "--resolve/--no-resolve",
    "resolve_modules",
    default=True,
    help="Resolve module references before summarizing (default: resolve).",
)
@click.option(
    "--urls",
    is_flag=True,
    help="Also list every source URL.",
)
@pass_context
def info(ctx: Context, path: Path, resolve_modules: bool, urls: bool) -> None:
    """Show the identifier, runtime and module tree of a manifest.

    \b
    Examples:
        flatpak-manifest info net.example.App.yaml
        flatpak-manifest info --no-resolve --urls net.example.App.json
    """
    load_context_config(ctx)
    path = ctx.resolve_path(path)
    application = load_manifest(path, resolve_modules=resolve_modules)

    echo_info(f"ID:       {application.id}")
    echo_info(f"Runtime:  {application.runtime}//{application.runtime_version}")
    echo_info(f"SDK:      {application.sdk}")
    if application.command:
        echo_info(f"Command:  {application.command}")
    echo_info(f"Modules:  {application.module_count}")
    echo_info(f"Depth:    {application.max_depth}")

    main_url = application.main_module_url()
    if main_url:
        echo_info(f"Main URL: {main_url}")

    if not application.is_resolved:
        echo_warning("Manifest has unresolved module or source references")

    if ctx.verbose:
        echo_info("")
        for item in application.iter_modules():
            if isinstance(item, ModuleDefinition):
                echo_info(f"  {item.name} ({item.effective_buildsystem})")
            else:
                echo_info(f"  -> {item.path}")

    if urls:
        echo_info("")
        for url in application.all_urls():
            echo_info(url)
