# SPDX-License-Identifier: MIT
"""Validate Flatpak manifests."""

from __future__ import annotations

from pathlib import Path

import click

from ...errors import DecodeError, ManifestError
from ...loader import load_application
from ...reverse_dns import is_reverse_dns_filename
from ..main import (
    Context,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    load_context_config,
    pass_context,
)


def _validate_file(path: Path, resolve_modules: bool) -> tuple[list[str], list[str]]:
    """Validate one manifest file.

    Returns the errors and warnings found.
    """
    errors: list[str] = []
    warnings: list[str] = []

    try:
        application = load_application(path, resolve_modules=resolve_modules)
    except FileNotFoundError as e:
        errors.append(str(e))
        return errors, warnings
    except DecodeError as e:
        if e.errors:
            errors.extend(str(detail) for detail in e.errors)
        else:
            errors.append(str(e))
        return errors, warnings
    except ManifestError as e:
        errors.append(str(e))
        return errors, warnings

    if not is_reverse_dns_filename(path):
        warnings.append(f"File name {path.name!r} does not follow the reverse-DNS convention")
    elif not path.name.startswith(f"{application.id}."):
        warnings.append(
            f"File name {path.name!r} does not match application id {application.id!r}"
        )

    return errors, warnings


@click.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "--resolve",
    "resolve_modules",
    is_flag=True,
    help="Also resolve module references relative to each manifest.",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Treat warnings as errors.",
)
@pass_context
def validate(
    ctx: Context,
    paths: tuple[Path, ...],
    resolve_modules: bool,
    strict: bool,
) -> None:
    """Validate one or more application manifests.

    Every schema violation in a manifest is reported, not only the first.

    \b
    Examples:
        flatpak-manifest validate net.example.App.yaml
        flatpak-manifest validate --resolve *.json
        flatpak-manifest validate --strict net.example.App.yml
    """
    config = load_context_config(ctx)
    resolve_modules = resolve_modules or config.resolve

    failed = 0
    for path in paths:
        path = ctx.resolve_path(path)
        echo_info(f"Validating: {path}")
        errors, warnings = _validate_file(path, resolve_modules)

        for warning in warnings:
            echo_warning(f"  - {warning}")
        for error in errors:
            echo_error(f"  - {error}")

        if errors or (warnings and strict):
            failed += 1

    echo_info("")
    if failed:
        echo_error(f"Validation failed for {failed} of {len(paths)} manifest(s)!")
        raise SystemExit(1)

    echo_success("Validation passed!")
