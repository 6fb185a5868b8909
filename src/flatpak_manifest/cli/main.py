# SPDX-License-Identifier: MIT
"""CLI entry point for the flatpak-manifest command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from ..config import ConfigError, ManifestConfig, load_config
from ..errors import DecodeError, ManifestError
from ..loader import load_application
from ..model import Application


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[ManifestConfig] = None
        self.verbose: bool = False
        self.project_dir: Optional[Path] = None

    def load_config(self) -> ManifestConfig:
        """Load configuration, caching the result."""
        if self.config is None:
            self.config = load_config(self.project_dir)
        return self.config

    def resolve_path(self, path: Path) -> Path:
        """Interpret a relative path against the -C directory, if one was given."""
        if self.project_dir is None or path.is_absolute():
            return path
        return self.project_dir / path


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.secho(f"Warning: {message}", fg="yellow", err=True)


def echo_manifest_error(error: ManifestError) -> None:
    """Print a manifest error, listing every violation of a DecodeError."""
    echo_error(str(error))
    if isinstance(error, DecodeError) and len(error.errors) > 1:
        for detail in error.errors:
            echo_error(f"  - {detail}")


def load_context_config(ctx: Context) -> ManifestConfig:
    """Load configuration for a command, exiting on invalid settings."""
    try:
        return ctx.load_config()
    except ConfigError as e:
        echo_error(f"Configuration error: {e}")
        raise SystemExit(1)


def load_manifest(path: Path, *, resolve_modules: bool = False) -> Application:
    """Load a manifest for a command, exiting with an error message on failure."""
    try:
        return load_application(path, resolve_modules=resolve_modules)
    except FileNotFoundError as e:
        echo_error(str(e))
        raise SystemExit(1)
    except ManifestError as e:
        echo_manifest_error(e)
        raise SystemExit(1)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


@click.group()
@click.version_option(package_name="flatpak-manifest")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Run as if started in this directory.",
)
@pass_context
def cli(ctx: Context, verbose: bool, directory: Optional[Path]) -> None:
    """Flatpak application manifest tool.

    Validate, resolve and convert Flatpak build manifests written in JSON
    or YAML.

    \b
    Examples:
        flatpak-manifest validate net.example.App.yaml
        flatpak-manifest resolve net.example.App.yaml -o flat.json
        flatpak-manifest convert net.example.App.json --to yaml
        flatpak-manifest info net.example.App.yaml
    """
    ctx.verbose = verbose
    ctx.project_dir = directory
    _configure_logging(verbose)


# Import and register commands
from .commands import convert, info, resolve, validate

cli.add_command(validate.validate)
cli.add_command(resolve.resolve)
cli.add_command(convert.convert)
cli.add_command(info.info)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)
    except ManifestError as e:
        echo_manifest_error(e)
        sys.exit(1)
    except FileNotFoundError as e:
        echo_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
