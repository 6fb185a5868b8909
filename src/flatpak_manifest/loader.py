# SPDX-License-Identifier: MIT
"""Read and write manifests on disk."""

from __future__ import annotations

from pathlib import Path

import structlog

from .decoder import decode
from .encoder import encode
from .errors import ReferenceNotFound
from .format import ManifestFormat, format_from_path
from .model import Application
from .resolver import resolve

logger = structlog.get_logger()


class FileFetcher:
    """Fetch capability that reads module fragments from a directory.

    Fragment names are resolved against ``base_dir`` and must stay inside it.

    Example:
        >>> fetch = FileFetcher("path/to/manifest/dir")
        >>> app = resolve(app, fetch)  # doctest: +SKIP
    """

    def __init__(self, base_dir: str | Path, encoding: str = "utf-8") -> None:
        self.base_dir = Path(base_dir).resolve()
        self.encoding = encoding

    def __call__(self, name: str) -> str:
        path = (self.base_dir / name).resolve()
        if not path.is_relative_to(self.base_dir):
            raise ReferenceNotFound(name, f"outside of {self.base_dir}")
        if not path.is_file():
            raise ReferenceNotFound(name, f"{path} is not a file")
        try:
            content = path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ReferenceNotFound(name, str(e)) from e
        logger.debug("fetched_fragment", name=name, path=str(path))
        return content


def load_application(
    path: str | Path,
    *,
    format: ManifestFormat | str | None = None,
    resolve_modules: bool = False,
) -> Application:
    """Load an application manifest from a file.

    Args:
        path: Path to the manifest
        format: Encoding override; defaults to the file extension, then detection
        resolve_modules: Resolve module and source references relative to the
            manifest's directory

    Raises:
        FileNotFoundError: If the manifest does not exist
        ManifestError: If the manifest cannot be decoded or resolved
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Manifest not found: {path}")

    content = path.read_bytes()
    application = decode(content, format or format_from_path(path), source=str(path))
    if resolve_modules:
        application = resolve(application, FileFetcher(path.parent))
    return application


def dump_application(
    application: Application,
    path: str | Path,
    *,
    format: ManifestFormat | str | None = None,
    indent: int | None = None,
) -> Path:
    """Write an application manifest to a file.

    The encoding defaults to the one implied by the file extension, or YAML.

    Returns:
        The path written to
    """
    path = Path(path)
    manifest_format = format or format_from_path(path) or ManifestFormat.YAML
    path.write_text(encode(application, manifest_format, indent=indent), encoding="utf-8")
    logger.debug("wrote_manifest", path=str(path), app_id=application.id)
    return path
