"""Bundled Pandoc assets and resource file copying."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import glob
import logging
import os
from pathlib import Path
import re
import shutil

from .exceptions import ResourceCopyError
from .options import Options


logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets" / "pandoc"

TEMPLATE_ASSET = "template.html"
INCLUDE_FILES_FILTER = "include-files.lua"
INCLUDE_CODE_FILES_FILTER = "include-code-files.lua"
STYLESHEET_ASSETS = ("pandoc-spec.css",)

# Two-character minimum so that Windows drive letters are not taken for schemes.
_URI_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+\-.]+:")


def bundled_asset(name: str) -> Path:
    """Return the absolute path of an asset shipped with the package."""
    return ASSETS_DIR / name


def is_uri(value: str) -> bool:
    """Return True when ``value`` starts with a URI scheme."""
    return bool(_URI_PATTERN.match(value))


def resolve_path(value: str | None, base: Path) -> Path | None:
    """Resolve ``value`` against ``base``; absolute values are kept as is."""
    if value is None:
        return None
    return (base / value).resolve()


def resource_patterns(options: Options) -> list[str]:
    """Return the file patterns to copy to the output directory after a successful run."""
    patterns = [css for css in options.css_files if not is_uri(css)]
    if options.html_output:
        patterns.extend(str(bundled_asset(name)) for name in STYLESHEET_ASSETS)
    patterns.extend(options.resource_files)
    return patterns


def _expand(pattern: str, base_directory: Path) -> Iterator[str]:
    if os.path.isabs(pattern):
        if glob.has_magic(pattern):
            yield from sorted(glob.glob(pattern, recursive=True))
        elif os.path.exists(pattern):
            yield pattern
        return
    if glob.has_magic(pattern):
        yield from sorted(glob.glob(pattern, root_dir=base_directory, recursive=True))
    elif (base_directory / pattern).exists():
        yield pattern


def copy_files(
    patterns: Iterable[str],
    destination: Path,
    *,
    base_directory: Path,
) -> list[Path]:
    """Copy files matching ``patterns`` into ``destination``.

    Relative matches keep their path relative to ``base_directory``; absolute
    matches are copied to the root of ``destination``.
    """
    copied: list[Path] = []
    for pattern in patterns:
        for match in _expand(pattern, base_directory):
            source = (base_directory / match).resolve()
            if source.is_dir():
                continue
            if os.path.isabs(match):
                target = (destination / source.name).resolve()
            else:
                target = (destination / match).resolve()
            if target == source:
                raise ResourceCopyError(f"File {match} cannot be copied to itself.")
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            logger.debug("Copied %s to %s", source, target)
            copied.append(target)
    return copied


__all__ = [
    "ASSETS_DIR",
    "INCLUDE_CODE_FILES_FILTER",
    "INCLUDE_FILES_FILTER",
    "STYLESHEET_ASSETS",
    "TEMPLATE_ASSET",
    "bundled_asset",
    "copy_files",
    "is_uri",
    "resolve_path",
    "resource_patterns",
]
