"""Source provider: project root to parsed, non-vendored PHP files."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path, PurePosixPath

from ..config import DetectorConfig
from ..exceptions import FileAccessError, InvalidPathError
from .extractor import extract_file
from .model import PhpFile
from .parser import PhpParser

logger = logging.getLogger(__name__)


def is_vendored(rel_path: str, vendor_dirs: list[str]) -> bool:
    """True if any directory segment is a vendor directory (case-insensitive)."""
    vendored = {name.lower() for name in vendor_dirs}
    segments = rel_path.split("/")[:-1]
    return any(segment.lower() in vendored for segment in segments)


def should_skip_file(rel_path: str, exclude_patterns: list[str]) -> bool:
    """Check a project-relative path against exclusion globs."""
    for pattern in exclude_patterns:
        if fnmatch.fnmatch(rel_path, pattern) or PurePosixPath(rel_path).match(pattern):
            return True
    return False


def relative_path(path: Path, root: Path) -> str:
    """Project-relative path with "/" separators."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def collect_php_files(root: Path, config: DetectorConfig) -> list[Path]:
    """Walk the project and return analyzable source files, sorted.

    Raises:
        InvalidPathError: If root is not a directory
    """
    root = Path(root).resolve()
    if not root.is_dir():
        raise InvalidPathError(root, "Not a directory")

    extensions = {ext.lower() for ext in config.extensions}
    vendored = {name.lower() for name in config.vendor_dirs}
    collected: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(root, followlinks=config.follow_symlinks):
        dirnames[:] = [
            d for d in dirnames if not d.startswith(".") and d.lower() not in vendored
        ]
        for filename in filenames:
            path = Path(dirpath) / filename
            if path.suffix.lower() not in extensions:
                continue
            if path.is_symlink() and not config.follow_symlinks:
                continue
            rel = relative_path(path, root)
            if should_skip_file(rel, config.exclude_patterns):
                logger.debug(f"Excluded: {rel}")
                continue
            try:
                size = path.stat().st_size
            except OSError as e:
                logger.debug(f"Cannot stat {rel}: {e}")
                continue
            if size > config.max_file_size_bytes:
                logger.debug(f"Skipping {rel}: {size} bytes exceeds size limit")
                continue
            collected.append(path)

    return sorted(collected)


def parse_php_file(path: Path, root: Path, parser: PhpParser) -> PhpFile:
    """Read and parse one file.

    Raises:
        FileAccessError: If the file cannot be read
        ParsingError: If tree-sitter produces no tree
    """
    resolved = Path(path).resolve()
    try:
        source = resolved.read_bytes()
    except OSError as e:
        raise FileAccessError(resolved, f"OS error: {e}")
    tree = parser.parse(source, resolved)
    return extract_file(resolved, relative_path(resolved, Path(root).resolve()), source, tree)
