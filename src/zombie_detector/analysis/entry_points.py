"""Entry point selection: which files are always reachable.

A file is an entry point when any predicate of the policy holds. The
reachability analyzer only sees the resulting identity set, so the policy
can be swapped out entirely.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Optional

from ..config import DetectorConfig
from .symbols import FileId, SymbolId


class EntryPointPolicy:
    """Path-based entry point predicates.

    Predicates (any one suffices):
        front-controller: base name is a front-controller name (case-insensitive)
        public: path starts with a public web-root directory
        cli: path starts with a CLI directory
        root: file sits directly in the project root
        tests: path starts with or contains a test directory (when included)
        glob: path matches a configured entry point glob
    """

    def __init__(self, project_root: Path | str, config: DetectorConfig) -> None:
        self.root = Path(project_root).resolve().as_posix().rstrip("/")
        self.config = config
        self._front_controllers = {n.lower() for n in config.front_controller_names}

    def relative(self, path: str) -> Optional[str]:
        """Project-relative path, None for files outside the project."""
        path = path.replace("\\", "/")
        prefix = self.root + "/"
        if path.startswith(prefix):
            return path[len(prefix) :]
        return None

    def reasons(self, path: str) -> list[str]:
        """Names of the predicates that hold for ``path``."""
        found: list[str] = []
        name = PurePosixPath(path.replace("\\", "/")).name
        if name.lower() in self._front_controllers:
            found.append("front-controller")

        rel = self.relative(path)
        if rel is None:
            return found

        if _starts_with_dir(rel, self.config.public_dirs):
            found.append("public")
        if _starts_with_dir(rel, self.config.cli_dirs):
            found.append("cli")
        if self.config.include_root_files and "/" not in rel:
            found.append("root")
        if self.config.include_tests and _has_dir_segment(rel, self.config.test_dirs):
            found.append("tests")
        if any(
            fnmatch.fnmatch(rel, g) or PurePosixPath(rel).match(g)
            for g in self.config.entry_point_globs
        ):
            found.append("glob")
        return found

    def is_entry_point(self, path: str) -> bool:
        return bool(self.reasons(path))


def _starts_with_dir(rel: str, dirs: list[str]) -> bool:
    return any(rel.startswith(d.strip("/") + "/") for d in dirs)


def _has_dir_segment(rel: str, dirs: list[str]) -> bool:
    return any(
        rel.startswith(d.strip("/") + "/") or f"/{d.strip('/')}/" in rel for d in dirs
    )


def select_entry_points(
    file_nodes: Mapping[str, FileId],
    project_root: Path | str,
    config: DetectorConfig,
    policy: Optional[EntryPointPolicy] = None,
) -> set[SymbolId]:
    """File identities the policy marks as entry points."""
    policy = policy or EntryPointPolicy(project_root, config)
    return {file_id for path, file_id in file_nodes.items() if policy.is_entry_point(path)}
