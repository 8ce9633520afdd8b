"""Immutable analysis results.

A snapshot is built once at the end of a completed run and never changed
afterwards. It holds no syntax nodes: navigation goes through
:class:`SymbolHandle`, which re-checks the file on disk when located.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Optional

from ..frontend.model import Declaration
from .symbols import (
    ClassId,
    FileId,
    FunctionId,
    MethodId,
    SymbolId,
    SymbolKind,
    TraitId,
)


@dataclass(frozen=True)
class SymbolLocation:
    """A verified position of a declaration."""

    path: str
    line: int
    column: int


@dataclass(frozen=True)
class SymbolHandle:
    """Navigation handle for one declaration.

    Attributes:
        path: Canonical path of the declaring file
        name: Declared name
        line: 1-indexed line of the name
        start_byte: Start of the declaration at analysis time
        end_byte: End of the declaration at analysis time
        kind: Kind of the identity this handle belongs to
    """

    path: str
    name: str
    line: int
    start_byte: int
    end_byte: int
    kind: SymbolKind

    @classmethod
    def for_declaration(cls, decl: Declaration, kind: SymbolKind) -> SymbolHandle:
        return cls(
            path=decl.path,
            name=decl.name,
            line=decl.line,
            start_byte=decl.node.start_byte,
            end_byte=decl.node.end_byte,
            kind=kind,
        )

    @classmethod
    def for_file(cls, file_id: FileId, size: int = 0) -> SymbolHandle:
        return cls(
            path=file_id.path,
            name=Path(file_id.path).name,
            line=1,
            start_byte=0,
            end_byte=size,
            kind=SymbolKind.FILE,
        )

    def locate(self) -> Optional[SymbolLocation]:
        """Current location, or None if the file or the declaration is gone."""
        path = Path(self.path)
        try:
            lines = path.read_text(encoding="utf-8", errors="replace").split("\n")
        except OSError:
            return None
        if self.kind is SymbolKind.FILE:
            return SymbolLocation(self.path, 1, 1)
        if not 0 < self.line <= len(lines):
            return None
        column = lines[self.line - 1].lower().find(self.name.lower())
        if not self.name or column < 0:
            return None
        return SymbolLocation(self.path, self.line, column + 1)


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Result of one completed run.

    Attributes:
        timestamp: Completion time, milliseconds since the epoch
        dead_*: Unreachable symbols nothing references
        zombie_*: Unreachable symbols referenced only from unreachable code
        pointers: Identity -> handle, for every indexed symbol and file
        entry_points: Identities the run started from
        inbound_counts: Identity -> number of reference insertions
    """

    timestamp: int
    dead_classes: frozenset[ClassId] = frozenset()
    dead_traits: frozenset[TraitId] = frozenset()
    dead_functions: frozenset[FunctionId] = frozenset()
    dead_methods: frozenset[MethodId] = frozenset()
    zombie_classes: frozenset[ClassId] = frozenset()
    zombie_traits: frozenset[TraitId] = frozenset()
    zombie_functions: frozenset[FunctionId] = frozenset()
    zombie_methods: frozenset[MethodId] = frozenset()
    pointers: Mapping[SymbolId, SymbolHandle] = field(
        default_factory=lambda: MappingProxyType({})
    )
    entry_points: frozenset[SymbolId] = frozenset()
    inbound_counts: Mapping[SymbolId, int] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def dead(self) -> frozenset[SymbolId]:
        return self.dead_classes | self.dead_traits | self.dead_functions | self.dead_methods

    @property
    def zombie(self) -> frozenset[SymbolId]:
        return (
            self.zombie_classes | self.zombie_traits | self.zombie_functions | self.zombie_methods
        )

    def is_dead(self, symbol: SymbolId) -> bool:
        return symbol in self.dead

    def is_zombie(self, symbol: SymbolId) -> bool:
        return symbol in self.zombie

    def status_of(self, symbol: SymbolId) -> Optional[str]:
        """Classification of a symbol; None when reachable or unknown."""
        if self.is_dead(symbol):
            return "dead"
        if self.is_zombie(symbol):
            return "zombie"
        return None

    def handle(self, symbol: SymbolId) -> Optional[SymbolHandle]:
        return self.pointers.get(symbol)


def now_ms() -> int:
    return int(time.time() * 1000)
