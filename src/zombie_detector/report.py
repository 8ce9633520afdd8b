"""Findings: snapshot classifications turned into presentable records."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from .analysis.snapshot import AnalysisSnapshot, SymbolHandle
from .analysis.symbols import MethodId, SymbolId, SymbolKind, sort_key

DEAD = "dead"
ZOMBIE = "zombie"

_DEAD_MESSAGES = {
    SymbolKind.CLASS: "Class '{name}' is never instantiated or referenced in this project (dead code)",
    SymbolKind.TRAIT: "Trait '{name}' is never used in this project (dead code)",
    SymbolKind.FUNCTION: "Function '{name}' is never called in this project (dead code)",
    SymbolKind.METHOD: "Method '{name}' is never called in this project (dead code)",
}

_ZOMBIE_NOUNS = {
    SymbolKind.CLASS: "Class",
    SymbolKind.TRAIT: "Trait",
    SymbolKind.FUNCTION: "Function",
    SymbolKind.METHOD: "Method",
}


@dataclass(frozen=True)
class Finding:
    """One dead or zombie symbol.

    Attributes:
        symbol: The classified identity
        status: "dead" or "zombie"
        message: Human-readable description
        location: Handle of the declaration, None if the snapshot has none
    """

    symbol: SymbolId
    status: str
    message: str
    location: Optional[SymbolHandle]

    @property
    def path(self) -> str:
        return self.location.path if self.location else ""

    @property
    def line(self) -> int:
        return self.location.line if self.location else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol.label,
            "kind": self.symbol.kind.value,
            "status": self.status,
            "message": self.message,
            "path": self.path,
            "line": self.line,
        }


def short_name(symbol: SymbolId) -> str:
    if isinstance(symbol, MethodId):
        return symbol.name
    return symbol.label.rstrip("\\").rsplit("\\", 1)[-1]


def message_for(symbol: SymbolId, status: str, name: Optional[str] = None) -> str:
    name = name or short_name(symbol)
    if status == DEAD:
        return _DEAD_MESSAGES[symbol.kind].format(name=name)
    return f"{_ZOMBIE_NOUNS[symbol.kind]} '{name}' is only reachable from dead code (zombie code)"


def build_findings(
    snapshot: AnalysisSnapshot, report_magic_methods: bool = False
) -> list[Finding]:
    """Findings for every dead and zombie symbol, sorted by file and line.

    Methods starting with ``__`` are omitted unless ``report_magic_methods``;
    their classification in the snapshot is unchanged.
    """
    findings: list[Finding] = []
    for status, symbols in ((DEAD, snapshot.dead), (ZOMBIE, snapshot.zombie)):
        for symbol in symbols:
            if (
                isinstance(symbol, MethodId)
                and symbol.name.startswith("__")
                and not report_magic_methods
            ):
                continue
            handle = snapshot.handle(symbol)
            findings.append(
                Finding(
                    symbol=symbol,
                    status=status,
                    message=message_for(symbol, status, handle.name if handle else None),
                    location=handle,
                )
            )
    findings.sort(key=lambda f: (f.path, f.line, sort_key(f.symbol)))
    return findings


def summarize(snapshot: AnalysisSnapshot) -> dict[str, dict[str, int]]:
    """Per-kind counts: {"class": {"dead": n, "zombie": m}, ...}."""
    return {
        "class": {DEAD: len(snapshot.dead_classes), ZOMBIE: len(snapshot.zombie_classes)},
        "trait": {DEAD: len(snapshot.dead_traits), ZOMBIE: len(snapshot.zombie_traits)},
        "function": {DEAD: len(snapshot.dead_functions), ZOMBIE: len(snapshot.zombie_functions)},
        "method": {DEAD: len(snapshot.dead_methods), ZOMBIE: len(snapshot.zombie_methods)},
    }


def findings_to_json(snapshot: Optional[AnalysisSnapshot], findings: list[Finding]) -> str:
    data: dict[str, Any] = {
        "timestamp": snapshot.timestamp if snapshot else None,
        "summary": summarize(snapshot) if snapshot else {},
        "findings": [f.to_dict() for f in findings],
    }
    return json.dumps(data, indent=2)
