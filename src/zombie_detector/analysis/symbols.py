"""Symbol identities: the key space of the call graph.

Every indexable declaration is addressed by one of five frozen value
objects. Equality and hashing are structural, so identities built from
different parses of the same source compare equal and can key dicts and
sets directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class SymbolKind(Enum):
    """Variant tag of a symbol identity."""

    FILE = "file"
    CLASS = "class"
    TRAIT = "trait"
    FUNCTION = "function"
    METHOD = "method"


@dataclass(frozen=True)
class FileId:
    """Top-level code of one file, keyed by canonical absolute path."""

    path: str

    @property
    def kind(self) -> SymbolKind:
        return SymbolKind.FILE

    @property
    def label(self) -> str:
        return self.path


@dataclass(frozen=True)
class ClassId:
    """A class, interface or enum."""

    fqn: str

    @property
    def kind(self) -> SymbolKind:
        return SymbolKind.CLASS

    @property
    def label(self) -> str:
        return self.fqn


@dataclass(frozen=True)
class TraitId:
    fqn: str

    @property
    def kind(self) -> SymbolKind:
        return SymbolKind.TRAIT

    @property
    def label(self) -> str:
        return self.fqn


@dataclass(frozen=True)
class FunctionId:
    """A free function (never a method)."""

    fqn: str

    @property
    def kind(self) -> SymbolKind:
        return SymbolKind.FUNCTION

    @property
    def label(self) -> str:
        return self.fqn


@dataclass(frozen=True)
class MethodId:
    """A method keyed by its declaring owner.

    Static and instance methods of the same name are distinct identities.
    """

    owner_fqn: str
    name: str
    is_static: bool

    @property
    def kind(self) -> SymbolKind:
        return SymbolKind.METHOD

    @property
    def label(self) -> str:
        sep = "::" if self.is_static else "->"
        return f"{self.owner_fqn}{sep}{self.name}()"


SymbolId = Union[FileId, ClassId, TraitId, FunctionId, MethodId]


def sort_key(symbol: SymbolId) -> tuple[str, str]:
    """Deterministic ordering across variants."""
    return (symbol.kind.value, symbol.label.lower())
