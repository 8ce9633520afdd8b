"""Conservative call graph over symbol identities.

Source contexts are the top-level code of each file plus every named
function and method body, duplicates included. Each call-like or ``new``
site belongs to its innermost context; bodies of nested contexts are not
walked by the outer one. Closures and anonymous classes have no identity,
so their calls stay with the context that contains them.

Only references the resolver can prove become edges. Inheritance and trait
``use`` clauses are not references.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import ResolutionError
from ..frontend.model import (
    CallSiteKind,
    ClassLikeKind,
    PhpClassLike,
    PhpFile,
    PhpFunction,
    PhpMethod,
    node_key,
)
from ..frontend.resolver import PhpResolver
from ..frontend.walker import iter_call_sites
from .cancellation import CancellationToken, check_cancelled
from .index import DefinitionIndex
from .symbols import ClassId, FileId, FunctionId, MethodId, SymbolId, TraitId

logger = logging.getLogger(__name__)


@dataclass
class CallGraph:
    """Forward edges plus per-target insertion counts.

    ``edges`` maps a source to its targets in insertion order (dict keys
    used as an ordered set). ``inbound_counts`` counts insertion events,
    so a repeated edge still increments its target.
    """

    edges: dict[SymbolId, dict[SymbolId, None]] = field(default_factory=dict)
    inbound_counts: dict[SymbolId, int] = field(default_factory=dict)

    def add_edge(self, source: SymbolId, target: SymbolId) -> None:
        self.edges.setdefault(source, {})[target] = None
        self.inbound_counts[target] = self.inbound_counts.get(target, 0) + 1

    def targets(self, source: SymbolId) -> tuple[SymbolId, ...]:
        return tuple(self.edges.get(source, ()))

    def inbound(self, target: SymbolId) -> int:
        return self.inbound_counts.get(target, 0)

    def referrers(self, target: SymbolId) -> list[SymbolId]:
        """Sources with an edge to ``target``."""
        return [source for source, targets in self.edges.items() if target in targets]

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.edges.values())


def resolved_to_symbol_id(decl: Any) -> Optional[SymbolId]:
    """Identity of a resolved declaration; None when it has none.

    Methods are keyed by the class-like that declares them, never by a
    subclass the call went through.
    """
    if isinstance(decl, PhpMethod):
        owner = decl.owner
        if owner is None or not owner.fqn or not decl.name:
            return None
        return MethodId(owner.fqn, decl.name, decl.is_static)
    if isinstance(decl, PhpFunction):
        if decl.owner is not None or not decl.fqn:
            return None
        return FunctionId(decl.fqn)
    if isinstance(decl, PhpClassLike):
        if not decl.fqn:
            return None
        if decl.kind is ClassLikeKind.TRAIT:
            return TraitId(decl.fqn)
        return ClassId(decl.fqn)
    return None


def _contexts(php_file: PhpFile) -> Iterator[tuple[SymbolId, Any]]:
    """(identity, node) for the file body and each function or method body.

    A declaration the index did not keep (a duplicate FQN) still owns its
    body under its structural identity, which equals the indexed one.
    Bodies without an identity are skipped, never folded into the file.
    """
    yield FileId(php_file.canonical_path), php_file.root
    for decl in [*php_file.functions, *php_file.methods]:
        symbol = resolved_to_symbol_id(decl)
        if symbol is not None:
            yield symbol, decl.node


def build_call_graph(
    files: Iterable[PhpFile],
    index: DefinitionIndex,
    resolver: PhpResolver,
    cancel: Optional[CancellationToken] = None,
) -> CallGraph:
    """Walk every context and add an edge per resolved reference.

    ``new Foo()`` adds an edge to the class and, when Foo itself declares
    ``__construct``, a second edge to that constructor.

    Raises:
        AnalysisCancelled: If cancelled before a file is processed
    """
    graph = CallGraph()
    unresolved = 0
    shadowed = 0

    for php_file in files:
        check_cancelled(cancel, "building call graph")
        contexts = list(_contexts(php_file))
        stop = {node_key(decl.node) for decl in [*php_file.functions, *php_file.methods]}

        for source, node in contexts:
            if not isinstance(source, FileId) and not _is_indexed(index, source, node):
                shadowed += 1
            for site in iter_call_sites(php_file, node, stop):
                try:
                    target = resolver.resolve(site)
                except ResolutionError:
                    target = None
                target_id = resolved_to_symbol_id(target)
                if target_id is None:
                    unresolved += 1
                    continue
                graph.add_edge(source, target_id)

                if site.kind is CallSiteKind.NEW and isinstance(target, PhpClassLike):
                    constructor_id = resolved_to_symbol_id(resolver.constructor_of(target))
                    if constructor_id is not None:
                        graph.add_edge(source, constructor_id)

    logger.debug(
        f"Call graph: {graph.edge_count} edges, {unresolved} unresolved sites, "
        f"{shadowed} bodies of duplicate declarations"
    )
    return graph


def _is_indexed(index: DefinitionIndex, symbol: SymbolId, node: Any) -> bool:
    decl = index.declaration_of(symbol)
    return decl is not None and decl.node is node
