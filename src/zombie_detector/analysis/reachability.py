"""Reachability analysis: reachable, dead and zombie partitions.

Breadth-first search from all entry points at once. Every indexed symbol
the search does not reach is dead when nothing references it and zombie
when only unreachable code does. Files are graph nodes, never classified.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from .callgraph import CallGraph
from .index import DefinitionIndex
from .symbols import ClassId, FunctionId, MethodId, SymbolId, TraitId


@dataclass
class ReachabilityResult:
    reachable: set[SymbolId] = field(default_factory=set)
    dead_classes: set[ClassId] = field(default_factory=set)
    dead_traits: set[TraitId] = field(default_factory=set)
    dead_functions: set[FunctionId] = field(default_factory=set)
    dead_methods: set[MethodId] = field(default_factory=set)
    zombie_classes: set[ClassId] = field(default_factory=set)
    zombie_traits: set[TraitId] = field(default_factory=set)
    zombie_functions: set[FunctionId] = field(default_factory=set)
    zombie_methods: set[MethodId] = field(default_factory=set)

    @property
    def dead(self) -> set[SymbolId]:
        return self.dead_classes | self.dead_traits | self.dead_functions | self.dead_methods

    @property
    def zombie(self) -> set[SymbolId]:
        return (
            self.zombie_classes | self.zombie_traits | self.zombie_functions | self.zombie_methods
        )


def reachable_from(graph: CallGraph, entry_points: Iterable[SymbolId]) -> set[SymbolId]:
    """All identities reachable from the entry points, entry points included."""
    visited: set[SymbolId] = set(entry_points)
    queue = deque(visited)
    while queue:
        current = queue.popleft()
        for target in graph.targets(current):
            if target not in visited:
                visited.add(target)
                queue.append(target)
    return visited


def analyze_reachability(
    index: DefinitionIndex,
    graph: CallGraph,
    entry_points: Iterable[SymbolId],
) -> ReachabilityResult:
    """Partition every indexed symbol. Pure: inputs are not modified."""
    result = ReachabilityResult(reachable=reachable_from(graph, entry_points))

    def classify(symbol: SymbolId, dead: set, zombie: set) -> None:
        if symbol in result.reachable:
            return
        if graph.inbound(symbol) == 0:
            dead.add(symbol)
        else:
            zombie.add(symbol)

    for fqn in index.classes:
        classify(ClassId(fqn), result.dead_classes, result.zombie_classes)
    for fqn in index.traits:
        classify(TraitId(fqn), result.dead_traits, result.zombie_traits)
    for fqn in index.functions:
        classify(FunctionId(fqn), result.dead_functions, result.zombie_functions)
    for method_id in index.methods:
        classify(method_id, result.dead_methods, result.zombie_methods)

    return result
