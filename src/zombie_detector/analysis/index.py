"""Definition index: declarations to symbol identities.

Rebuilt wholesale on every run. For each file the index records:
    - the file identity (top-level code)
    - named classes / interfaces / enums, and traits in their own map
    - every method declared directly on a class-like (inherited methods are
      not re-indexed under the subclass)
    - free functions

Declarations whose name cannot be computed are left out. A later duplicate
declaration replaces an earlier one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Optional

from ..exceptions import ResolutionError
from ..frontend.model import Declaration, PhpClassLike, PhpFile, PhpFunction, PhpMethod
from ..frontend.resolver import PhpResolver
from .cancellation import CancellationToken, check_cancelled
from .symbols import ClassId, FileId, FunctionId, MethodId, SymbolId, TraitId

logger = logging.getLogger(__name__)


@dataclass
class DefinitionIndex:
    """Declarations of one run keyed by identity.

    Attributes:
        classes: fqn -> class, interface or enum declaration
        traits: fqn -> trait declaration
        functions: fqn -> free function declaration
        methods: MethodId -> method declaration
        file_nodes: canonical path -> FileId
    """

    classes: dict[str, PhpClassLike] = field(default_factory=dict)
    traits: dict[str, PhpClassLike] = field(default_factory=dict)
    functions: dict[str, PhpFunction] = field(default_factory=dict)
    methods: dict[MethodId, PhpMethod] = field(default_factory=dict)
    file_nodes: dict[str, FileId] = field(default_factory=dict)

    def declarations(self) -> Iterator[tuple[SymbolId, Declaration]]:
        """All indexed (identity, declaration) pairs; files excluded."""
        for fqn, cls in self.classes.items():
            yield ClassId(fqn), cls
        for fqn, trait in self.traits.items():
            yield TraitId(fqn), trait
        for fqn, function in self.functions.items():
            yield FunctionId(fqn), function
        yield from self.methods.items()

    def declaration_of(self, symbol: SymbolId) -> Optional[Declaration]:
        if isinstance(symbol, ClassId):
            return self.classes.get(symbol.fqn)
        if isinstance(symbol, TraitId):
            return self.traits.get(symbol.fqn)
        if isinstance(symbol, FunctionId):
            return self.functions.get(symbol.fqn)
        if isinstance(symbol, MethodId):
            return self.methods.get(symbol)
        return None

    @property
    def symbol_count(self) -> int:
        return len(self.classes) + len(self.traits) + len(self.functions) + len(self.methods)


def build_definition_index(
    files: Iterable[PhpFile],
    resolver: PhpResolver,
    cancel: Optional[CancellationToken] = None,
) -> DefinitionIndex:
    """Index every declaration of the given (already non-vendored) files.

    Raises:
        AnalysisCancelled: If cancelled before a file is processed
    """
    index = DefinitionIndex()

    for php_file in files:
        check_cancelled(cancel, "indexing")
        index.file_nodes[php_file.canonical_path] = FileId(php_file.canonical_path)

        for cls in php_file.classes:
            try:
                fqn = resolver.fqn(cls)
            except ResolutionError:
                continue
            try:
                is_trait = resolver.is_trait(cls)
            except ResolutionError:
                is_trait = False
            (index.traits if is_trait else index.classes)[fqn] = cls

            for method in cls.methods:
                method_id = _method_id(method, resolver)
                if method_id is not None:
                    index.methods[method_id] = method

        for function in php_file.functions:
            if function.owner is not None:
                continue
            try:
                index.functions[resolver.fqn(function)] = function
            except ResolutionError:
                continue

    logger.debug(
        f"Indexed {len(index.classes)} classes, {len(index.traits)} traits, "
        f"{len(index.functions)} functions, {len(index.methods)} methods "
        f"in {len(index.file_nodes)} files"
    )
    return index


def _method_id(method: PhpMethod, resolver: PhpResolver) -> Optional[MethodId]:
    if not method.name:
        return None
    try:
        owner = resolver.owner_fqn(method)
    except ResolutionError:
        return None
    return MethodId(owner, method.name, method.is_static)
