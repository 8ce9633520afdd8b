"""Declaration models for parsed PHP files.

PhpFile provides the declarations found in one source file:
    - Class-likes: classes, traits, interfaces, enums (with their methods)
    - Free functions (including conditionally declared ones)
    - Namespace scopes, for resolving names at any byte offset

Syntax nodes are tree-sitter nodes. They are only valid while the owning
PhpFile (and its tree) is alive; nothing outside one analysis run keeps them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .names import NameScope

Node = Any


def node_key(node: Node) -> tuple[int, int, str]:
    """Position-based key for a syntax node.

    QueryCursor and parent walks may hand back distinct Python objects for
    the same node, so identity is by position and type.
    """
    return (node.start_byte, node.end_byte, node.type)


class ClassLikeKind(Enum):
    CLASS = "class"
    TRAIT = "trait"
    INTERFACE = "interface"
    ENUM = "enum"


class Visibility(Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


@dataclass(eq=False)
class PhpFunction:
    """A function declaration.

    Attributes:
        name: Declared name
        fqn: Fully-qualified name with leading backslash, None if not computable
        node: The declaration node
        path: Canonical path of the declaring file
        line: 1-indexed line of the declared name
        owner: Enclosing class-like when declared directly in its body
    """

    name: str
    fqn: Optional[str]
    node: Node = field(repr=False)
    path: str
    line: int
    owner: Optional[PhpClassLike] = field(default=None, repr=False)


@dataclass(eq=False)
class PhpMethod(PhpFunction):
    """A method declared directly in a class, trait, interface or enum body."""

    is_static: bool = False
    visibility: Visibility = Visibility.PUBLIC
    is_abstract: bool = False


@dataclass(eq=False)
class PhpClassLike:
    """A class, trait, interface or enum declaration.

    Attributes:
        name: Declared name
        fqn: Fully-qualified name with leading backslash, None if not computable
        kind: Declaration keyword; None when the node type is unrecognised
        parents: Resolved FQNs from the extends clause
        interfaces: Resolved FQNs from the implements clause
        traits: Resolved FQNs of used traits
        methods: Methods declared directly in the body
    """

    name: str
    fqn: Optional[str]
    kind: Optional[ClassLikeKind]
    node: Node = field(repr=False)
    path: str
    line: int
    parents: list[str] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)
    traits: list[str] = field(default_factory=list)
    methods: list[PhpMethod] = field(default_factory=list, repr=False)


Declaration = PhpFunction | PhpClassLike


@dataclass(eq=False)
class PhpFile:
    """All declarations of one parsed PHP file.

    Attributes:
        path: Absolute, resolved file path
        rel_path: Project-relative path with "/" separators
        source: Raw file content
        tree: tree-sitter Tree
        classes: Named class-like declarations
        functions: Free functions
        scopes: (start_byte, end_byte, NameScope) per namespace region
        class_by_node: node_key -> class-like, for enclosing-class lookups
    """

    path: Path
    rel_path: str
    source: bytes = field(repr=False)
    tree: Any = field(repr=False)
    classes: list[PhpClassLike] = field(default_factory=list)
    functions: list[PhpFunction] = field(default_factory=list)
    scopes: list[tuple[int, int, NameScope]] = field(default_factory=list, repr=False)
    class_by_node: dict[tuple[int, int, str], PhpClassLike] = field(
        default_factory=dict, repr=False
    )

    @property
    def canonical_path(self) -> str:
        return self.path.as_posix()

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def methods(self) -> list[PhpMethod]:
        return [m for cls in self.classes for m in cls.methods]

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def scope_at(self, offset: int) -> NameScope:
        """Namespace scope in effect at a byte offset (innermost wins)."""
        best: Optional[tuple[int, int, NameScope]] = None
        for start, end, scope in self.scopes:
            if start <= offset < end and (best is None or start >= best[0]):
                best = (start, end, scope)
        if best is None:
            return NameScope()
        return best[2]


class CallSiteKind(Enum):
    CALL = "call"
    NEW = "new"


@dataclass(eq=False)
class CallSite:
    """A call-like or construct-new-instance expression."""

    kind: CallSiteKind
    node: Node = field(repr=False)
    file: PhpFile = field(repr=False)

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1
