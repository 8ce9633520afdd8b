"""Extractor: converts a tree-sitter PHP parse tree to a PhpFile.

Collects namespace scopes first (so every declaration can compute its FQN),
then walks the whole tree for declarations:
    - class / trait / interface / enum declarations, anywhere in the file
    - methods declared directly in their bodies, with static/visibility flags
    - free functions, including ones declared inside conditionals or
      function bodies (PHP hoists them into the file's namespace)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from .model import (
    ClassLikeKind,
    PhpClassLike,
    PhpFile,
    PhpFunction,
    PhpMethod,
    Visibility,
    node_key,
)
from .names import NameScope

logger = logging.getLogger(__name__)

CLASS_LIKE_TYPES: dict[str, ClassLikeKind] = {
    "class_declaration": ClassLikeKind.CLASS,
    "trait_declaration": ClassLikeKind.TRAIT,
    "interface_declaration": ClassLikeKind.INTERFACE,
    "enum_declaration": ClassLikeKind.ENUM,
}

NAME_TYPES = ("name", "qualified_name", "relative_name")

_VISIBILITIES = {v.value: v for v in Visibility}


def extract_file(path: Path, rel_path: str, source: bytes, tree: Any) -> PhpFile:
    """Build a PhpFile from a parsed tree."""
    php_file = PhpFile(path=path, rel_path=rel_path, source=source, tree=tree)
    php_file.scopes = _collect_scopes(php_file)
    _collect_declarations(php_file)
    if tree.root_node.has_error:
        logger.debug(f"{rel_path}: syntax errors, declarations may be incomplete")
    return php_file


def _collect_scopes(php_file: PhpFile) -> list[tuple[int, int, NameScope]]:
    """Namespace regions of the file.

    Braced namespaces get their own region nested in the global one;
    unbraced namespaces run until the next namespace statement.
    """
    end_of_file = len(php_file.source) + 1
    scopes: list[tuple[int, int, NameScope]] = []
    current = NameScope()
    region_start = 0

    for child in php_file.root.named_children:
        if child.type == "namespace_definition":
            name_node = child.child_by_field_name("name")
            namespace = "".join(php_file.text(name_node).split()) if name_node else ""
            body = child.child_by_field_name("body")
            if body is not None:
                scope = NameScope(namespace=namespace.strip("\\"))
                for stmt in body.named_children:
                    if stmt.type == "namespace_use_declaration":
                        scope.add_use(php_file.text(stmt))
                scopes.append((child.start_byte, child.end_byte, scope))
            else:
                scopes.append((region_start, child.start_byte, current))
                current = NameScope(namespace=namespace.strip("\\"))
                region_start = child.start_byte
        elif child.type == "namespace_use_declaration":
            current.add_use(php_file.text(child))

    scopes.append((region_start, end_of_file, current))
    return scopes


def _collect_declarations(php_file: PhpFile) -> None:
    stack = [php_file.root]
    while stack:
        node = stack.pop()
        kind = CLASS_LIKE_TYPES.get(node.type)
        if kind is not None:
            cls = _class_like(php_file, node, kind)
            php_file.classes.append(cls)
            php_file.class_by_node[node_key(node)] = cls
        elif node.type == "function_definition":
            php_file.functions.append(_function(php_file, node))
        stack.extend(reversed(node.named_children))


def _declared_name(php_file: PhpFile, node: Any) -> tuple[str, int]:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return "", node.start_point[0] + 1
    return php_file.text(name_node).strip(), name_node.start_point[0] + 1


def _resolved_names(php_file: PhpFile, clause: Any, scope: NameScope) -> list[str]:
    names: list[str] = []
    for child in clause.named_children:
        if child.type in NAME_TYPES:
            fqn = scope.resolve_class_name(php_file.text(child))
            if fqn:
                names.append(fqn)
    return names


def _class_like(php_file: PhpFile, node: Any, kind: ClassLikeKind) -> PhpClassLike:
    name, line = _declared_name(php_file, node)
    scope = php_file.scope_at(node.start_byte)
    cls = PhpClassLike(
        name=name,
        fqn=scope.qualify(name) if name else None,
        kind=kind,
        node=node,
        path=php_file.canonical_path,
        line=line,
    )

    for child in node.named_children:
        if child.type == "base_clause":
            cls.parents.extend(_resolved_names(php_file, child, scope))
        elif child.type == "class_interface_clause":
            cls.interfaces.extend(_resolved_names(php_file, child, scope))

    body = node.child_by_field_name("body")
    if body is None:
        return cls
    for member in body.named_children:
        if member.type == "method_declaration":
            cls.methods.append(_method(php_file, member, cls))
        elif member.type == "use_declaration":
            cls.traits.extend(_resolved_names(php_file, member, scope))
    return cls


def _method(php_file: PhpFile, node: Any, owner: PhpClassLike) -> PhpMethod:
    name, line = _declared_name(php_file, node)
    is_static = False
    is_abstract = False
    visibility = Visibility.PUBLIC
    for child in node.children:
        if child.type == "function":
            break
        text = php_file.text(child).strip().lower()
        if child.type == "static_modifier" or text == "static":
            is_static = True
        elif child.type == "abstract_modifier" or text == "abstract":
            is_abstract = True
        elif text in _VISIBILITIES:
            visibility = _VISIBILITIES[text]

    return PhpMethod(
        name=name,
        fqn=f"{owner.fqn}::{name}" if owner.fqn and name else None,
        node=node,
        path=php_file.canonical_path,
        line=line,
        owner=owner,
        is_static=is_static,
        visibility=visibility,
        is_abstract=is_abstract,
    )


def _function(php_file: PhpFile, node: Any) -> PhpFunction:
    name, line = _declared_name(php_file, node)
    scope = php_file.scope_at(node.start_byte)
    return PhpFunction(
        name=name,
        fqn=scope.qualify(name) if name else None,
        node=node,
        path=php_file.canonical_path,
        line=line,
    )


def find_class_node(php_file: PhpFile, node: Any) -> Optional[PhpClassLike]:
    """Innermost named class-like whose body contains ``node``.

    Anonymous class bodies stop the search: ``$this`` inside them is not a
    declared class.
    """
    current = node.parent
    while current is not None:
        if current.type in CLASS_LIKE_TYPES:
            return php_file.class_by_node.get(node_key(current))
        if current.type in ("declaration_list", "enum_declaration_list") and (
            current.parent is None or current.parent.type not in CLASS_LIKE_TYPES
        ):
            return None
        current = current.parent
    return None
