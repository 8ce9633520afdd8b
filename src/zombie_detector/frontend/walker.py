"""Call-site walker.

Yields every call-like and ``new`` expression under a syntax node, without
descending into nodes whose key is in a stop set. The call graph builder
passes the bodies of the other contexts as stop nodes, so each site is seen
exactly once, by its innermost context.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Optional

from .model import CallSite, CallSiteKind, PhpFile, node_key

METHOD_CALL_TYPES = frozenset(
    {"member_call_expression", "nullsafe_member_call_expression", "scoped_call_expression"}
)

STATIC_NAME_TYPES = ("name", "qualified_name", "relative_name")

NEW_DESIGNATOR_TYPES = ("name", "qualified_name", "relative_name", "relative_scope")

# Invocation by name; targets are runtime values and never resolved.
REFLECTION_FUNCTIONS = frozenset(
    {
        "call_user_func",
        "call_user_func_array",
        "forward_static_call",
        "forward_static_call_array",
    }
)


def iter_call_sites(
    php_file: PhpFile,
    root: Any,
    stop: frozenset[tuple[int, int, str]] | set[tuple[int, int, str]] = frozenset(),
) -> Iterator[CallSite]:
    """Walk ``root`` depth-first in source order."""
    root_key = node_key(root)
    stack = [root]
    while stack:
        node = stack.pop()
        key = node_key(node)
        if key != root_key and key in stop:
            continue
        kind = call_site_kind(php_file, node)
        if kind is not None:
            yield CallSite(kind=kind, node=node, file=php_file)
        stack.extend(reversed(node.named_children))


def call_site_kind(php_file: PhpFile, node: Any) -> Optional[CallSiteKind]:
    """Kind of a statically named call or ``new`` site, None otherwise."""
    if node.type == "function_call_expression":
        function = node.child_by_field_name("function")
        if function is None or function.type not in STATIC_NAME_TYPES:
            return None
        short = php_file.text(function).strip().rsplit("\\", 1)[-1].lower()
        if short in REFLECTION_FUNCTIONS:
            return None
        return CallSiteKind.CALL

    if node.type in METHOD_CALL_TYPES:
        name = node.child_by_field_name("name")
        if name is None or name.type != "name":
            return None
        return CallSiteKind.CALL

    if node.type == "object_creation_expression":
        if new_designator(node) is None:
            return None
        return CallSiteKind.NEW

    return None


def new_designator(node: Any) -> Optional[Any]:
    """Class name node of ``new Foo(...)``; None for ``new $cls`` or ``new class {}``."""
    for child in node.named_children:
        if child.type in NEW_DESIGNATOR_TYPES:
            return child
        return None
    return None
