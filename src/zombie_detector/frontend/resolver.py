"""Project-wide resolver: call and ``new`` sites to declarations.

The resolver only claims a target it can prove from the source:
    - Function calls go through namespace and ``use function`` rules
    - Method calls need a receiver whose class is known: ``$this``,
      ``self``/``static``/``parent``, a class name, ``(new Foo)``, or a local
      variable with a single provable type
    - Names declared more than once in the project do not resolve

Anything else (variable function names, ``$obj->$name()``, values flowing
through properties or return types) is left unresolved.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Any, Optional

from ..exceptions import ResolutionError
from .extractor import CLASS_LIKE_TYPES, find_class_node
from .model import (
    CallSite,
    CallSiteKind,
    ClassLikeKind,
    Declaration,
    PhpClassLike,
    PhpFile,
    PhpFunction,
    PhpMethod,
    node_key,
)
from .walker import NEW_DESIGNATOR_TYPES, new_designator

logger = logging.getLogger(__name__)

FUNCTION_LIKE_TYPES = frozenset(
    {
        "function_definition",
        "method_declaration",
        "anonymous_function",
        "anonymous_function_creation_expression",
        "arrow_function",
    }
)

PARAMETER_TYPES = ("simple_parameter", "property_promotion_parameter")

_UNKNOWN = object()


class PhpResolver:
    """Symbol table over a set of parsed files."""

    def __init__(self, files: Iterable[PhpFile]) -> None:
        self._classes: dict[str, list[PhpClassLike]] = defaultdict(list)
        self._functions: dict[str, list[PhpFunction]] = defaultdict(list)
        self._local_types: dict[tuple[str, tuple[int, int, str]], dict[str, PhpClassLike]] = {}

        for php_file in files:
            for cls in php_file.classes:
                if cls.fqn:
                    self._classes[cls.fqn.lower()].append(cls)
            for function in php_file.functions:
                if function.fqn:
                    self._functions[function.fqn.lower()].append(function)

        ambiguous = [fqn for fqn, decls in self._classes.items() if len(decls) > 1]
        if ambiguous:
            logger.debug(f"{len(ambiguous)} class names declared more than once")

    # -- declaration facts ---------------------------------------------------

    def fqn(self, decl: Declaration) -> str:
        if not decl.fqn:
            raise ResolutionError("name cannot be computed", name=decl.name or None)
        return decl.fqn

    def is_trait(self, decl: PhpClassLike) -> bool:
        if decl.kind is None:
            raise ResolutionError("unrecognised class-like declaration", name=decl.name or None)
        return decl.kind is ClassLikeKind.TRAIT

    def owner_fqn(self, method: PhpMethod) -> str:
        if method.owner is None or not method.owner.fqn:
            raise ResolutionError("method has no named owner", name=method.name or None)
        return method.owner.fqn

    # -- lookups -------------------------------------------------------------

    def find_class(self, fqn: str) -> Optional[PhpClassLike]:
        candidates = self._classes.get(fqn.lower(), [])
        return candidates[0] if len(candidates) == 1 else None

    def constructor_of(self, cls: PhpClassLike) -> Optional[PhpMethod]:
        """The constructor declared by ``cls`` itself; inherited ones are not returned."""
        for method in cls.methods:
            if method.name.lower() == "__construct":
                return method
        return None

    def find_method(self, cls: PhpClassLike, name: str) -> Optional[PhpMethod]:
        """Look up a method: own methods, used traits, parents, then interfaces."""
        return self._find_method(cls, name.lower(), set())

    def _find_method(self, cls: PhpClassLike, name: str, seen: set[int]) -> Optional[PhpMethod]:
        if id(cls) in seen:
            return None
        seen.add(id(cls))
        for method in cls.methods:
            if method.name.lower() == name:
                return method
        for group in (cls.traits, cls.parents, cls.interfaces):
            for fqn in group:
                target = self.find_class(fqn)
                if target is None:
                    continue
                found = self._find_method(target, name, seen)
                if found is not None:
                    return found
        return None

    # -- sites ---------------------------------------------------------------

    def resolve(self, site: CallSite) -> Optional[Declaration]:
        """Declaration targeted by a site, or None when it cannot be proven."""
        node = site.node
        php_file = site.file

        if site.kind is CallSiteKind.NEW:
            return self._class_ref(php_file, node, new_designator(node))

        if node.type == "function_call_expression":
            return self._function_ref(php_file, node.child_by_field_name("function"))

        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        if node.type == "scoped_call_expression":
            cls = self._class_ref(php_file, node, node.child_by_field_name("scope"))
        else:
            cls = self._receiver(php_file, node, node.child_by_field_name("object"))
        if cls is None:
            return None
        return self.find_method(cls, php_file.text(name_node).strip())

    def _function_ref(self, php_file: PhpFile, name_node: Any) -> Optional[PhpFunction]:
        if name_node is None:
            return None
        scope = php_file.scope_at(name_node.start_byte)
        for candidate in scope.function_candidates(php_file.text(name_node)):
            declared = self._functions.get(candidate.lower(), [])
            if len(declared) > 1:
                return None
            if declared:
                return declared[0]
        return None

    def _class_ref(self, php_file: PhpFile, site: Any, ref: Any) -> Optional[PhpClassLike]:
        if ref is None:
            return None
        if ref.type == "variable_name":
            return self._receiver(php_file, site, ref)
        if ref.type not in NEW_DESIGNATOR_TYPES:
            return None

        text = php_file.text(ref).strip()
        lowered = text.lower()
        if lowered in ("self", "static"):
            return find_class_node(php_file, site)
        if lowered == "parent":
            return self._parent_of(find_class_node(php_file, site))

        fqn = php_file.scope_at(ref.start_byte).resolve_class_name(text)
        return self.find_class(fqn) if fqn else None

    def _parent_of(self, cls: Optional[PhpClassLike]) -> Optional[PhpClassLike]:
        if cls is None or not cls.parents:
            return None
        return self.find_class(cls.parents[0])

    def _receiver(self, php_file: PhpFile, site: Any, obj: Any) -> Optional[PhpClassLike]:
        if obj is None:
            return None
        if obj.type == "parenthesized_expression" and obj.named_children:
            obj = obj.named_children[0]
        if obj.type == "object_creation_expression":
            return self._class_ref(php_file, obj, new_designator(obj))
        if obj.type != "variable_name":
            return None

        variable = php_file.text(obj).strip()
        if variable == "$this":
            return find_class_node(php_file, site)
        return self._local_types_at(php_file, site).get(variable)

    # -- local variable typing ---------------------------------------------

    def _local_types_at(self, php_file: PhpFile, site: Any) -> dict[str, PhpClassLike]:
        scope_node = _enclosing_function(site) or php_file.root
        key = (php_file.canonical_path, node_key(scope_node))
        types = self._local_types.get(key)
        if types is None:
            types = self._infer_local_types(php_file, scope_node)
            self._local_types[key] = types
        return types

    def _infer_local_types(self, php_file: PhpFile, scope_node: Any) -> dict[str, PhpClassLike]:
        """Variables whose every binding in the scope yields the same class."""
        bindings: dict[str, list[Any]] = defaultdict(list)

        parameters = scope_node.child_by_field_name("parameters")
        if parameters is not None:
            for param in parameters.named_children:
                if param.type not in PARAMETER_TYPES:
                    continue
                name = param.child_by_field_name("name")
                if name is None:
                    continue
                declared = self._declared_type(php_file, param, param.child_by_field_name("type"))
                bindings[php_file.text(name).strip()].append(declared or _UNKNOWN)

        body = scope_node.child_by_field_name("body") if scope_node is not php_file.root else None
        stack = list((body or scope_node).named_children)
        while stack:
            node = stack.pop()
            if node.type in FUNCTION_LIKE_TYPES or node.type in CLASS_LIKE_TYPES:
                continue
            if node.type in ("anonymous_class", "object_creation_expression") and _declares_class_body(node):
                continue
            if node.type in ("assignment_expression", "reference_assignment_expression"):
                left = node.child_by_field_name("left")
                right = node.child_by_field_name("right")
                if left is not None and left.type == "variable_name":
                    assigned = None
                    if right is not None and right.type == "object_creation_expression":
                        assigned = self._class_ref(php_file, right, new_designator(right))
                    bindings[php_file.text(left).strip()].append(assigned or _UNKNOWN)
            elif node.type == "foreach_statement":
                for variable in _foreach_targets(node):
                    bindings[php_file.text(variable).strip()].append(_UNKNOWN)
            stack.extend(node.named_children)

        types: dict[str, PhpClassLike] = {}
        for variable, bound in bindings.items():
            first = bound[0]
            if first is not _UNKNOWN and all(b is first for b in bound):
                types[variable] = first
        return types

    def _declared_type(self, php_file: PhpFile, site: Any, type_node: Any) -> Optional[PhpClassLike]:
        if type_node is None:
            return None
        text = "".join(php_file.text(type_node).split()).lstrip("?")
        if not text or any(c in text for c in "|&()"):
            return None
        lowered = text.lower()
        if lowered in ("self", "static"):
            return find_class_node(php_file, site)
        if lowered == "parent":
            return self._parent_of(find_class_node(php_file, site))
        fqn = php_file.scope_at(type_node.start_byte).resolve_class_name(text)
        return self.find_class(fqn) if fqn else None


def _enclosing_function(node: Any) -> Optional[Any]:
    current = node.parent
    while current is not None:
        if current.type in FUNCTION_LIKE_TYPES:
            return current
        current = current.parent
    return None


def _declares_class_body(node: Any) -> bool:
    return any(c.type == "declaration_list" for c in node.named_children)


def _foreach_targets(node: Any) -> list[Any]:
    """Variables bound by a foreach loop's key/value clause."""
    body = node.child_by_field_name("body")
    body_key = node_key(body) if body is not None else None
    targets: list[Any] = []
    for clause in node.named_children[1:]:
        if node_key(clause) == body_key:
            continue
        stack = [clause]
        while stack:
            current = stack.pop()
            if current.type == "variable_name":
                targets.append(current)
            stack.extend(current.named_children)
    return targets
