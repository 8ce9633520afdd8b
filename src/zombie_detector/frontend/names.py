"""PHP name resolution rules: namespaces and `use` imports.

PHP resolves class-like names and function names differently:
    - Fully qualified (``\\A\\B``): taken as is
    - ``namespace\\A``: relative to the current namespace
    - Qualified (``A\\B``): first segment through class imports, else current namespace
    - Unqualified class name: class import alias, else current namespace
    - Unqualified function name: function import alias, else current namespace,
      then the global namespace

Names of classes and functions are case-insensitive; aliases are stored
lowercased and resolved FQNs keep the case written in the import.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

_COMMENT_RE = re.compile(r"/\*.*?\*/|//[^\n]*|#[^\n]*", re.DOTALL)
_USE_PREFIX_RE = re.compile(r"^use\s+", re.IGNORECASE)
_KIND_PREFIX_RE = re.compile(r"^(function|const)\s+", re.IGNORECASE)
_AS_RE = re.compile(r"\s+as\s+", re.IGNORECASE)


def _join(*parts: str) -> str:
    inner = "\\".join(p.strip("\\") for p in parts if p and p.strip("\\"))
    return "\\" + inner


def parse_use_declaration(text: str) -> list[tuple[str, str, str]]:
    """Parse a namespace `use` statement into (kind, fqn, alias) triples.

    Handles aliases, ``use function``/``use const`` and group uses
    (``use A\\{B, C as D, function e}``). Kind is "class", "function" or "const".
    """
    body = _COMMENT_RE.sub(" ", text).strip().rstrip(";").strip()
    body = _USE_PREFIX_RE.sub("", body)

    kind = "class"
    m = _KIND_PREFIX_RE.match(body)
    if m:
        kind = m.group(1).lower()
        body = body[m.end() :]

    if "{" in body:
        prefix, _, rest = body.partition("{")
        prefix = prefix.strip().rstrip("\\").strip()
        items = rest.rsplit("}", 1)[0].split(",")
    else:
        prefix = ""
        items = body.split(",")

    result: list[tuple[str, str, str]] = []
    for item in items:
        item = item.strip()
        if not item:
            continue
        item_kind = kind
        m = _KIND_PREFIX_RE.match(item)
        if m:
            item_kind = m.group(1).lower()
            item = item[m.end() :].strip()
        parts = _AS_RE.split(item, maxsplit=1)
        path = "".join(parts[0].split())
        if not path.strip("\\"):
            continue
        alias = parts[1].strip() if len(parts) > 1 else path.rstrip("\\").split("\\")[-1]
        result.append((item_kind, _join(prefix, path), alias))
    return result


@dataclass
class NameScope:
    """Namespace and imports in effect for a region of a file."""

    namespace: str = ""
    class_imports: dict[str, str] = field(default_factory=dict)
    function_imports: dict[str, str] = field(default_factory=dict)

    def add_use(self, text: str) -> None:
        for kind, fqn, alias in parse_use_declaration(text):
            if kind == "class":
                self.class_imports[alias.lower()] = fqn
            elif kind == "function":
                self.function_imports[alias.lower()] = fqn

    def qualify(self, name: str) -> Optional[str]:
        """FQN of a name declared in this namespace, None for a blank name."""
        name = name.strip()
        if not name:
            return None
        return _join(self.namespace, name)

    def resolve_class_name(self, raw: str) -> Optional[str]:
        """FQN for a class-like reference; self/static/parent are not handled here."""
        name = "".join(raw.split())
        if not name.strip("\\"):
            return None
        if name.startswith("\\"):
            return _join(name)
        if name.lower().startswith("namespace\\"):
            return _join(self.namespace, name[len("namespace\\") :])
        first, sep, rest = name.partition("\\")
        imported = self.class_imports.get(first.lower())
        if imported is not None:
            return _join(imported, rest) if sep else imported
        return _join(self.namespace, name)

    def function_candidates(self, raw: str) -> list[str]:
        """FQNs to try, in order, for a function call name."""
        name = "".join(raw.split())
        if not name.strip("\\"):
            return []
        if name.startswith("\\"):
            return [_join(name)]
        if name.lower().startswith("namespace\\"):
            return [_join(self.namespace, name[len("namespace\\") :])]
        if "\\" in name:
            resolved = self.resolve_class_name(name)
            return [resolved] if resolved else []
        imported = self.function_imports.get(name.lower())
        if imported is not None:
            return [imported]
        if not self.namespace:
            return [_join(name)]
        return [_join(self.namespace, name), _join(name)]

