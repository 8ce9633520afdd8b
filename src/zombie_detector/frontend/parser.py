"""Tree-sitter parser wrapper for PHP.

Uses the ``php`` grammar from tree-sitter-php, which accepts files mixing
inline HTML and ``<?php`` blocks.

Usage:
    parser = PhpParser()
    tree = parser.parse(code_bytes)
"""

from __future__ import annotations

from typing import Any

import tree_sitter
import tree_sitter_php

from ..exceptions import ParsingError


class PhpParser:
    """Wrapper around tree-sitter for PHP parsing.

    A tree-sitter Parser is not thread-safe; each analysis run creates its own.
    """

    def __init__(self) -> None:
        # tree-sitter >= 0.23 returns PyCapsule; wrap in Language()
        self._language = tree_sitter.Language(tree_sitter_php.language_php())
        self._parser = tree_sitter.Parser(self._language)

    def parse(self, code: bytes, path: Any = "<memory>") -> Any:
        """Parse code and return the syntax tree.

        Partial trees (with ERROR nodes) are returned as is; tree-sitter
        recovers and the extractor skips what it cannot name.

        Raises:
            ParsingError: If tree-sitter produces no tree
        """
        tree = self._parser.parse(code)
        if tree is None or tree.root_node is None:
            raise ParsingError(path, "tree-sitter returned no tree")
        return tree
