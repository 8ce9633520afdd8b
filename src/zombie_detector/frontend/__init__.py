"""PHP front-end: file collection, tree-sitter parsing, declarations and resolution."""

from .model import CallSite, CallSiteKind, ClassLikeKind, PhpClassLike, PhpFile, PhpFunction, PhpMethod
from .parser import PhpParser
from .resolver import PhpResolver
from .source import collect_php_files, parse_php_file
from .walker import iter_call_sites

__all__ = [
    "CallSite",
    "CallSiteKind",
    "ClassLikeKind",
    "PhpClassLike",
    "PhpFile",
    "PhpFunction",
    "PhpMethod",
    "PhpParser",
    "PhpResolver",
    "collect_php_files",
    "iter_call_sites",
    "parse_php_file",
]
