"""Dead and zombie code analysis: index, call graph, entry points, reachability."""

from .callgraph import CallGraph, build_call_graph, resolved_to_symbol_id
from .cancellation import CancellationToken
from .entry_points import EntryPointPolicy, select_entry_points
from .index import DefinitionIndex, build_definition_index
from .pipeline import run_analysis
from .reachability import ReachabilityResult, analyze_reachability
from .snapshot import AnalysisSnapshot, SymbolHandle, SymbolLocation
from .symbols import ClassId, FileId, FunctionId, MethodId, SymbolId, SymbolKind, TraitId

__all__ = [
    "AnalysisSnapshot",
    "CallGraph",
    "CancellationToken",
    "ClassId",
    "DefinitionIndex",
    "EntryPointPolicy",
    "FileId",
    "FunctionId",
    "MethodId",
    "ReachabilityResult",
    "SymbolHandle",
    "SymbolId",
    "SymbolKind",
    "SymbolLocation",
    "TraitId",
    "analyze_reachability",
    "build_call_graph",
    "build_definition_index",
    "resolved_to_symbol_id",
    "run_analysis",
    "select_entry_points",
]
