"""Analysis pipeline: source files to an immutable snapshot.

Phases, with a cancellation check before each and before every file:
    1. Collecting PHP files
    2. Parsing
    3. Indexing
    4. Building call graph
    5. Computing entry points
    6. Analyzing reachability
    7. Building snapshot

Returns None when the project has no analyzable files. A cancelled run
raises AnalysisCancelled and produces nothing.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from types import MappingProxyType
from typing import Optional

from ..config import DEFAULT_CONFIG, DetectorConfig
from ..exceptions import FileAccessError, ParsingError
from ..frontend.model import PhpFile
from ..frontend.parser import PhpParser
from ..frontend.resolver import PhpResolver
from ..frontend.source import collect_php_files, parse_php_file
from ..logging_config import get_logger
from .callgraph import CallGraph, build_call_graph
from .cancellation import CancellationToken, check_cancelled
from .entry_points import EntryPointPolicy, select_entry_points
from .index import DefinitionIndex, build_definition_index
from .reachability import ReachabilityResult, analyze_reachability
from .snapshot import AnalysisSnapshot, SymbolHandle, now_ms
from .symbols import SymbolId

logger = get_logger(__name__)

ProgressCallback = Optional[Callable[[str], None]]

# Progress messages in phase order, with the completed fraction at each
PHASES: dict[str, float] = {
    "Collecting PHP files": 0.05,
    "Parsing": 0.10,
    "Indexing": 0.45,
    "Building call graph": 0.55,
    "Computing entry points": 0.85,
    "Analyzing reachability": 0.90,
    "Building snapshot": 0.95,
}


def phase_percent(message: str) -> Optional[float]:
    """Map a progress message to a completed fraction using prefix matching."""
    for prefix, pct in PHASES.items():
        if message.startswith(prefix):
            return pct
    return None


def parse_files(
    paths: Iterable[Path],
    project_root: Path,
    cancel: Optional[CancellationToken] = None,
) -> list[PhpFile]:
    """Parse every path, skipping files that cannot be read or parsed."""
    parser = PhpParser()
    parsed: list[PhpFile] = []
    for path in paths:
        check_cancelled(cancel, "parsing")
        try:
            parsed.append(parse_php_file(path, project_root, parser))
        except FileAccessError as e:
            logger.warning(f"Skipping {path}: {e.reason}")
        except ParsingError as e:
            logger.debug(f"Skipping {path}: {e.reason}")
    return parsed


def build_snapshot(
    index: DefinitionIndex,
    graph: CallGraph,
    entry_points: set[SymbolId],
    result: ReachabilityResult,
) -> AnalysisSnapshot:
    """Freeze one run's results, with a handle for every indexed symbol and file."""
    pointers: dict[SymbolId, SymbolHandle] = {}
    for symbol, decl in index.declarations():
        pointers[symbol] = SymbolHandle.for_declaration(decl, symbol.kind)
    for file_id in index.file_nodes.values():
        pointers[file_id] = SymbolHandle.for_file(file_id)

    return AnalysisSnapshot(
        timestamp=now_ms(),
        dead_classes=frozenset(result.dead_classes),
        dead_traits=frozenset(result.dead_traits),
        dead_functions=frozenset(result.dead_functions),
        dead_methods=frozenset(result.dead_methods),
        zombie_classes=frozenset(result.zombie_classes),
        zombie_traits=frozenset(result.zombie_traits),
        zombie_functions=frozenset(result.zombie_functions),
        zombie_methods=frozenset(result.zombie_methods),
        pointers=MappingProxyType(pointers),
        entry_points=frozenset(entry_points),
        inbound_counts=MappingProxyType(dict(graph.inbound_counts)),
    )


def run_analysis(
    project_root: Path | str,
    config: Optional[DetectorConfig] = None,
    files: Optional[Iterable[Path]] = None,
    cancel: Optional[CancellationToken] = None,
    on_progress: ProgressCallback = None,
    policy: Optional[EntryPointPolicy] = None,
) -> Optional[AnalysisSnapshot]:
    """Run every phase and return the snapshot, or None for an empty project.

    Args:
        project_root: Project base directory
        config: Detector configuration (defaults if None)
        files: Source files to analyze instead of collecting them
        cancel: Token polled between phases and files
        on_progress: Called with a status message at each phase transition
        policy: Entry point policy replacing the configured one

    Raises:
        AnalysisCancelled: If the token is cancelled during the run
        InvalidPathError: If project_root is not a directory
    """
    config = config or DEFAULT_CONFIG
    root = Path(project_root).resolve()

    def _progress(msg: str) -> None:
        if on_progress is not None:
            on_progress(msg)

    check_cancelled(cancel, "collecting files")
    _progress("Collecting PHP files...")
    paths = list(files) if files is not None else collect_php_files(root, config)
    logger.info(f"Collected {len(paths)} PHP files")

    check_cancelled(cancel, "parsing")
    _progress(f"Parsing {len(paths)} files...")
    parsed = parse_files(paths, root, cancel)
    if not parsed:
        logger.info("No analyzable PHP files")
        return None

    resolver = PhpResolver(parsed)

    check_cancelled(cancel, "indexing")
    _progress("Indexing declarations...")
    index = build_definition_index(parsed, resolver, cancel)

    check_cancelled(cancel, "building call graph")
    _progress("Building call graph...")
    graph = build_call_graph(parsed, index, resolver, cancel)

    check_cancelled(cancel, "computing entry points")
    _progress("Computing entry points...")
    entry_points = select_entry_points(index.file_nodes, root, config, policy)
    logger.info(f"{len(entry_points)} entry point files")

    check_cancelled(cancel, "analyzing reachability")
    _progress("Analyzing reachability...")
    result = analyze_reachability(index, graph, entry_points)

    check_cancelled(cancel, "building snapshot")
    _progress("Building snapshot...")
    snapshot = build_snapshot(index, graph, entry_points, result)
    logger.info(
        f"Analysis complete: {len(snapshot.dead)} dead, {len(snapshot.zombie)} zombie "
        f"of {index.symbol_count} symbols"
    )
    return snapshot
