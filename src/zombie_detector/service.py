"""Single-flight analysis service.

Owns the latest snapshot for one project. Requests carry a source version
(see :func:`compute_source_version`):
    - an unchanged version is dropped
    - while a run is in flight, a new version is coalesced into one follow-up run
    - otherwise a run starts, on a worker thread or inline

A run publishes by swapping one reference, then notifies listeners outside
the lock. Cancelled or failed runs publish nothing and notify nobody.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .analysis.cancellation import CancellationToken
from .analysis.pipeline import run_analysis
from .analysis.snapshot import AnalysisSnapshot, SymbolLocation
from .analysis.symbols import SymbolId
from .config import DEFAULT_CONFIG, DetectorConfig
from .exceptions import AnalysisCancelled, ZombieDetectorError
from .frontend.source import collect_php_files

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[Optional[AnalysisSnapshot]], None]


class AnalysisStatus(Enum):
    NOT_COMPUTED = "not_computed"
    EMPTY = "empty"
    READY = "ready"


def compute_source_version(paths: Iterable[Path]) -> str:
    """Modification stamp over path, size and mtime of every file."""
    digest = hashlib.sha256()
    for path in sorted(Path(p) for p in paths):
        try:
            stat = path.stat()
        except OSError:
            continue
        digest.update(f"{path.as_posix()}\0{stat.st_size}\0{stat.st_mtime_ns}\n".encode())
    return digest.hexdigest()


class AnalysisService:
    """Holds the current snapshot and schedules runs for one project.

    Thread-safe: requests may come from any thread; :meth:`get_snapshot`
    never blocks on a run.
    """

    def __init__(
        self,
        project_root: Path | str,
        config: Optional[DetectorConfig] = None,
        background: bool = True,
        runner: Callable[..., Optional[AnalysisSnapshot]] = run_analysis,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self.config = config or DEFAULT_CONFIG
        self.background = background
        self._runner = runner

        self._lock = threading.RLock()
        # (snapshot, status), replaced as one reference
        self._published: tuple[Optional[AnalysisSnapshot], AnalysisStatus] = (
            None,
            AnalysisStatus.NOT_COMPUTED,
        )
        self._last_seen_version: Any = None
        self._pending_version: Any = None
        self._in_flight = False
        self._cancel: Optional[CancellationToken] = None
        self._disposed = False
        self._listeners: list[SnapshotListener] = []
        self._idle = threading.Event()
        self._idle.set()

    # -- read path -----------------------------------------------------------

    def get_snapshot(self) -> Optional[AnalysisSnapshot]:
        return self._published[0]

    @property
    def current_snapshot(self) -> Optional[AnalysisSnapshot]:
        return self._published[0]

    @property
    def status(self) -> AnalysisStatus:
        return self._published[1]

    def published(self) -> tuple[Optional[AnalysisSnapshot], AnalysisStatus]:
        """The latest snapshot and its status, read together."""
        return self._published

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    @property
    def last_seen_version(self) -> Any:
        with self._lock:
            return self._last_seen_version

    @property
    def disposed(self) -> bool:
        return self._disposed

    def resolve(self, symbol: SymbolId) -> Optional[SymbolLocation]:
        """Current location of a symbol of the latest snapshot, if it still exists."""
        snapshot = self._published[0]
        if snapshot is None:
            return None
        handle = snapshot.handle(symbol)
        if handle is None:
            return None
        return handle.locate()

    # -- listeners -----------------------------------------------------------

    def add_listener(self, listener: SnapshotListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    # -- scheduling ----------------------------------------------------------

    def request_analysis(self, version: Any) -> bool:
        """Ask for a run at ``version``.

        Returns:
            True if a run was started or a follow-up scheduled, False if dropped
        """
        with self._lock:
            if self._disposed:
                return False
            if self._in_flight:
                if version == self._last_seen_version:
                    self._pending_version = None
                    return False
                self._pending_version = version
                logger.debug("Run in flight, follow-up scheduled")
                return True
            if version == self._last_seen_version:
                return False
            token = self._start(version)

        if self.background:
            thread = threading.Thread(
                target=self._run_loop,
                args=(token,),
                name="zombie-detector-analysis",
                daemon=True,
            )
            thread.start()
        else:
            self._run_loop(token)
        return True

    def refresh(self) -> bool:
        """Request a run at the project's current source version."""
        try:
            paths = collect_php_files(self.project_root, self.config)
        except (OSError, ZombieDetectorError) as e:
            logger.warning(f"Cannot scan {self.project_root}: {e}")
            return False
        return self.request_analysis(compute_source_version(paths))

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until no run is in flight. Returns False on timeout."""
        return self._idle.wait(timeout)

    def cancel(self) -> None:
        """Cancel the in-flight run and drop any scheduled follow-up."""
        with self._lock:
            self._pending_version = None
            if self._cancel is not None:
                self._cancel.cancel()

    def dispose(self) -> None:
        """Cancel and turn every later run into a no-op."""
        with self._lock:
            self._disposed = True
            self._listeners.clear()
        self.cancel()

    def _start(self, version: Any) -> CancellationToken:
        self._last_seen_version = version
        self._in_flight = True
        self._idle.clear()
        self._cancel = CancellationToken()
        return self._cancel

    def _run_loop(self, token: CancellationToken) -> None:
        while True:
            self._run_once(token)
            with self._lock:
                pending = self._pending_version
                self._pending_version = None
                if pending is None or self._disposed:
                    self._in_flight = False
                    self._cancel = None
                    self._idle.set()
                    return
                token = self._start(pending)

    def _run_once(self, token: CancellationToken) -> None:
        if self._disposed:
            return
        try:
            snapshot = self._runner(self.project_root, self.config, cancel=token)
        except AnalysisCancelled:
            logger.info("Analysis cancelled")
            self._forget_version()
            return
        except Exception:
            logger.exception("Analysis failed")
            self._forget_version()
            return
        self._publish(snapshot)

    def _forget_version(self) -> None:
        # An unfinished run leaves the version unseen so it can be requested again.
        with self._lock:
            self._last_seen_version = None

    def _publish(self, snapshot: Optional[AnalysisSnapshot]) -> None:
        with self._lock:
            if self._disposed:
                return
            status = AnalysisStatus.READY if snapshot is not None else AnalysisStatus.EMPTY
            self._published = (snapshot, status)
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed")
