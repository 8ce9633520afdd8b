"""Debounced file watcher that re-requests analysis on PHP source changes."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from watchfiles import watch

from .service import AnalysisService

logger = logging.getLogger(__name__)

# Debounce: wait this long after last change before re-analyzing
DEBOUNCE_SECONDS = 1.5


class FileWatcher:
    """Watches a project and bumps a modification counter per change batch.

    Uses ``watchfiles`` (Rust-backed) for file monitoring. Each batch calls
    :meth:`AnalysisService.request_analysis` with the new counter, so the
    service's single-flight rules decide whether a run starts.
    """

    def __init__(
        self,
        service: AnalysisService,
        root: Optional[Path | str] = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ) -> None:
        self.service = service
        self.root = Path(root or service.project_root).resolve()
        self.debounce_seconds = debounce_seconds
        self.modification_count = 0

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._filter = PhpSourceFilter(
            self.root,
            extensions=service.config.extensions,
            vendor_dirs=service.config.vendor_dirs,
        )

    def start(self) -> None:
        """Start the watcher thread."""
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="zombie-detector-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the watcher to stop."""
        logger.debug("Stopping watcher thread...")
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            if self._thread.is_alive():
                logger.warning("Watcher thread did not exit cleanly within 5 seconds")

    def on_changes(self, changed: list[str]) -> bool:
        """Record one change batch and request a run for it."""
        self.modification_count += 1
        logger.info(f"Detected {len(changed)} changed file(s), re-analyzing...")
        return self.service.request_analysis(self.modification_count)

    def _watch_loop(self) -> None:
        logger.info(f"Watching {self.root} for changes")
        for changes in watch(
            self.root,
            stop_event=self._stop_event,
            debounce=int(self.debounce_seconds * 1000),
            rust_timeout=5000,
            watch_filter=self._filter,
        ):
            if self._stop_event.is_set():
                break
            self.on_changes([path for _change, path in changes])


class PhpSourceFilter:
    """watchfiles filter: PHP sources outside vendored and hidden directories."""

    def __init__(self, root: Path, extensions: list[str], vendor_dirs: list[str]) -> None:
        self.root = root
        self.extensions = {ext.lower() for ext in extensions}
        self.vendor_dirs = {name.lower() for name in vendor_dirs}

    def __call__(self, change: object, path: str) -> bool:
        p = Path(path)
        try:
            parts = p.relative_to(self.root).parts
        except ValueError:
            parts = p.parts
        for part in parts[:-1]:
            if part.startswith(".") or part.lower() in self.vendor_dirs:
                return False
        return p.suffix.lower() in self.extensions
