"""Cooperative cancellation for analysis runs."""

from __future__ import annotations

import threading

from ..exceptions import AnalysisCancelled


class CancellationToken:
    """Thread-safe cancellation flag.

    The run polls :meth:`check` at phase boundaries and before each file;
    any thread may call :meth:`cancel`.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def check(self, phase: str = "") -> None:
        """Raise AnalysisCancelled if cancellation was requested."""
        if self._event.is_set():
            raise AnalysisCancelled(phase)


def check_cancelled(cancel: CancellationToken | None, phase: str = "") -> None:
    if cancel is not None:
        cancel.check(phase)
