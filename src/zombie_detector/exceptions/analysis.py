"""Analysis-related exceptions: file access, parsing, resolution, cancellation."""

from pathlib import Path
from typing import Optional

from .base import ZombieDetectorError


class AnalysisError(ZombieDetectorError):
    """Base class for analysis-related errors."""
    pass


class FileAccessError(AnalysisError):
    """Raised when a source file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParsingError(AnalysisError):
    """Raised when a PHP file cannot be turned into a syntax tree."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Failed to parse PHP file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ResolutionError(AnalysisError):
    """Raised when a name, owner or declaration kind cannot be determined.

    Never escapes a run: callers treat it as "unresolved" and drop the
    reference or identity it concerned.
    """

    def __init__(self, reason: str, name: Optional[str] = None):
        details = {"reason": reason}
        if name:
            details["name"] = name
        super().__init__(f"Cannot resolve: {reason}", details=details)
        self.reason = reason
        self.name = name


class AnalysisCancelled(AnalysisError):
    """Raised at a cancellation checkpoint once the run has been cancelled."""

    def __init__(self, phase: str = ""):
        details = {"phase": phase} if phase else None
        super().__init__("Analysis cancelled", details=details)
        self.phase = phase
