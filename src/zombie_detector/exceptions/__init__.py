"""Exception hierarchy for zombie-detector."""

from .analysis import (
    AnalysisCancelled,
    AnalysisError,
    FileAccessError,
    ParsingError,
    ResolutionError,
)
from .base import ZombieDetectorError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)

__all__ = [
    "ZombieDetectorError",
    "AnalysisError",
    "AnalysisCancelled",
    "FileAccessError",
    "ParsingError",
    "ResolutionError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]
