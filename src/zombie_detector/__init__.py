"""
zombie-detector - Dead & Zombie Code Analysis for PHP

Builds a conservative call graph over a PHP project, walks it from the
project's entry points and reports every class, trait, function and method
that is never reached:

    dead    - nothing references it
    zombie  - only other unreachable code references it
"""

__version__ = "0.1.0"

from .analysis import AnalysisSnapshot, CancellationToken, run_analysis
from .config import DetectorConfig, load_config
from .service import AnalysisService, AnalysisStatus

__all__ = [
    "run_analysis",  # Main entry point
    "AnalysisService",  # Long-lived, single-flight scheduling
    "AnalysisSnapshot",
    "AnalysisStatus",
    "CancellationToken",
    "DetectorConfig",
    "load_config",
]
