"""analyzer_host: pluggable host for independent static analyzers."""

__all__ = [
    "__version__",
    "analyze",
    "AnalysisRun",
    "AnalyzerRegistry",
    "run_all",
    "run_all_safely",
]
__version__ = "0.1.0"

from analyzer_host.api import AnalysisRun, analyze  # noqa: E402
from analyzer_host.core.registry import AnalyzerRegistry  # noqa: E402
from analyzer_host.core.runner import run_all, run_all_safely  # noqa: E402
