"""
Attribute Pattern Benchmark - compares the attribute pattern with wildcard indexes on MongoDB.

The package loads identical random datasets into four stores and runs the
same equality queries against each of them:

- Classic attribute pattern (`[{k, v}]` array, compound index on k/v)
- Enhanced attribute pattern (`[{name: value}]` array, single index)
- Classic subdocument (plain `attributes` subdocument, no index)
- Wildcard subdocument (`attributes.$**` wildcard index)

Every query is explained and executed; the execution statistics and matched
ids are stored per store for offline comparison.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from attrbench.config import Settings, get_settings
from attrbench.context import RunContext, build_context
from attrbench.modes.abstract import AbstractBenchmarkMode, BenchmarkMode, ModeResult
from attrbench.orchestrator import available_modes, run_mode
from attrbench.utils.logging import configure_logging, get_logger
from attrbench.utils.profiler import RunProfile, profile_block

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Run context
    "RunContext",
    "build_context",
    # Orchestration
    "available_modes",
    "run_mode",
    # Mode abstractions
    "AbstractBenchmarkMode",
    "BenchmarkMode",
    "ModeResult",
    # Logging
    "configure_logging",
    "get_logger",
    # Profiling
    "RunProfile",
    "profile_block",
]
