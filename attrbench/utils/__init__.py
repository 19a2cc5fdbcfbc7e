"""
Utilities package for the attribute pattern benchmark.

Exports shared helpers for logging, profiling and bounded parallel work.
Keep this package lightweight and free of domain-specific logic.
"""

from attrbench.utils.logging import configure_logging, get_logger
from attrbench.utils.profiler import RunProfile, profile_block
from attrbench.utils.task_group import WorkUnit, run_bounded

__all__ = [
    "configure_logging",
    "get_logger",
    "RunProfile",
    "profile_block",
    "WorkUnit",
    "run_bounded",
]
