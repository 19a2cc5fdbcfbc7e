"""
Modes package for the attribute pattern benchmark.

Re-exports the abstract interfaces and the concrete modes so downstream code
can import from `attrbench.modes` directly.
"""

from attrbench.modes.abstract import AbstractBenchmarkMode, BenchmarkMode, ModeResult
from attrbench.modes.data_loader import BatchLoader
from attrbench.modes.equality_benchmark import QueryBenchmarkRunner, QuerySet

__all__ = [
    # Abstracts
    "AbstractBenchmarkMode",
    "BenchmarkMode",
    "ModeResult",
    # Concrete modes
    "BatchLoader",
    "QueryBenchmarkRunner",
    "QuerySet",
]
