"""
Abstract mode interfaces and result contracts for the attribute pattern benchmark.

Concrete modes (the data loader and the equality benchmark) implement the
BenchmarkMode protocol and return a ModeResult TypedDict so the orchestrator
and the reporter can treat them uniformly.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, Optional, Protocol, TypedDict, runtime_checkable


class ModeResult(TypedDict, total=False):
    """
    Summary returned by a mode run.

    `stores` maps a store name (e.g. "classic_attr") to its counters:
    `documents` for the loader, `queries` and `matched` for the benchmark.
    The orchestrator adds the profiler fields.
    """

    mode: str
    stores: Dict[str, Dict[str, int]]
    run_prefix: Optional[str]
    duration_seconds: float
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]
    extra: Dict[str, Any]


@runtime_checkable
class BenchmarkMode(Protocol):
    """
    Common interface all benchmark modes implement.

    Attributes
    ----------
    name : str
        Machine-friendly identifier, also the CLI argument selecting the mode.
    description : str
        A human-friendly summary of the mode.
    """

    name: str
    description: str

    def execute(self) -> ModeResult:
        """
        Run the mode against the configured stores.

        Returns
        -------
        ModeResult
            Per-store counters for the run.

        Raises
        ------
        AttrBenchError
            Any preflight or store failure; modes never swallow errors.
        """
        ...


class AbstractBenchmarkMode(abc.ABC):
    """
    ABC helper for class-based modes.

    Subclasses set `name` and `description` and implement `execute`.
    """

    name: str
    description: str

    @abc.abstractmethod
    def execute(self) -> ModeResult:  # pragma: no cover - interface only
        """Run the mode and return its summary."""
        raise NotImplementedError


__all__ = [
    "AbstractBenchmarkMode",
    "BenchmarkMode",
    "ModeResult",
]
