"""
Bounded fan-out of blocking work units over a thread pool.

Both modes are I/O bound (pymongo releases the GIL while waiting on the
server), so threads give real parallelism here. `run_bounded` is fail-fast:
the first unit that raises cancels every unit that has not started, lets the
running ones finish, and its exception is re-raised to the caller.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from attrbench.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class WorkUnit(Generic[T]):
    """A named callable scheduled by `run_bounded`."""

    unit_id: str
    run: Callable[[], T]


def run_bounded(units: Iterable[WorkUnit[T]], max_workers: int, label: str = "worker") -> List[T]:
    """
    Run `units` with at most `max_workers` in flight.

    Parameters
    ----------
    units : Iterable[WorkUnit]
        Work to execute; each unit runs exactly once unless cancelled.
    max_workers : int
        Upper bound on concurrently running units (must be >= 1).
    label : str
        Thread name prefix, visible in console logs.

    Returns
    -------
    List
        Unit results in submission order.

    Raises
    ------
    Exception
        The first exception raised by any unit.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")
    pending_units = list(units)
    if not pending_units:
        return []

    results: Dict[int, T] = {}
    first_error: Optional[BaseException] = None
    futures: Dict[Future, Tuple[int, WorkUnit[T]]] = {}

    workers = min(max_workers, len(pending_units))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=label) as executor:
        for position, unit in enumerate(pending_units):
            futures[executor.submit(unit.run)] = (position, unit)
        for future in as_completed(futures):
            position, unit = futures[future]
            if future.cancelled():
                continue
            try:
                results[position] = future.result()
            except Exception as exc:
                if first_error is not None:
                    log.debug("Unit failed after cancellation", extra={"unit": unit.unit_id})
                    continue
                first_error = exc
                cancelled = sum(1 for other in futures if other.cancel())
                log.warning(
                    "Unit failed, cancelling pending work",
                    extra={"unit": unit.unit_id, "cancelled": cancelled},
                )

    if first_error is not None:
        raise first_error
    return [results[position] for position in range(len(pending_units))]


__all__ = ["WorkUnit", "run_bounded"]
