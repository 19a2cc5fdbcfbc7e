"""
Orchestrator for running a benchmark mode, profiling it and persisting the run summary.

Usage (example from CLI):
    from attrbench.context import build_context
    from attrbench.orchestrator import run_mode

    context = build_context(get_settings())
    try:
        summary = run_mode("dataloader", context)
    finally:
        context.close()

Run summaries are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from attrbench.context import RunContext
from attrbench.modes.abstract import BenchmarkMode, ModeResult
from attrbench.modes.data_loader import BatchLoader
from attrbench.modes.equality_benchmark import QueryBenchmarkRunner
from attrbench.utils.logging import get_logger
from attrbench.utils.profiler import RunProfile, profile_block

log = get_logger(__name__)


def _round_float(value: float, decimals: int = 2) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _mode_factories() -> Dict[str, Callable[[RunContext], BenchmarkMode]]:
    """Registry of available modes."""
    return {
        BatchLoader.name: lambda context: BatchLoader(context),
        QueryBenchmarkRunner.name: lambda context: QueryBenchmarkRunner(context),
    }


def available_modes() -> List[str]:
    """List available mode names."""
    return sorted(_mode_factories().keys())


def normalize_mode(name: Optional[str]) -> Optional[str]:
    """Case-insensitive lookup; None for empty or unknown names."""
    key = (name or "").strip().lower()
    return key if key in _mode_factories() else None


def _resolve_mode(name: str, context: RunContext) -> BenchmarkMode:
    key = normalize_mode(name)
    if key is None:
        raise ValueError(f"Unknown mode '{name}'. Available: {', '.join(available_modes())}")
    return _mode_factories()[key](context)


def _persist_results(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    with latest_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    with archive_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def _merge_result(result: ModeResult, stats: RunProfile) -> dict:
    """Merge a mode summary with profiler stats, rounding floats for readability."""
    merged = dict(result)
    merged.setdefault("stores", {})
    merged["duration_seconds"] = _round_float(merged.get("duration_seconds") or stats.duration_seconds)
    if merged.get("peak_rss_bytes") is None:
        merged["peak_rss_bytes"] = stats.peak_rss_bytes
    cpu = merged.get("cpu_percent")
    if cpu is None:
        cpu = stats.cpu_percent
    merged["cpu_percent"] = _round_float(cpu, 1) if cpu is not None else None
    profile = stats.as_dict()
    profile["start_ts"] = _round_float(stats.start_ts, 3)
    profile["end_ts"] = _round_float(stats.end_ts, 3)
    profile["duration_seconds"] = _round_float(stats.duration_seconds)
    if stats.cpu_percent is not None:
        profile["cpu_percent"] = _round_float(stats.cpu_percent, 1)
    merged["profile"] = profile
    return merged


def _profiled_execute(mode: BenchmarkMode) -> dict:
    log.info(f"[MODE START] {mode.name}", extra={"mode": mode.name})
    with profile_block(mode.name) as stats:
        try:
            result = mode.execute()
        except Exception:
            log.exception(f"[MODE FAILED] {mode.name}", extra={"mode": mode.name})
            raise
    log.info(
        f"[MODE SUCCESS] {mode.name}",
        extra={"mode": mode.name, "duration_seconds": _round_float(stats.duration_seconds)},
    )
    return _merge_result(result, stats)


def run_mode(
    name: str,
    context: RunContext,
    results_dir: Path | str = "results",
    persist: bool = True,
) -> dict:
    """
    Run one mode and optionally persist its summary.

    Parameters
    ----------
    name : str
        Mode name (case-insensitive), see `available_modes()`.
    context : RunContext
        Stores, client and generator for the run; not closed here.
    results_dir : Path | str
        Directory to store JSON artifacts.
    persist : bool
        Whether to write the summary to disk.

    Returns
    -------
    dict
        The mode summary merged with profiler stats.

    Raises
    ------
    ValueError
        If the mode name is unknown.
    AttrBenchError
        Whatever the mode raised; the failure is logged first.
    """
    mode = _resolve_mode(name, context)
    summary = _profiled_execute(mode)
    summary["mode"] = mode.name
    summary["timestamp"] = datetime.now(timezone.utc).isoformat()

    if persist:
        _persist_results(summary, Path(results_dir))

    log.info(f"[ORCHESTRATOR COMPLETE] {mode.name}", extra={"mode": mode.name})
    return summary


__all__ = [
    "available_modes",
    "normalize_mode",
    "run_mode",
]
