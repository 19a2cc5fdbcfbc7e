from __future__ import annotations

from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from attrbench.domain.models import STORE_LABELS

# Counter columns in display order; a mode reports a subset of them.
_COUNTER_COLUMNS = (
    ("documents", "Documents"),
    ("queries", "Queries"),
    ("matched", "Matched"),
)


def print_summary(summary: Dict[str, Any], console: Optional[Console] = None) -> None:
    """
    Render a mode summary as a rich table, one row per store.

    Columns are limited to the counters the mode reported. Duration, peak
    memory and CPU are shown in the caption.
    """
    console = console or Console()
    stores: Dict[str, Dict[str, int]] = summary.get("stores") or {}

    if not stores:
        console.print("[yellow]No results to display.[/yellow]")
        return

    counters = [
        (key, header)
        for key, header in _COUNTER_COLUMNS
        if any(key in counts for counts in stores.values())
    ]

    title = f"Attribute Pattern Benchmark: {summary.get('mode', 'unknown')}"
    if summary.get("run_prefix"):
        title = f"{title}\n[dim]Run prefix: {summary['run_prefix']}[/dim]"

    duration = summary.get("duration_seconds") or 0.0
    mem_mb = (summary.get("peak_rss_bytes") or 0) / (1024 * 1024)
    cpu = summary.get("cpu_percent") or 0.0
    caption = f"Duration {duration:.1f}s │ Peak Memory {mem_mb:.2f} MB │ CPU {cpu:.1f}%"

    table = Table(title=title, box=box.ROUNDED, caption=caption)
    table.add_column("Store", style="cyan", no_wrap=True)
    for _, header in counters:
        table.add_column(header, justify="right", style="magenta")

    for store_name, counts in stores.items():
        row = [STORE_LABELS.get(store_name, store_name)]
        row.extend(f"{counts.get(key, 0):,}" for key, _ in counters)
        table.add_row(*row)

    console.print(table)


__all__ = ["print_summary"]
