from __future__ import annotations

import json
import logging
from typing import Any, Dict

import pytest
from rich.console import Console

from attrbench import orchestrator
from attrbench.orchestrator import _merge_result, normalize_mode, run_mode
from attrbench.reporter import print_summary
from attrbench.utils.profiler import RunProfile

EXPECTED_DURATION = 2.0
EXPECTED_PEAK_RSS = 123
EXPECTED_CPU = 12.3


class _FailingProbeMode:
    name = "failing_probe"
    description = "test mode that always fails"

    def __init__(self, context: Any) -> None:
        self.context = context

    def execute(self) -> Dict[str, Any]:
        raise RuntimeError("intentional failure")


def test_merge_result_takes_profiler_measurements():
    result = {"mode": "dataloader", "stores": {"classic_attr": {"documents": 10}}}
    stats = RunProfile(
        label="dataloader",
        start_ts=1.0,
        end_ts=3.0,
        duration_seconds=2.0,
        peak_rss_bytes=123,
        cpu_percent=12.34,
    )

    merged = _merge_result(result, stats)

    assert merged["duration_seconds"] == EXPECTED_DURATION
    assert merged["peak_rss_bytes"] == EXPECTED_PEAK_RSS
    assert merged["cpu_percent"] == EXPECTED_CPU
    assert merged["profile"] == {
        "label": "dataloader",
        "start_ts": 1.0,
        "end_ts": 3.0,
        "duration_seconds": 2.0,
        "peak_rss_bytes": 123,
        "cpu_percent": 12.3,
    }
    assert merged["stores"] == {"classic_attr": {"documents": 10}}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("DataLoader", "dataloader"),
        ("EQUALITYBENCHMARK", "equalitybenchmark"),
        (" dataloader ", "dataloader"),
        ("", None),
        (None, None),
        ("bogus", None),
    ],
)
def test_normalize_mode(raw, expected):
    assert normalize_mode(raw) == expected


def test_run_mode_persists_summary(fake_context, tmp_path):
    summary = run_mode("DataLoader", fake_context, results_dir=tmp_path)

    assert summary["mode"] == "dataloader"
    latest = json.loads((tmp_path / "latest.json").read_text(encoding="utf-8"))
    assert latest["mode"] == "dataloader"
    assert latest["stores"]["wildcard_subdoc"] == {"documents": 15}
    assert "profile" in latest
    assert len(list(tmp_path.glob("run-*.json"))) == 1


def test_run_mode_without_persist_writes_nothing(fake_context, tmp_path):
    run_mode("equalitybenchmark", fake_context, results_dir=tmp_path, persist=False)
    assert list(tmp_path.iterdir()) == []


def test_unknown_mode_is_rejected(fake_context):
    with pytest.raises(ValueError, match="Unknown mode"):
        run_mode("bogus", fake_context, persist=False)


def test_failing_mode_is_logged_and_reraised(fake_context, monkeypatch, caplog):
    caplog.set_level(logging.INFO)
    monkeypatch.setattr(
        orchestrator,
        "_mode_factories",
        lambda: {"failing_probe": _FailingProbeMode},
    )

    with pytest.raises(RuntimeError, match="intentional failure"):
        run_mode("failing_probe", fake_context, persist=False)

    assert "[MODE FAILED] failing_probe" in caplog.text


def test_print_summary_renders_store_rows():
    console = Console(record=True, width=120)
    print_summary(
        {
            "mode": "equalitybenchmark",
            "run_prefix": "1700000000",
            "stores": {
                "classic_attr": {"queries": 4, "matched": 1200},
                "wildcard_subdoc": {"queries": 4, "matched": 1200},
            },
            "duration_seconds": 1.5,
            "peak_rss_bytes": 1024 * 1024,
            "cpu_percent": 3.0,
        },
        console=console,
    )

    output = console.export_text()
    assert "Classic Attribute" in output
    assert "Wildcard Index" in output
    assert "1,200" in output
    assert "Documents" not in output


def test_print_summary_handles_empty_summary():
    console = Console(record=True, width=80)
    print_summary({}, console=console)
    assert "No results to display." in console.export_text()
