from __future__ import annotations

import sys
from typing import Optional

import typer

from attrbench.config import get_settings
from attrbench.context import build_context
from attrbench.domain.errors import AttrBenchError
from attrbench.orchestrator import available_modes, normalize_mode, run_mode
from attrbench.reporter import print_summary
from attrbench.utils.logging import configure_logging

app = typer.Typer(help="Attribute pattern vs. wildcard index benchmark CLI.", add_completion=False)


def usage() -> str:
    return f"Usage: attrbench [{'|'.join(available_modes())}]"


@app.command()
def run(
    mode: str = typer.Argument(
        "",
        help="Mode to run: dataloader or equalitybenchmark (case-insensitive).",
        show_default=False,
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit structured JSON logs.",
    ),
    no_persist: bool = typer.Option(
        False,
        "--no-persist",
        help="Skip writing the JSON run summary.",
    ),
    results_dir: Optional[str] = typer.Option(
        None,
        "--results-dir",
        help="Directory for run summaries (default from settings).",
    ),
) -> None:
    """
    Load the four stores or run the equality benchmark against them.
    """
    mode_name = normalize_mode(mode)
    if mode_name is None:
        typer.echo(usage())
        return

    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=json_logs or settings.log_json)

    context = build_context(settings)
    try:
        summary = run_mode(
            mode_name,
            context,
            results_dir=results_dir or settings.results_dir,
            persist=not no_persist,
        )
    except AttrBenchError as exc:
        typer.echo(f"{mode_name} failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        context.close()

    print_summary(summary)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
