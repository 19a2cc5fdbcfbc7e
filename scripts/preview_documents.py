"""
Offline document preview for the attribute pattern benchmark.

Generates documents from the configured (or a file-provided) schema template
and prints them as MongoDB Extended JSON lines, one document per line, without
connecting to any store. Handy for checking a template before a full load.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from bson import json_util

from attrbench.config import get_settings
from attrbench.domain.errors import PreflightError
from attrbench.domain.models import SchemaTemplate
from attrbench.generation.generator import DocumentGenerator
from attrbench.generation.random_source import RandomSource

SHAPES = ("subdoc", "array", "both")

app = typer.Typer(help="Preview generated benchmark documents as Extended JSON lines.")


def _render(generator: DocumentGenerator, template: SchemaTemplate, count: int, shape: str) -> Iterator[str]:
    batch = generator.generate_batch(template, count)
    for subdocument, array_doc in zip(batch.subdocument_docs, batch.array_docs):
        if shape in ("subdoc", "both"):
            yield json_util.dumps(subdocument)
        if shape in ("array", "both"):
            yield json_util.dumps(array_doc)


@app.command()
def main(
    count: int = typer.Option(
        5,
        "--count",
        "-n",
        min=0,
        help="Number of documents to generate.",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="RNG seed (default from settings, unseeded if unset).",
    ),
    shape: str = typer.Option(
        "both",
        "--shape",
        help="Which shape to emit: subdoc, array or both.",
    ),
    template_file: Optional[Path] = typer.Option(
        None,
        "--template-file",
        "-t",
        exists=True,
        dir_okay=False,
        help="Extended JSON template file (default: DOCUMENT_TEMPLATE setting).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write lines to this file instead of stdout.",
    ),
) -> None:
    """
    Generate documents in subdocument and/or attribute-array shape.
    """
    shape = shape.lower()
    if shape not in SHAPES:
        raise typer.BadParameter(f"shape must be one of {', '.join(SHAPES)}", param_hint="--shape")

    settings = get_settings()
    text = template_file.read_text(encoding="utf-8") if template_file else settings.document_template
    effective_seed = seed if seed is not None else settings.random_seed

    start = time.perf_counter()
    try:
        template = SchemaTemplate.from_json(text)
        generator = DocumentGenerator.from_settings(settings, RandomSource(effective_seed))
        generator.check_template(template, add_id=True)
        lines: List[str] = list(_render(generator, template, count, shape))
    except PreflightError as exc:
        typer.echo(f"Invalid template: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        duration = time.perf_counter() - start
        typer.echo(f"Wrote {len(lines):,} documents -> {output} in {duration:.2f}s", err=True)
    else:
        for line in lines:
            typer.echo(line)


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
