"""
KBQA - CLI Entry Point
-----------------------
Exposes Typer commands over the in-memory knowledge-base service.

The index lives only for the lifetime of one process, so search and ask
run an ingest first.

Usage:
    python -m kbqa.main ingest                     # Build the index, print counts
    python -m kbqa.main search "setup inventory"   # Ranked chunks
    python -m kbqa.main ask "setup inventory"      # Attributed answer
    python -m kbqa.main ask "..." --generate       # Use the external generator if configured
    python -m kbqa.main status                     # Show corpus configuration
"""
from __future__ import annotations

import sys

# Windows cp1252 terminal fix: Arabic answer text must not crash Rich
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from typing import Optional

import typer
from dotenv import load_dotenv
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from kbqa.config import load_settings
from kbqa.errors import InvalidInput
from kbqa.serving.pipeline import KnowledgeBaseService
from kbqa.utils.helpers import dumps_json
from kbqa.utils.logger import setup_logger

app = typer.Typer(
    name="kbqa",
    help="Knowledge-base Q&A - lexical retrieval over a local document corpus",
    add_completion=False,
)
console = Console()


# --- Helpers ------------------------------------------------------------------

def _build_service(config: Optional[str], enable_generation: bool = False) -> KnowledgeBaseService:
    load_dotenv()
    settings = load_settings(config)
    setup_logger(settings.logging.level, settings.logging.file)
    return KnowledgeBaseService.from_settings(settings, enable_generation=enable_generation)


def _ingest(service: KnowledgeBaseService) -> None:
    with console.status("[cyan]Indexing corpus...[/cyan]"):
        report = service.ingest()
    console.print(
        f"[green][OK] {report.indexed} chunks[/green] from {report.documents} document(s)"
        + (f"  [yellow]{len(report.failed)} unreadable[/yellow]" if report.failed else "")
    )


def _results_table(rows: list[dict]) -> Table:
    table = Table(
        "No.", "Source", "Chunk", "Score", "Preview",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold dim",
    )
    for i, row in enumerate(rows, start=1):
        preview = row["text"][:70] + ("..." if len(row["text"]) > 70 else "")
        table.add_row(
            str(i),
            row["id"].split("::")[0],
            str(row["chunk_index"]),
            f"{row['score']:.3f}",
            preview,
        )
    return table


# --- Commands -----------------------------------------------------------------

ConfigOption = typer.Option(None, "--config", "-c", help="Path to config YAML")


@app.command()
def ingest(config: Optional[str] = ConfigOption) -> None:
    """Build the index from the static corpus and uploads, then report counts."""
    service = _build_service(config)
    with console.status("[cyan]Indexing corpus...[/cyan]"):
        report = service.ingest()

    table = Table("Metric", "Value", box=box.SIMPLE, show_header=False)
    table.add_row("Chunks indexed", f"[green]{report.indexed}[/green]")
    table.add_row("Documents read", str(report.documents))
    table.add_row("Unreadable", f"[red]{len(report.failed)}[/red]" if report.failed else "0")
    table.add_row("Elapsed", f"{report.elapsed_ms:.0f}ms")
    console.print(table)
    for path in report.failed:
        console.print(f"  [yellow]skipped[/yellow] {path}")


@app.command()
def search(
    question: str = typer.Argument(..., help="Question to search for"),
    top_k: Optional[int] = typer.Option(None, "--top-k", help="Maximum results"),
    json_out: bool = typer.Option(False, "--json", help="Print results as JSON"),
    config: Optional[str] = ConfigOption,
) -> None:
    """Rank indexed chunks against a question."""
    service = _build_service(config)
    _ingest(service)
    try:
        ranked = service.search(question, top_k)
    except InvalidInput as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    rows = [r.to_result() for r in ranked]
    if json_out:
        console.print_json(dumps_json({"results": rows}))
    elif rows:
        console.print(_results_table(rows))
    else:
        console.print("[yellow]No results (index is empty)[/yellow]")


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to answer"),
    industry: Optional[str] = typer.Option(None, "--industry", help="Advisory context"),
    scenario: Optional[str] = typer.Option(None, "--scenario", help="Advisory context"),
    top_k: Optional[int] = typer.Option(None, "--top-k", help="Candidates to consider"),
    generate: bool = typer.Option(
        False, "--generate", help="Use the external generator when an API key is set"
    ),
    json_out: bool = typer.Option(False, "--json", help="Print result as JSON"),
    config: Optional[str] = ConfigOption,
) -> None:
    """Answer a question with source attributions and a confidence score."""
    service = _build_service(config, enable_generation=generate)
    _ingest(service)
    try:
        result = service.ask(
            question,
            industry=industry,
            scenario=scenario,
            top_k=top_k,
            use_external_generation=generate,
        )
    except InvalidInput as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    payload = result.to_dict()
    if json_out:
        console.print_json(dumps_json(payload))
        return

    console.print()
    console.print(
        Panel(
            Markdown(result.text),
            title="[bold green]Answer[/bold green]",
            border_style="green",
            expand=True,
        )
    )
    if payload["sources"]:
        console.print(_results_table(payload["sources"]))
    origin = f"generated by {result.model}" if result.generated else "built-in"
    console.print(f"[dim]confidence={result.confidence:.3f}  |  {origin}[/dim]\n")


@app.command()
def status(config: Optional[str] = ConfigOption) -> None:
    """Show which corpus files and uploads the next ingest would read."""
    settings = load_settings(config)
    service = KnowledgeBaseService.from_settings(settings, enable_generation=False)

    console.print()
    console.print("[bold]Corpus[/bold]")
    for path in service.ingest_pipeline.corpus_paths():
        mark = "[green]found[/green]" if path.exists() else "[red]missing[/red]"
        console.print(f"  {mark}  {path}")
    console.print()
    console.print(f"  Upload dir : {settings.corpus.upload_dir}")
    console.print(f"  Max words  : {settings.chunking.max_words}")
    console.print(f"  Top-k      : {settings.retrieval.top_k}")
    console.print(f"  Threshold  : {settings.answer.relevance_threshold}")
    console.print(f"  Indexed    : {service.status()['indexed']} (in-memory, this process)")


# --- Entry Point --------------------------------------------------------------

if __name__ == "__main__":
    app()
