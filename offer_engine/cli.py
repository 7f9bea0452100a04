"""CLI interface for the offer engine."""

import asyncio
import json
import logging
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from config.settings import settings
from offer_engine.context import AppContext
from offer_engine.errors import AnalysisError, OfferValidationError, SelectionLimitExceeded
from offer_engine.models import AnalysisResult, OfferInput, SavedOffer
from offer_engine.memory.offer_store import OfferStore
from offer_engine.ranking.comparison import ComparisonEngine, ComparisonTable
from offer_engine.validation import validate_offer

app = typer.Typer(
    name="offer-engine",
    help="Job offer analysis: net pay, cost of living, risk and a verdict"
)
console = Console()

TONE_STYLE = {
    "positive": "green",
    "caution": "yellow",
    "negative": "red",
    "highlight": "bold cyan",
}


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(name)s - %(message)s",
        handlers=[RichHandler(console=console, show_path=False)]
    )


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging output")):
    """Analyze job offers, archive the results and compare them."""
    configure_logging(verbose)


def open_store() -> OfferStore:
    """The archive alone; listing and comparing never need the analysis engine."""
    return OfferStore(settings.offer_store_path)


def load_offer(offer_path: str) -> OfferInput:
    """Load an offer description from a JSON file."""
    try:
        with open(offer_path, encoding="utf-8") as f:
            data = json.load(f)
        return OfferInput.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Could not load offer: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def analyze(
    offer_file: str = typer.Argument(..., help="Path to an offer JSON file (camelCase fields)"),
    save: bool = typer.Option(False, "--save", "-s", help="Archive the analysis"),
    report: bool = typer.Option(False, "--report", "-r", help="Print the full markdown report"),
):
    """Analyze one job offer."""

    offer = load_offer(offer_file)
    context = AppContext.create()

    console.print(Panel(
        f"[bold]{offer.job_title}[/bold]"
        f"{' at ' + offer.company_name if offer.company_name else ''}\n"
        f"[dim]{offer.city}, {offer.country} | {offer.currency} {offer.gross_annual_salary:,} gross[/dim]",
        title="Offer Engine",
        border_style="blue"
    ))

    async def run_analysis() -> AnalysisResult:
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Calculating net income, living costs and risk...", total=None)
                result = await context.client.analyze(offer)
                progress.update(task, completed=True)
            return result
        finally:
            await context.close()

    try:
        result = asyncio.run(run_analysis())
    except OfferValidationError as e:
        for field, message in e.errors.items():
            console.print(f"[red]{field}: {message}[/red]")
        raise typer.Exit(code=1)
    except AnalysisError as e:
        console.print(f"[red]{e.kind.value}: {e.message}[/red]")
        raise typer.Exit(code=2)

    display_result(offer, result)
    if report:
        console.print(Markdown(result.raw_markdown))

    if save:
        offer = validate_offer(offer)
        existing = context.store.find_duplicate(offer)
        if existing:
            console.print(f"[yellow]Already saved as {existing.id}[/yellow]")
        else:
            saved = context.store.save(offer, result)
            console.print(f"[green]Saved to archive as {saved.id}[/green]")


def display_result(offer: OfferInput, result: AnalysisResult):
    """Display the headline numbers of an analysis."""
    fb = result.financial_breakdown
    verdict = result.verdict
    style = {"ACCEPT": "green", "REJECT": "red"}.get(verdict.decision, "yellow")

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value")
    table.add_row("Net / year", f"{offer.currency} {fb.yearly_net_income:,}")
    table.add_row("Net / month", f"{offer.currency} {fb.monthly_net_income:,}")
    table.add_row("Effective tax", f"{fb.effective_tax_rate:g}%")
    table.add_row("USD equivalent", f"USD {fb.usd_equivalent.yearly_net:,} (rate {fb.usd_equivalent.exchange_rate})")
    table.add_row("Essentials / month", f"{offer.currency} {result.cost_of_living.total_essential:,} (tier {result.cost_of_living.city_tier})")
    table.add_row("Savings / month", f"{offer.currency} {result.savings_projection.monthly_savings:,}")
    table.add_row("Fairness", f"{result.scores.salary_fairness}%")
    table.add_row("Risk", result.risk_analysis.level)
    table.add_row("Confidence", result.scores.decision_confidence)

    console.print(Panel(table, title=f"[bold {style}]{verdict.decision}[/bold {style}]", border_style=style))
    console.print(f"{verdict.reasoning}\n")

    for warning in result.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")
    if verdict.action_plan:
        console.print("\n[bold]Action plan:[/bold]")
        for i, step in enumerate(verdict.action_plan, 1):
            console.print(f"  {i}. {step}")


@app.command()
def offers():
    """List archived analyses, newest first."""
    saved = open_store().list()
    if not saved:
        console.print("[dim]No saved reports. Run `analyze --save` first.[/dim]")
        return

    table = Table(title=f"{len(saved)} Reports Archived", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Location", style="green")
    table.add_column("Net / year", style="blue")
    table.add_column("Verdict")
    table.add_column("Saved")

    for offer in saved:
        decision = offer.result.verdict.decision
        style = {"ACCEPT": "green", "REJECT": "red"}.get(decision, "yellow")
        table.add_row(
            offer.id,
            offer.input.job_title[:40],
            f"{offer.input.city}, {offer.input.country}",
            f"{offer.input.currency} {offer.result.financial_breakdown.yearly_net_income:,}",
            f"[{style}]{decision}[/{style}]",
            offer.timestamp.strftime("%Y-%m-%d")
        )

    console.print(table)


@app.command()
def show(offer_id: str = typer.Argument(..., help="Archived offer id")):
    """Show one archived analysis with its full report."""
    offer = _require(open_store().get(offer_id), offer_id)
    display_result(offer.input, offer.result)
    console.print(Markdown(offer.result.raw_markdown))


@app.command()
def delete(offer_id: str = typer.Argument(..., help="Archived offer id")):
    """Delete one archived analysis."""
    if not open_store().delete(offer_id):
        console.print(f"[red]No saved offer with id {offer_id}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Deleted {offer_id}[/green]")


@app.command()
def clear(yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")):
    """Delete every archived analysis."""
    if not yes:
        typer.confirm("Delete all saved reports?", abort=True)
    open_store().clear()
    console.print("[green]Archive cleared[/green]")


@app.command()
def compare(offer_ids: list[str] = typer.Argument(..., help="Up to three archived offer ids")):
    """Compare archived offers side by side."""
    engine = ComparisonEngine(max_selection=settings.max_comparison)
    try:
        table = engine.project(open_store().list(), offer_ids)
    except SelectionLimitExceeded as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    if not table.columns:
        console.print("[yellow]None of those ids are in the archive.[/yellow]")
        raise typer.Exit(code=1)

    display_comparison(table)


def display_comparison(table: ComparisonTable):
    """Display a comparison table, one column per offer."""
    grid = Table(title="Compare Offers", show_header=True, header_style="bold magenta")
    grid.add_column("Metric", style="dim")
    for column in table.columns:
        grid.add_column(f"{column.job_title}\n[dim]{column.city}[/dim]", justify="center")

    for row in table.rows:
        cells = []
        for cell in row.cells:
            style = TONE_STYLE.get(cell.tone or "")
            cells.append(f"[{style}]{cell.display}[/{style}]" if style else cell.display)
        grid.add_row(row.label, *cells)

    console.print(grid)


def _require(offer: Optional[SavedOffer], offer_id: str) -> SavedOffer:
    if offer is None:
        console.print(f"[red]No saved offer with id {offer_id}[/red]")
        raise typer.Exit(code=1)
    return offer


@app.command()
def serve(
    host: str = typer.Option(settings.host, "--host", help="Host to bind to"),
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
):
    """Start the API server."""
    import uvicorn

    console.print(f"[bold green]Starting Offer Engine API on {host}:{port}[/bold green]")
    uvicorn.run(
        "offer_engine.api.routes:app",
        host=host,
        port=port,
        reload=reload
    )


if __name__ == "__main__":
    app()
