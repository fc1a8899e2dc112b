"""Command-line interface for MarketLens."""

import asyncio
import json
import sys
from typing import Dict, List, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from marketlens.analysis.models import ConsolidatedResponse
from marketlens.exceptions import MarketLensError
from marketlens.utils.helpers import format_percentage
from marketlens.utils.logger import setup_logger

console = Console()


@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool):
    """MarketLens - Multi-model AI analysis of prediction markets."""
    setup_logger(log_level="DEBUG" if verbose else None)
    if verbose:
        console.print("[dim]Verbose mode enabled[/dim]")


def _parse_outcomes(values: Tuple[str, ...]) -> Optional[List[Dict]]:
    """Parse repeated LABEL=PRICE options into raw outcome dicts."""
    if not values:
        return None

    outcomes = []
    for value in values:
        label, sep, price = value.rpartition("=")
        if not sep or not label.strip():
            raise click.BadParameter(f"Expected LABEL=PRICE, got {value!r}", param_hint="--outcome")
        try:
            yes_price = float(price)
        except ValueError:
            raise click.BadParameter(f"Invalid price in {value!r}", param_hint="--outcome")
        outcomes.append({"label": label.strip(), "yesPrice": yes_price})
    return outcomes


@cli.command("analyze")
@click.argument("title")
@click.option("--market-id", default="", help="Market identifier used when storing predictions")
@click.option("--yes", "yes_percentage", type=float, help="YES price (0-100) for binary markets")
@click.option("--no", "no_percentage", type=float, help="NO price (0-100) for binary markets")
@click.option("--volume", help="Trading volume")
@click.option(
    "--outcome",
    "outcome_values",
    multiple=True,
    help="Outcome as LABEL=PRICE (repeat for multi-outcome markets)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw JSON response")
def analyze(
    title: str,
    market_id: str,
    yes_percentage: Optional[float],
    no_percentage: Optional[float],
    volume: Optional[str],
    outcome_values: Tuple[str, ...],
    as_json: bool,
):
    """Analyze a market with every configured model.

    Args:
        title: Market question
    """
    outcomes = _parse_outcomes(outcome_values)

    try:
        # Import here so --help works without gateway credentials
        from marketlens.analysis.analyzer import Analyzer

        analyzer = Analyzer()
        console.print(f"[bold]Analyzing: {title}[/bold]")
        result = asyncio.run(
            analyzer.analyze(
                market_title=title,
                market_id=market_id,
                yes_percentage=yes_percentage,
                no_percentage=no_percentage,
                volume=volume,
                outcomes=outcomes,
            )
        )
    except MarketLensError as e:
        console.print(f"[red]✗ {str(e)}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]✗ Error: {str(e)}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_response_dict(), indent=2))
        return

    _display_analysis_result(result)


def _display_analysis_result(result: ConsolidatedResponse):
    """Display consensus and per-model results in formatted tables."""
    consensus = result.consensus

    console.print("\n[bold cyan]Consensus[/bold cyan]")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Outcome", style="cyan")
    table.add_column("AI", style="green")
    table.add_column("Market", style="yellow")
    table.add_column("Edge", style="white")

    for ranking in consensus.outcome_rankings:
        table.add_row(
            ranking.outcome_label,
            format_percentage(ranking.ai_probability),
            format_percentage(ranking.market_probability),
            f"{ranking.edge:+.1f}",
        )
    console.print(table)

    console.print(f"\n{consensus.summary}")
    console.print(
        f"Sentiment: {consensus.sentiment} | Agreement: {consensus.disagreement.model_agreement}"
        f" | Evidence density: {consensus.evidence_density:.0f}"
    )

    console.print("\n[bold cyan]Models[/bold cyan]")
    model_table = Table(show_header=True, header_style="bold magenta")
    model_table.add_column("Model", style="cyan")
    model_table.add_column("Top Pick", style="green")
    model_table.add_column("Probability", style="yellow")
    model_table.add_column("Confidence", style="white")
    model_table.add_column("Evidence", style="white")

    for analysis in result.model_analyses:
        model_table.add_row(
            analysis.model,
            analysis.top_pick,
            format_percentage(analysis.top_pick_probability),
            analysis.confidence,
            f"{analysis.evidence_density:.0f}",
        )
    console.print(model_table)

    if result.crypto_data:
        crypto = result.crypto_data
        console.print(
            f"\n[dim]{crypto.symbol} ${crypto.current_price:,.2f} - {crypto.technical_summary}[/dim]"
        )


@cli.command("serve")
@click.option("--host", default=None, help="Bind address (default from config)")
@click.option("--port", type=int, default=None, help="Port (default from config)")
def serve(host: Optional[str], port: Optional[int]):
    """Run the HTTP API."""
    import uvicorn

    from marketlens.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "marketlens.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
    )


@cli.command("model-accuracy")
@click.argument("model", required=False)
def model_accuracy(model: Optional[str]):
    """Show historical model accuracy statistics.

    With MODEL, show that model's full accuracy record.
    """
    from marketlens.database.repositories import ModelAccuracyRepository

    try:
        repo = ModelAccuracyRepository()
        if model:
            record = repo.get(model)
        else:
            stats = repo.get_all()
    except Exception as e:
        console.print(f"[red]✗ Error: {str(e)}[/red]")
        sys.exit(1)

    if model:
        if record is None:
            console.print(f"[yellow]No accuracy data for {model}[/yellow]")
            return
        table = Table(show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        for field, value in record.items():
            table.add_row(field, "" if value is None else str(value))
        console.print(table)
        return

    if not stats:
        console.print("[yellow]No accuracy data recorded yet[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Model", style="cyan")
    table.add_column("Accuracy", style="green")
    table.add_column("Predictions", style="white")

    for name, accuracy in stats.items():
        table.add_row(name, format_percentage(accuracy.accuracy), str(accuracy.total_predictions))

    console.print(table)


@cli.command("predictions")
@click.argument("market_id", required=False)
@click.option("--model", "model_name", help="Show recent predictions by this model instead")
@click.option("--limit", type=int, default=50, help="Maximum rows with --model")
def predictions(market_id: Optional[str], model_name: Optional[str], limit: int):
    """List stored predictions for MARKET_ID, or for a model with --model."""
    from marketlens.database.repositories import PredictionRepository

    if not market_id and not model_name:
        raise click.UsageError("Give a MARKET_ID or --model")

    try:
        repo = PredictionRepository()
        rows = repo.get_by_model(model_name, limit) if model_name else repo.get_by_market(market_id)
    except Exception as e:
        console.print(f"[red]✗ Error: {str(e)}[/red]")
        sys.exit(1)

    if not rows:
        console.print("[yellow]No predictions found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Market", style="cyan")
    table.add_column("Model", style="cyan")
    table.add_column("Outcome", style="white")
    table.add_column("AI", style="green")
    table.add_column("Market %", style="yellow")
    table.add_column("Sentiment", style="white")
    table.add_column("Evidence", style="white")
    table.add_column("Created", style="dim")

    for row in rows:
        table.add_row(
            row["market_id"],
            row["model_name"],
            row["outcome_label"] or "-",
            format_percentage(row["predicted_probability"]),
            format_percentage(row["market_probability"]),
            row["predicted_sentiment"],
            f"{row['trust_score']:.0f}",
            str(row["created_at"]),
        )

    console.print(table)


@cli.command("price")
@click.argument("symbol")
def price(symbol: str):
    """Show live price data and the technical summary for a crypto SYMBOL."""
    from marketlens.pricing.client import CryptoPriceClient

    client = CryptoPriceClient()
    try:
        data = client.get_technical_data(symbol)
    finally:
        client.close()

    if data is None:
        console.print(f"[red]✗ No price data for {symbol.upper()}[/red]")
        sys.exit(1)

    console.print(f"[bold]{data.symbol}[/bold] ${data.current_price:,.2f}")
    console.print(
        f"24h: {data.price_change_percent_24h:+.2f}% | "
        f"High ${data.high_24h:,.2f} | Low ${data.low_24h:,.2f}"
    )
    console.print(data.technical_summary)


@cli.command("init-db")
def init_db():
    """Create the database schema."""
    from marketlens.config import get_settings
    from marketlens.database.db import get_db

    get_db()
    console.print(f"[green]✓[/green] Database ready at {get_settings().database_path}")


if __name__ == "__main__":
    cli()
