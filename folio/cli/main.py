"""Main CLI entry point using Typer."""

import logging

import typer

from folio.config import PRODUCT_NAME, PRODUCT_TAGLINE, PRODUCT_VERSION, get_settings
from folio.cli.common import console
from folio.cli.holdings import add_holding, delete_holding, list_holdings
from folio.cli.quotes import show_portfolio, watch_portfolio

# Configure logging
logging.basicConfig(
    level=getattr(logging, get_settings().log_level.upper(), logging.WARNING),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries
logging.getLogger("yfinance").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)

app = typer.Typer(
    name="folio",
    help=f"{PRODUCT_NAME} - {PRODUCT_TAGLINE}",
    add_completion=False,
    no_args_is_help=True,
)

app.command("show")(show_portfolio)
app.command("watch")(watch_portfolio)
app.command("holdings")(list_holdings)
app.command("add")(add_holding)
app.command("delete")(delete_holding)


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]{PRODUCT_NAME}[/bold] {PRODUCT_VERSION}")
    console.print(f"[dim]{PRODUCT_TAGLINE}[/dim]")


if __name__ == "__main__":
    app()
