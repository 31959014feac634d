"""Helpers shared by CLI commands."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from folio.config import get_settings
from folio.core.errors import (
    PortfolioLoadError,
    PortfolioSaveError,
    ProviderConfigurationError,
    ProviderError,
)
from folio.core.portfolio import Portfolio, PortfolioRepository
from folio.core.quotes import FormatContext
from folio.data.market import QuoteProvider, get_quote_provider

console = Console()


def fail(message: str) -> typer.Exit:
    """Print an error and build the exit to raise."""
    console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


def get_repository() -> PortfolioRepository:
    return PortfolioRepository(get_settings().portfolio_path)


def format_context() -> FormatContext:
    return FormatContext.from_settings(get_settings())


def load_portfolio(repo: Optional[PortfolioRepository] = None) -> Portfolio:
    """Load the portfolio, creating the example file on first use."""
    repo = repo or get_repository()
    try:
        portfolio, created = repo.load_or_create(get_settings().default_currency)
    except PortfolioLoadError as e:
        raise fail(str(e))
    except PortfolioSaveError as e:
        raise fail(f"Failed to create example portfolio file: {e}")

    if created:
        console.print(
            f"[yellow]No portfolio file exists, creating an example in {repo.path}[/yellow]"
        )
    return portfolio


def save_portfolio(repo: PortfolioRepository, portfolio: Portfolio) -> None:
    try:
        repo.save(portfolio)
    except PortfolioSaveError as e:
        raise fail(f"Failed to save portfolio file: {e}")


def report_provider_error(error: ProviderError) -> typer.Exit:
    """Print a provider failure and build the exit to raise."""
    if isinstance(error, ProviderConfigurationError):
        return fail(f"Error configuring provider: {error}")
    return fail(str(error))


def build_provider() -> QuoteProvider:
    """Set up the quote provider; configuration problems end the command."""
    try:
        return get_quote_provider(get_settings())
    except ProviderConfigurationError as e:
        raise report_provider_error(e)
