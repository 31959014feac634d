"""Holdings CLI commands (holdings, add, delete)."""

from __future__ import annotations

from datetime import date
from typing import Optional

import typer

from folio.config import get_settings
from folio.core.money import Money
from folio.core.portfolio import Holding, PriceItem, WatchItem
from folio.core.quotes import build_table
from folio.core.quotes.formatting import DATE_FMT, HOLDINGS_COLUMNS, format_holding_row
from .common import console, fail, format_context, get_repository, load_portfolio, save_portfolio


def list_holdings():
    """Show all holdings in the current portfolio."""
    portfolio = load_portfolio()
    priced = portfolio.holdings()

    if priced:
        ctx = format_context()
        rows = [format_holding_row(item, ctx) for item in priced]
        console.print(build_table(rows, columns=HOLDINGS_COLUMNS, title="Portfolio Holdings"))
    else:
        console.print("[yellow]No priced holdings.[/yellow] Use 'add' with --price/--quantity.")

    watching = [item.symbol for item in portfolio.watches()]
    if watching:
        console.print(f"\nAlso watching: {', '.join(watching)}")


def add_holding(
    symbol: str = typer.Argument(..., help="The security symbol (e.g., AAPL)"),
    price: Optional[str] = typer.Option(
        None, "--purchase-price", "-p", help="The purchase price of the security (e.g., 123.45)"
    ),
    quantity: Optional[int] = typer.Option(
        None, "--quantity", "-q", min=0, help="The quantity of this security you hold"
    ),
    purchase_date: Optional[str] = typer.Option(
        None, "--purchase-date", "-d", help="The purchase date of the security (YYYY-MM-DD)"
    ),
):
    """Add a symbol to the portfolio.

    Without a price or quantity the symbol is only watched.

    Examples:
        folio add AAPL
        folio add MSFT -p 250.10 -q 10 -d 2024-03-01
    """
    symbol = symbol.strip()
    if not symbol:
        raise fail("Symbol must not be empty")

    repo = get_repository()
    portfolio = load_portfolio(repo)

    if price is None and quantity is None and purchase_date is None:
        item = WatchItem(symbol=symbol)
        summary = f"{symbol} (watch only)"
    else:
        currency = portfolio.currency_or(get_settings().default_currency)
        try:
            purchase_price = Money.parse(price, currency) if price is not None else Money.zero(currency)
        except ValueError:
            raise fail(f"Invalid price format: {price}")
        if purchase_price.is_negative:
            raise fail(f"Purchase price must not be negative: {price}")

        parsed_date = None
        if purchase_date:
            try:
                parsed_date = date.fromisoformat(purchase_date)
            except ValueError:
                raise fail(f"Invalid date format: {purchase_date}")

        holding = Holding(
            quantity=quantity or 0,
            purchase_price=purchase_price,
            purchase_date=parsed_date,
        )
        item = PriceItem(symbol=symbol, holding=holding)
        summary = f"{symbol} - {holding.quantity} @ {purchase_price}"
        if parsed_date:
            summary += f" on {parsed_date.strftime(DATE_FMT)}"

    if symbol in portfolio.symbols():
        console.print(f"[dim]{symbol} is already tracked; adding another entry.[/dim]")

    save_portfolio(repo, portfolio.with_item(item))
    console.print(f"[green]Added:[/green] {summary}")


def delete_holding(
    symbol: str = typer.Argument(..., help="The security symbol"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Delete a symbol from the portfolio."""
    symbol = symbol.strip()
    repo = get_repository()
    portfolio = load_portfolio(repo)

    count = sum(1 for item in portfolio.items if item.symbol == symbol)
    if not count:
        raise fail(f"Symbol {symbol} not found in portfolio.")

    if not force:
        entries = "entry" if count == 1 else "entries"
        if not typer.confirm(f"Remove {symbol} ({count} {entries})?"):
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

    save_portfolio(repo, portfolio.without_symbol(symbol))
    console.print(f"[green]Removed:[/green] {symbol}")
