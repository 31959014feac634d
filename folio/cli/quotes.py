"""Quote CLI commands (show, watch)."""

from __future__ import annotations

from typing import Optional

import typer
from rich.markup import escape

from folio.config import MIN_REFRESH_DELAY, get_settings
from folio.core.errors import ProviderConfigurationError, ProviderError, ProviderFetchError
from folio.core.quotes import RenderResult, render_once, run_refresh_loop
from .common import (
    build_provider,
    console,
    format_context,
    load_portfolio,
    report_provider_error,
)

TIME_FMT = "%Y-%m-%d %H:%M:%S"


def show_portfolio():
    """Show quotes for all portfolio symbols."""
    portfolio = load_portfolio()
    provider = build_provider()

    try:
        result = render_once(portfolio, provider, format_context())
    except ProviderError as e:
        raise report_provider_error(e)

    console.print(result.to_table(title="Portfolio"))


def watch_portfolio(
    delay: Optional[int] = typer.Option(
        None,
        "--refresh-delay",
        "-d",
        min=MIN_REFRESH_DELAY,
        help="Seconds between refreshes (default: FOLIO_REFRESH_DELAY_SECONDS)",
    ),
    stop_on_error: bool = typer.Option(
        False, "--stop-on-error", help="Exit on the first failed refresh instead of retrying"
    ),
):
    """Watch quotes for portfolio symbols, refreshing until Ctrl+C."""
    settings = get_settings()
    portfolio = load_portfolio()
    provider = build_provider()

    effective_delay = delay or settings.refresh_delay_seconds
    tolerate = settings.tolerate_fetch_errors and not stop_on_error

    def on_render(result: RenderResult) -> None:
        updated = result.rendered_at.astimezone().strftime(TIME_FMT)
        console.clear()
        console.print(
            result.to_table(
                title="Portfolio",
                caption=f"Last updated {updated} - every {effective_delay}s - Ctrl+C to stop",
            )
        )

    def on_error(error: ProviderFetchError) -> None:
        notice = f"[bold red]Refresh failed:[/bold red] {escape(str(error))}"
        if tolerate:
            notice += f" [dim](retrying in {effective_delay}s)[/dim]"
        console.print(notice)

    console.print(f"[bold]Watching {len(portfolio.items)} item(s)[/bold]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    try:
        run_refresh_loop(
            portfolio,
            provider,
            effective_delay,
            on_render=on_render,
            on_error=on_error,
            tolerate_errors=tolerate,
            ctx=format_context(),
        )
    except ProviderFetchError:
        # Already reported by on_error
        raise typer.Exit(1)
    except ProviderConfigurationError as e:
        raise report_provider_error(e)
