"""Render pass: fetch quotes for a portfolio and build its table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from rich.table import Table

from folio.core.portfolio.models import Portfolio
from folio.data.market.provider import QuoteProvider
from .cache import QuoteCache
from .formatting import COLUMNS, DEFAULT_CONTEXT, FormatContext, Row, format_row

logger = logging.getLogger(__name__)


def build_table(
    rows: Sequence[Row],
    columns: Sequence[str] = COLUMNS,
    title: Optional[str] = None,
    caption: Optional[str] = None,
) -> Table:
    """Assemble rows under a fixed header into a Rich table."""
    table = Table(title=title, caption=caption)
    for name in columns:
        table.add_column(name, header_style="bold", style="cyan" if name == "Symbol" else None)
    for row in rows:
        table.add_row(*row)
    return table


@dataclass
class RenderResult:
    """Outcome of one successful render pass."""

    rows: List[Row]
    fetch_count: int
    rendered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def symbols(self) -> List[str]:
        """Symbol column in row order."""
        return [row[0].plain for row in self.rows]

    def to_table(self, title: Optional[str] = None, caption: Optional[str] = None) -> Table:
        return build_table(self.rows, title=title, caption=caption)


def render_once(
    portfolio: Portfolio,
    provider: QuoteProvider,
    ctx: Optional[FormatContext] = None,
) -> RenderResult:
    """Run a single render pass.

    Quotes are fetched one symbol at a time in item order, each distinct
    symbol exactly once. Rows come back in item order, duplicates included.
    The portfolio is only read.

    Args:
        portfolio: Portfolio to render
        provider: Quote source
        ctx: Number formatting options

    Returns:
        RenderResult with one row per item

    Raises:
        ProviderFetchError: If any quote cannot be fetched; no rows are produced
    """
    ctx = ctx or DEFAULT_CONTEXT
    logger.info(f"Rendering {len(portfolio.items)} item(s)")

    cache = QuoteCache(provider).populate(portfolio.items)
    rows = [format_row(item, cache[item.symbol], ctx) for item in portfolio.items]

    logger.info(f"Rendered {len(rows)} row(s) with {cache.fetch_count} quote fetch(es)")
    return RenderResult(rows=rows, fetch_count=cache.fetch_count)
