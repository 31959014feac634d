"""Cell formatting for quote and holdings tables.

Every function here is pure: it turns ledger items and quotes into
``rich.text.Text`` cells. A cell carries its display string together with
its style hints (``justify`` for alignment, ``style`` for bold and color),
so painting the table is left entirely to Rich.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from rich.text import Text

from folio.config import Settings
from folio.core.errors import CurrencyMismatchError
from folio.core.money import Money
from folio.core.portfolio.models import Item, PriceItem, WatchItem
from folio.data.market.models import Quote

logger = logging.getLogger(__name__)

COLUMNS = (
    "Symbol",
    "Price",
    "Change",
    "Open",
    "Low",
    "High",
    "Close",
    "Volume",
    "Purchased",
    "Quantity",
    "Value",
)

HOLDINGS_COLUMNS = ("Symbol", "Purchase Date", "Purchase Price", "Quantity")

PLACEHOLDER = "-"
UP_ARROW = "↑"
DOWN_ARROW = "↓"
POSITIVE_STYLE = "green"
NEGATIVE_STYLE = "red"
DATE_FMT = "%Y-%m-%d"

Row = List[Text]


@dataclass(frozen=True)
class FormatContext:
    """Locale-style options for number rendering."""

    thousands_separator: str = ","

    @classmethod
    def from_settings(cls, settings: Settings) -> "FormatContext":
        return cls(thousands_separator=settings.thousands_separator)


DEFAULT_CONTEXT = FormatContext()


# ------------------------------------------------------------------
# Cells
# ------------------------------------------------------------------


def placeholder_cell() -> Text:
    return Text(PLACEHOLDER, justify="center")


def text_cell(value: str) -> Text:
    return Text(value, justify="left")


def bold(cell: Text) -> Text:
    """Copy of a cell with bold added to its style."""
    style = f"bold {cell.style}".strip() if cell.style else "bold"
    return Text(cell.plain, style=style, justify=cell.justify)


def price_cell(value: Money, ctx: FormatContext = DEFAULT_CONTEXT) -> Text:
    return Text(value.format(thousands_separator=ctx.thousands_separator), justify="right")


def price_cell_or(value: Optional[Money], ctx: FormatContext = DEFAULT_CONTEXT) -> Text:
    if value is None:
        return placeholder_cell()
    return price_cell(value, ctx)


def number_cell(value: int, ctx: FormatContext = DEFAULT_CONTEXT) -> Text:
    grouped = f"{value:,}".replace(",", ctx.thousands_separator)
    return Text(grouped, justify="right")


def number_cell_or(value: Optional[int], ctx: FormatContext = DEFAULT_CONTEXT) -> Text:
    if value is None:
        return placeholder_cell()
    return number_cell(value, ctx)


def format_percent(percentage: float) -> str:
    """Absolute percentage rounded to two places, e.g. ``2.5`` or ``3.0``."""
    return str(round(abs(percentage), 2))


def change_string(
    change: Money, percentage: float, ctx: FormatContext = DEFAULT_CONTEXT
) -> str:
    """Render a day change such as ``+$1.00 ↑3.0%`` or ``-$0.50 ↓2.5%``.

    The arrow follows the sign of the change amount; zero counts as up.
    """
    arrow = DOWN_ARROW if change.is_negative else UP_ARROW
    amount = change.format(signed=True, thousands_separator=ctx.thousands_separator)
    return f"{amount} {arrow}{format_percent(percentage)}%"


def change_cell(quote: Quote, ctx: FormatContext = DEFAULT_CONTEXT) -> Text:
    """Colored change cell, or the placeholder unless amount and percent are both known."""
    if quote.change is None or quote.change_percent is None:
        return placeholder_cell()
    style = NEGATIVE_STYLE if quote.change.is_negative else POSITIVE_STYLE
    return Text(
        change_string(quote.change, quote.change_percent, ctx),
        style=style,
        justify="right",
    )


def value_cell(item: PriceItem, quote: Quote, ctx: FormatContext = DEFAULT_CONTEXT) -> Text:
    """Unrealized gain or loss: (current price - purchase price) * quantity."""
    holding = item.holding
    try:
        value = (quote.price - holding.purchase_price) * holding.quantity
    except CurrencyMismatchError as e:
        logger.warning(f"Cannot value {item.symbol}: {e}")
        return placeholder_cell()
    return bold(price_cell(value, ctx))


# ------------------------------------------------------------------
# Rows
# ------------------------------------------------------------------


def quote_cells(quote: Quote, ctx: FormatContext = DEFAULT_CONTEXT) -> Row:
    """Price, Change and the five day-range cells."""
    day = quote.range
    if day is None:
        range_cells = [placeholder_cell() for _ in range(5)]
    else:
        range_cells = [
            price_cell_or(day.open, ctx),
            price_cell_or(day.low, ctx),
            price_cell_or(day.high, ctx),
            price_cell_or(day.close, ctx),
            number_cell_or(day.volume, ctx),
        ]
    return [price_cell(quote.price, ctx), change_cell(quote, ctx), *range_cells]


def holding_cells(item: Item, quote: Quote, ctx: FormatContext = DEFAULT_CONTEXT) -> Row:
    """Purchased, Quantity and Value cells."""
    if isinstance(item, WatchItem):
        return [placeholder_cell(), placeholder_cell(), placeholder_cell()]
    if isinstance(item, PriceItem):
        return [
            bold(price_cell(item.holding.purchase_price, ctx)),
            bold(number_cell(item.holding.quantity, ctx)),
            value_cell(item, quote, ctx),
        ]
    raise TypeError(f"Unsupported item type: {type(item).__name__}")


def format_row(item: Item, quote: Quote, ctx: FormatContext = DEFAULT_CONTEXT) -> Row:
    """Build the full table row for an item and its symbol's quote.

    The row always has one cell per entry in ``COLUMNS``.
    """
    return [
        text_cell(item.symbol),
        *quote_cells(quote, ctx),
        *holding_cells(item, quote, ctx),
    ]


def format_holding_row(item: PriceItem, ctx: FormatContext = DEFAULT_CONTEXT) -> Row:
    """Row for the holdings listing (no quote needed)."""
    holding = item.holding
    purchased = (
        Text(holding.purchase_date.strftime(DATE_FMT), justify="center")
        if holding.purchase_date
        else placeholder_cell()
    )
    return [
        text_cell(item.symbol),
        purchased,
        price_cell(holding.purchase_price, ctx),
        number_cell(holding.quantity, ctx),
    ]
