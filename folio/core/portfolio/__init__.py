"""Portfolio ledger and holdings file."""

from .models import (
    Holding,
    Item,
    Portfolio,
    PriceItem,
    WatchItem,
    item_symbol,
)
from .repository import PortfolioRepository

__all__ = [
    "Holding",
    "Item",
    "Portfolio",
    "PriceItem",
    "WatchItem",
    "item_symbol",
    "PortfolioRepository",
]
