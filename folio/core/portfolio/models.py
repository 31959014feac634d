"""Pydantic models for the holdings ledger."""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from folio.core.money import Money

# Symbols added to a freshly created portfolio
EXAMPLE_SYMBOLS = ("AAPL", "AMZN", "MSFT")


class Holding(BaseModel):
    """Cost basis for a priced position."""

    model_config = ConfigDict(frozen=True)

    quantity: int = Field(..., ge=0)
    purchase_price: Money
    purchase_date: Optional[date] = None

    @field_validator("purchase_price")
    @classmethod
    def price_not_negative(cls, v: Money) -> Money:
        if v.is_negative:
            raise ValueError(f"Purchase price must not be negative, got {v}")
        return v


class WatchItem(BaseModel):
    """A symbol tracked without a cost basis."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["watch"] = "watch"
    symbol: str = Field(..., min_length=1)

    @field_validator("symbol", mode="before")
    @classmethod
    def symbol_strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class PriceItem(BaseModel):
    """A symbol tracked together with a holding."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["price"] = "price"
    symbol: str = Field(..., min_length=1)
    holding: Holding

    @field_validator("symbol", mode="before")
    @classmethod
    def symbol_strip(cls, v):
        return v.strip() if isinstance(v, str) else v


Item = Annotated[Union[WatchItem, PriceItem], Field(discriminator="kind")]


def item_symbol(item: Item) -> str:
    """Get the symbol of either item kind."""
    return item.symbol


class Portfolio(BaseModel):
    """Ordered list of tracked items plus an optional default currency.

    Portfolios are immutable; the editing helpers return a new value.
    Duplicate symbols are allowed and kept in insertion order.
    """

    model_config = ConfigDict(frozen=True)

    default_currency: Optional[str] = None
    items: list[Item] = Field(default_factory=list)

    @field_validator("default_currency")
    @classmethod
    def currency_uppercase(cls, v: Optional[str]) -> Optional[str]:
        return v.upper().strip() if v else None

    @classmethod
    def example(cls, currency: str = "USD") -> "Portfolio":
        """Portfolio written out when no holdings file exists yet."""
        return cls(
            default_currency=currency,
            items=[WatchItem(symbol=s) for s in EXAMPLE_SYMBOLS],
        )

    def symbols(self) -> list[str]:
        """Distinct symbols in first-seen order."""
        seen: dict[str, None] = {}
        for item in self.items:
            seen.setdefault(item.symbol, None)
        return list(seen)

    def holdings(self) -> list[PriceItem]:
        return [item for item in self.items if isinstance(item, PriceItem)]

    def watches(self) -> list[WatchItem]:
        return [item for item in self.items if isinstance(item, WatchItem)]

    def with_item(self, item: Item) -> "Portfolio":
        """Return a copy with ``item`` appended."""
        return Portfolio(
            default_currency=self.default_currency,
            items=[*self.items, item],
        )

    def without_symbol(self, symbol: str) -> "Portfolio":
        """Return a copy with every item for ``symbol`` removed."""
        return Portfolio(
            default_currency=self.default_currency,
            items=[item for item in self.items if item.symbol != symbol],
        )

    def currency_or(self, fallback: str) -> str:
        return self.default_currency or fallback
