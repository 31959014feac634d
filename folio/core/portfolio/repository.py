"""Holdings file persistence (YAML)."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from folio.core.errors import (
    PortfolioFormatError,
    PortfolioNotFoundError,
    PortfolioSaveError,
)
from folio.core.money import Money
from .models import Holding, Item, Portfolio, PriceItem, WatchItem

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Serialization format
# ------------------------------------------------------------------


class SerializedMoney(BaseModel):
    """Amount kept as a decimal string so the file never carries float noise."""

    amount: str
    currency: str

    @field_validator("amount", mode="before")
    @classmethod
    def number_as_text(cls, v):
        # Hand-edited files may write ``amount: 250.10`` without quotes
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class SerializedHolding(BaseModel):
    symbol: str = Field(..., min_length=1)
    watch_only: bool = False
    quantity: Optional[int] = Field(None, ge=0)
    purchase_price: Optional[SerializedMoney] = None
    purchase_date: Optional[date] = None

    @model_validator(mode="after")
    def priced_fields_present(self) -> "SerializedHolding":
        if not self.watch_only and (self.quantity is None or self.purchase_price is None):
            raise ValueError(
                f"Holding {self.symbol} needs quantity and purchase_price unless watch_only"
            )
        return self


class SerializedPortfolio(BaseModel):
    default_currency: Optional[str] = None
    holdings: list[SerializedHolding] = Field(default_factory=list)


def _to_item(entry: SerializedHolding) -> Item:
    if entry.watch_only:
        return WatchItem(symbol=entry.symbol)
    price = entry.purchase_price
    return PriceItem(
        symbol=entry.symbol,
        holding=Holding(
            quantity=entry.quantity,
            purchase_price=Money.parse(price.amount, price.currency),
            purchase_date=entry.purchase_date,
        ),
    )


def _from_item(item: Item) -> SerializedHolding:
    if isinstance(item, WatchItem):
        return SerializedHolding(symbol=item.symbol, watch_only=True)
    holding = item.holding
    return SerializedHolding(
        symbol=item.symbol,
        watch_only=False,
        quantity=holding.quantity,
        purchase_price=SerializedMoney(
            amount=str(holding.purchase_price.to_decimal()),
            currency=holding.purchase_price.currency,
        ),
        purchase_date=holding.purchase_date,
    )


def portfolio_from_data(data: dict) -> Portfolio:
    """Build a portfolio from parsed file data.

    Raises:
        ValueError: If the data does not match the file schema
    """
    serialized = SerializedPortfolio.model_validate(data)
    return Portfolio(
        default_currency=serialized.default_currency,
        items=[_to_item(entry) for entry in serialized.holdings],
    )


def portfolio_to_data(portfolio: Portfolio) -> dict:
    """Convert a portfolio to plain data ready for ``yaml.safe_dump``."""
    serialized = SerializedPortfolio(
        default_currency=portfolio.default_currency,
        holdings=[_from_item(item) for item in portfolio.items],
    )
    return serialized.model_dump(mode="json", exclude_none=True)


# ------------------------------------------------------------------
# Repository
# ------------------------------------------------------------------


class PortfolioRepository:
    """Reads and writes the holdings file."""

    def __init__(self, path: Path | str):
        """Initialize repository with the holdings file path."""
        self.path = Path(path).expanduser()

    def load(self) -> Portfolio:
        """Load the portfolio from disk.

        Returns:
            Portfolio with items in file order

        Raises:
            PortfolioNotFoundError: If the file does not exist
            PortfolioFormatError: If the file cannot be parsed
        """
        logger.info(f"Reading portfolio file {self.path}")
        if not self.path.exists():
            raise PortfolioNotFoundError(self.path)

        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
        except yaml.YAMLError as e:
            raise PortfolioFormatError(self.path, f"invalid YAML: {e}") from e
        except OSError as e:
            raise PortfolioFormatError(self.path, str(e)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise PortfolioFormatError(self.path, "top level must be a mapping")

        try:
            return portfolio_from_data(data)
        except (ValidationError, ValueError) as e:
            raise PortfolioFormatError(self.path, str(e)) from e

    def save(self, portfolio: Portfolio) -> None:
        """Write the portfolio to disk, replacing any existing file.

        Raises:
            PortfolioSaveError: If the file cannot be written
        """
        logger.info(f"Writing portfolio file {self.path}")
        data = portfolio_to_data(portfolio)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                yaml.safe_dump(data, handle, sort_keys=False)
        except OSError as e:
            raise PortfolioSaveError(self.path, str(e)) from e

    def load_or_create(self, currency: str = "USD") -> tuple[Portfolio, bool]:
        """Load the portfolio, writing an example one if the file is missing.

        Returns:
            Tuple of (portfolio, created)
        """
        try:
            return self.load(), False
        except PortfolioNotFoundError:
            example = Portfolio.example(currency)
            self.save(example)
            return example, True

