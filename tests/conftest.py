"""Shared fixtures: a fake quote provider and isolated settings."""

from datetime import datetime, timezone
from typing import Dict, Optional

import pytest

from folio.config import get_settings
from folio.core.errors import ProviderConfigurationError, ProviderFetchError
from folio.core.money import Money
from folio.data.market.models import Quote, QuoteRange
from folio.data.market.provider import QuoteProvider


def usd(amount: str) -> Money:
    return Money.parse(amount, "USD")


def make_quote(
    symbol: str,
    price: str = "100.00",
    change: Optional[str] = None,
    percent: Optional[float] = None,
    with_range: bool = True,
    volume: Optional[int] = 1234567,
) -> Quote:
    day_range = None
    if with_range:
        day_range = QuoteRange(
            open=usd("99.00"),
            low=usd("98.50"),
            high=usd("101.25"),
            close=usd("99.50"),
            volume=volume,
        )
    return Quote(
        symbol=symbol,
        price=usd(price),
        change=usd(change) if change is not None else None,
        change_percent=percent,
        range=day_range,
        fetched_at=datetime(2024, 1, 2, 15, 30, tzinfo=timezone.utc),
    )


class FakeQuoteProvider(QuoteProvider):
    """Provider returning canned quotes and recording every fetch."""

    def __init__(
        self,
        quotes: Optional[Dict[str, Quote]] = None,
        errors: Optional[Dict[str, str]] = None,
    ):
        self.quotes = quotes or {}
        self.errors = errors or {}
        self.calls = []

    @property
    def name(self) -> str:
        return "fake"

    def fetch_real_time(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        if symbol in self.errors:
            raise ProviderFetchError(symbol, self.errors[symbol])
        if symbol not in self.quotes:
            self.quotes[symbol] = make_quote(symbol)
        return self.quotes[symbol]



class MisconfiguredProvider(FakeQuoteProvider):
    """Provider whose credentials are rejected on every fetch."""

    def fetch_real_time(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        raise ProviderConfigurationError("API token expired")


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at a temporary holdings file for every test."""
    monkeypatch.setenv("FOLIO_PORTFOLIO_FILE", str(tmp_path / "portfolio.yaml"))
    monkeypatch.setenv("FOLIO_REFRESH_DELAY_SECONDS", "60")
    monkeypatch.setenv("FOLIO_TOLERATE_FETCH_ERRORS", "true")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def provider():
    return FakeQuoteProvider()
