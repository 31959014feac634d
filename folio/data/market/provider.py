"""Real-time quote providers."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

import yfinance as yf

from folio.config import Settings, get_settings
from folio.core.errors import ProviderConfigurationError, ProviderFetchError
from folio.core.money import Money
from .models import Quote, QuoteRange

logger = logging.getLogger(__name__)

# Timeout for yfinance API calls (seconds)
YFINANCE_TIMEOUT = 30

# Symbol format mappings for Yahoo Finance compatibility
# Maps user-friendly formats to Yahoo Finance formats
SYMBOL_MAPPINGS = {
    # Warrant formats: /WS -> -WT (Yahoo Finance warrant suffix)
    "/WS": "-WT",
    "/W": "-WT",
    ".WS": "-WT",
    ".W": "-WT",
}

PRICE_KEYS = ("currentPrice", "regularMarketPrice")

# Yahoo quotes London listings in pence
SUBUNIT_CURRENCIES = {"GBp": ("GBP", 100), "GBX": ("GBP", 100), "ZAc": ("ZAR", 100)}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_symbol(symbol: str) -> str:
    """Map a portfolio symbol to Yahoo Finance format.

    Args:
        symbol: Original symbol (e.g., 'IONQ/WS')

    Returns:
        Yahoo symbol (e.g., 'IONQ-WT'); other symbols pass through unchanged
    """
    for suffix, yahoo_suffix in SYMBOL_MAPPINGS.items():
        if symbol.endswith(suffix):
            yahoo_symbol = symbol[: -len(suffix)] + yahoo_suffix
            logger.debug(f"Normalized symbol {symbol} -> {yahoo_symbol}")
            return yahoo_symbol
    return symbol


class QuoteProvider(ABC):
    """Abstract base class for quote sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider identifier."""
        pass

    @abstractmethod
    def fetch_real_time(self, symbol: str) -> Quote:
        """Fetch the latest quote for a symbol.

        Args:
            symbol: Ticker symbol exactly as stored in the portfolio

        Returns:
            Quote for the symbol

        Raises:
            ProviderFetchError: If no quote could be retrieved
        """
        pass


class YahooQuoteProvider(QuoteProvider):
    """Quote provider backed by yfinance."""

    # Shared executor for timeout handling (reused across calls)
    _executor: Optional[ThreadPoolExecutor] = None

    def __init__(self, timeout: int = YFINANCE_TIMEOUT, default_currency: str = "USD"):
        """Initialize provider.

        Args:
            timeout: Timeout for yfinance API calls in seconds.
            default_currency: Currency assumed when Yahoo does not report one.
        """
        self.timeout = timeout
        self.default_currency = default_currency

    @property
    def name(self) -> str:
        return "yahoo"

    @classmethod
    def _get_executor(cls) -> ThreadPoolExecutor:
        """Get or create shared executor."""
        if cls._executor is None:
            cls._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="market_data")
        return cls._executor

    def _fetch_with_timeout(self, func, *args, **kwargs):
        """Execute a function with timeout protection.

        Returns:
            Function result or None on timeout
        """
        executor = self._get_executor()
        future = executor.submit(func, *args, **kwargs)
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeoutError:
            logger.warning(f"Timeout after {self.timeout}s fetching market data")
            return None

    def fetch_real_time(self, symbol: str) -> Quote:
        yahoo_symbol = normalize_symbol(symbol)

        def _fetch_info() -> Dict[str, Any]:
            ticker = yf.Ticker(yahoo_symbol)
            info = dict(ticker.info or {})
            if _first_number(info, PRICE_KEYS) is None:
                hist = ticker.history(period="1d")
                if not hist.empty:
                    info["historyClose"] = float(hist["Close"].iloc[-1])
            return info

        try:
            info = self._fetch_with_timeout(_fetch_info)
        except Exception as e:
            logger.error(f"yfinance error for {symbol}: {e}")
            raise ProviderFetchError(symbol, f"yfinance error: {e}") from e

        if info is None:
            raise ProviderFetchError(symbol, f"timed out after {self.timeout}s")

        quote = self._build_quote(symbol, info)
        logger.debug(f"Fetched {symbol}: {quote.price}")
        return quote

    def _build_quote(self, symbol: str, info: Dict[str, Any]) -> Quote:
        """Turn a yfinance info mapping into a Quote.

        Raises:
            ProviderFetchError: If no price is present
        """
        currency = info.get("currency") or self.default_currency
        currency, divisor = SUBUNIT_CURRENCIES.get(currency, (currency, 1))

        def money(value: Any) -> Optional[Money]:
            number = _number(value)
            if number is None:
                return None
            return Money.from_decimal(Decimal(str(number)) / divisor, currency)

        price = money(_first_number(info, PRICE_KEYS + ("historyClose",)))
        if price is None:
            logger.warning(f"Could not fetch price for {symbol} (Yahoo: {normalize_symbol(symbol)})")
            raise ProviderFetchError(symbol, "no price data available")

        volume = _number(info.get("regularMarketVolume"))
        day_range = QuoteRange(
            open=money(info.get("regularMarketOpen")),
            low=money(info.get("regularMarketDayLow")),
            high=money(info.get("regularMarketDayHigh")),
            close=money(info.get("regularMarketPreviousClose")),
            volume=int(volume) if volume is not None else None,
        )
        if all(value is None for value in day_range.model_dump().values()):
            day_range = None

        return Quote(
            symbol=symbol,
            price=price,
            change=money(info.get("regularMarketChange")),
            change_percent=_number(info.get("regularMarketChangePercent")),
            range=day_range,
            fetched_at=_utcnow(),
        )


def _number(value: Any) -> Optional[float]:
    """Coerce a provider value to float, treating NaN and junk as missing."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _first_number(info: Dict[str, Any], keys) -> Optional[float]:
    for key in keys:
        number = _number(info.get(key))
        if number is not None:
            return number
    return None


PROVIDERS = {
    "yahoo": YahooQuoteProvider,
}


def get_quote_provider(settings: Optional[Settings] = None) -> QuoteProvider:
    """Build the configured quote provider.

    Raises:
        ProviderConfigurationError: If the configured provider is unknown
    """
    settings = settings or get_settings()
    name = settings.quote_provider.lower().strip()
    provider_cls = PROVIDERS.get(name)
    if provider_cls is None:
        raise ProviderConfigurationError(
            f"Unknown quote provider '{settings.quote_provider}' "
            f"(available: {', '.join(sorted(PROVIDERS))})"
        )
    return provider_cls(
        timeout=settings.provider_timeout_seconds,
        default_currency=settings.default_currency,
    )
