"""Per-render quote cache."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator

from folio.core.errors import FolioError, ProviderFetchError
from folio.core.portfolio.models import Item
from folio.data.market.models import Quote
from folio.data.market.provider import QuoteProvider

logger = logging.getLogger(__name__)


class QuoteCache:
    """Symbol -> Quote mapping filled lazily during one render pass.

    Each distinct symbol is fetched from the provider at most once, however
    many items reference it. A cache belongs to a single pass and is thrown
    away afterwards; quotes are never carried into the next refresh.
    """

    def __init__(self, provider: QuoteProvider):
        """Initialize an empty cache.

        Args:
            provider: Quote source used for misses
        """
        self.provider = provider
        self._quotes: Dict[str, Quote] = {}
        self.fetch_count = 0

    def get(self, symbol: str) -> Quote:
        """Get the quote for a symbol, fetching it on first use.

        Raises:
            ProviderFetchError: If the provider fails for this symbol
            ProviderConfigurationError: If the provider reports it is misconfigured
        """
        quote = self._quotes.get(symbol)
        if quote is not None:
            return quote

        self.fetch_count += 1
        logger.debug(f"Fetching quote for {symbol} from {self.provider.name}")
        try:
            quote = self.provider.fetch_real_time(symbol)
        except FolioError:
            raise
        except Exception as e:
            raise ProviderFetchError(symbol, str(e) or type(e).__name__) from e

        self._quotes[symbol] = quote
        return quote

    def populate(self, items: Iterable[Item]) -> "QuoteCache":
        """Fetch quotes for all items in order, stopping at the first failure.

        Raises:
            ProviderFetchError: Naming the first symbol that could not be fetched
        """
        for item in items:
            self.get(item.symbol)
        return self

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._quotes

    def __len__(self) -> int:
        return len(self._quotes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._quotes)

    def __getitem__(self, symbol: str) -> Quote:
        return self._quotes[symbol]


def build_quote_cache(items: Iterable[Item], provider: QuoteProvider) -> QuoteCache:
    """Create and fill a cache for one render pass (convenience function)."""
    return QuoteCache(provider).populate(items)
