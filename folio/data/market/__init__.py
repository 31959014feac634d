"""Market data feeds (real-time quotes)."""

from .models import Quote, QuoteRange
from .provider import QuoteProvider, YahooQuoteProvider, get_quote_provider

__all__ = [
    "Quote",
    "QuoteRange",
    "QuoteProvider",
    "YahooQuoteProvider",
    "get_quote_provider",
]
