"""Exception hierarchy for portfolio and quote handling."""

from __future__ import annotations


class FolioError(Exception):
    """Base exception for all folio errors."""

    pass


class CurrencyMismatchError(FolioError, ValueError):
    """Raised when money in two different currencies is combined."""

    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(f"Cannot combine amounts in {left} and {right}")


class ProviderError(FolioError):
    """Raised by quote providers."""

    pass


class ProviderConfigurationError(ProviderError):
    """Raised when a quote provider cannot be set up (bad name, missing credentials)."""

    pass


class ProviderFetchError(ProviderError):
    """Raised when a quote for one symbol cannot be retrieved."""

    def __init__(self, symbol: str, reason: str):
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Error retrieving quote for {symbol}: {reason}")


class PortfolioLoadError(FolioError):
    """Raised when the holdings file cannot be loaded."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load portfolio from {path}: {reason}")


class PortfolioNotFoundError(PortfolioLoadError):
    """Raised when no holdings file exists."""

    def __init__(self, path):
        super().__init__(path, "file does not exist")


class PortfolioFormatError(PortfolioLoadError):
    """Raised when the holdings file exists but is malformed."""

    pass


class PortfolioSaveError(FolioError):
    """Raised when the holdings file cannot be written."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot save portfolio to {path}: {reason}")
