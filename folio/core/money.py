"""Monetary amounts held as integer minor units."""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import CurrencyMismatchError

# Number of minor-unit digits per currency; anything unlisted uses 2
CURRENCY_EXPONENTS = {
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "CAD": 2,
    "AUD": 2,
    "CHF": 2,
    "JPY": 0,
    "KRW": 0,
}
DEFAULT_EXPONENT = 2

# Displayed before negative amounts (U+2212)
MINUS_SIGN = "\u2212"

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
}


def currency_exponent(code: str) -> int:
    """Get the number of minor-unit digits for a currency code."""
    return CURRENCY_EXPONENTS.get(code, DEFAULT_EXPONENT)


def currency_symbol(code: str) -> str:
    """Get the display prefix for a currency code."""
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


class Money(BaseModel):
    """An amount of money in a single currency.

    The amount is stored as an integer count of the currency's minor units
    (cents for USD), so addition, subtraction and scaling by a quantity
    never round.
    """

    model_config = ConfigDict(frozen=True)

    minor: int
    currency: str = Field(..., min_length=3, max_length=3)

    @field_validator("currency")
    @classmethod
    def currency_uppercase(cls, v: str) -> str:
        return v.upper()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(minor=0, currency=currency)

    @classmethod
    def of_major_minor(cls, currency: str, major: int, minor: int) -> "Money":
        """Build from separate major and minor parts (e.g. 12 dollars, 50 cents).

        Both parts carry the sign, matching how the holdings file stores them.
        """
        scale = 10 ** currency_exponent(currency.upper())
        return cls(minor=major * scale + minor, currency=currency)

    @classmethod
    def from_decimal(cls, amount: Decimal, currency: str) -> "Money":
        """Build from a decimal amount, rounding half-even to minor units."""
        currency = currency.upper()
        scaled = amount.scaleb(currency_exponent(currency))
        minor = int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_EVEN))
        return cls(minor=minor, currency=currency)

    @classmethod
    def parse(cls, text: str, currency: str) -> "Money":
        """Parse a decimal string such as ``"12.50"``.

        Raises:
            ValueError: If the text is not a finite decimal number
        """
        try:
            amount = Decimal(text.strip())
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {text!r}")
        if not amount.is_finite():
            raise ValueError(f"Invalid amount: {text!r}")
        return cls.from_decimal(amount, currency)

    @classmethod
    def from_float(cls, value: float, currency: str) -> "Money":
        """Convert a provider float price, going through its shortest repr."""
        return cls.from_decimal(Decimal(str(value)), currency)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(minor=self.minor + other.minor, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(minor=self.minor - other.minor, currency=self.currency)

    def __mul__(self, factor: int) -> "Money":
        if isinstance(factor, bool) or not isinstance(factor, int):
            return NotImplemented
        return Money(minor=self.minor * factor, currency=self.currency)

    __rmul__ = __mul__

    def __neg__(self) -> "Money":
        return Money(minor=-self.minor, currency=self.currency)

    @property
    def is_negative(self) -> bool:
        return self.minor < 0

    @property
    def exponent(self) -> int:
        return currency_exponent(self.currency)

    def to_decimal(self) -> Decimal:
        return Decimal(self.minor).scaleb(-self.exponent)

    def major_minor(self) -> tuple[int, int]:
        """Split into signed (major, minor) parts."""
        scale = 10 ** self.exponent
        major, minor = divmod(abs(self.minor), scale)
        sign = -1 if self.minor < 0 else 1
        return sign * major, sign * minor

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def format(self, signed: bool = False, thousands_separator: str = ",") -> str:
        """Format for display, e.g. ``$1,234.56`` or ``−$2.00``.

        Args:
            signed: Prefix non-negative amounts with ``+``
            thousands_separator: Digit group separator for the major part
        """
        exponent = self.exponent
        if self.minor < 0:
            sign = MINUS_SIGN
        elif signed:
            sign = "+"
        else:
            sign = ""

        major, frac = divmod(abs(self.minor), 10 ** exponent)
        body = f"{major:,}".replace(",", thousands_separator)
        if exponent:
            body = f"{body}.{frac:0{exponent}d}"
        return f"{sign}{currency_symbol(self.currency)}{body}"

    def __str__(self) -> str:
        return self.format()
