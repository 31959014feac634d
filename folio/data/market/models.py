"""Market data Pydantic models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from folio.core.money import Money


class QuoteRange(BaseModel):
    """Day range for a symbol; every field may be missing."""

    model_config = ConfigDict(frozen=True)

    open: Optional[Money] = None
    low: Optional[Money] = None
    high: Optional[Money] = None
    close: Optional[Money] = None
    volume: Optional[int] = None


class Quote(BaseModel):
    """Real-time quote for a symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    price: Money
    change: Optional[Money] = None
    change_percent: Optional[float] = None
    range: Optional[QuoteRange] = None
    fetched_at: datetime
