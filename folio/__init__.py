"""folio - track holdings and watch live quotes from the terminal."""

from folio.config import PRODUCT_VERSION

__version__ = PRODUCT_VERSION
