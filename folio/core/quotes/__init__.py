"""Quote aggregation, formatting and rendering."""

from .cache import QuoteCache, build_quote_cache
from .formatting import COLUMNS, FormatContext, format_row
from .refresh import LoopState, RefreshLoop, run_refresh_loop
from .render import RenderResult, build_table, render_once

__all__ = [
    "QuoteCache",
    "build_quote_cache",
    "COLUMNS",
    "FormatContext",
    "format_row",
    "LoopState",
    "RefreshLoop",
    "run_refresh_loop",
    "RenderResult",
    "build_table",
    "render_once",
]
