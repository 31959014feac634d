"""Refresh loop for repeatedly rendering a portfolio ("watch" mode)."""

from __future__ import annotations

import logging
import signal
import sys
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.date import DateTrigger

from folio.config import MIN_REFRESH_DELAY, get_settings
from folio.core.errors import ProviderConfigurationError, ProviderFetchError
from folio.core.portfolio.models import Portfolio
from folio.data.market.provider import QuoteProvider
from .formatting import FormatContext
from .render import RenderResult, render_once

logger = logging.getLogger(__name__)

JOB_ID = "refresh_cycle"

RenderCallback = Callable[[RenderResult], None]
ErrorCallback = Callable[[ProviderFetchError], None]


class LoopState(str, Enum):
    """Refresh loop states."""

    IDLE = "idle"
    FETCHING = "fetching"
    RENDERING = "rendering"
    SLEEPING = "sleeping"
    TERMINATED = "terminated"


class RefreshLoop:
    """Renders a portfolio, sleeps, and renders again until stopped.

    Each cycle is a fresh render pass with its own quote cache. The next
    cycle is scheduled ``delay_seconds`` after the previous one finished, so
    a slow provider never causes overlapping passes. A fetch failure either
    gets reported and retried next cycle (``tolerate_errors=True``) or ends
    the loop and is re-raised from ``run()``. Provider configuration errors
    and failing render callbacks always end the loop.
    """

    def __init__(
        self,
        portfolio: Portfolio,
        provider: QuoteProvider,
        on_render: RenderCallback,
        on_error: Optional[ErrorCallback] = None,
        delay_seconds: Optional[int] = None,
        tolerate_errors: Optional[bool] = None,
        ctx: Optional[FormatContext] = None,
    ):
        """Initialize the loop.

        Args:
            portfolio: Portfolio to render every cycle
            provider: Quote source
            on_render: Called with each successful RenderResult
            on_error: Called with each fetch error
            delay_seconds: Seconds to sleep between cycles (defaults to settings)
            tolerate_errors: Keep going after a fetch error (defaults to settings)
            ctx: Number formatting options

        Raises:
            ValueError: If the delay is below MIN_REFRESH_DELAY
        """
        settings = get_settings()
        self.delay = delay_seconds if delay_seconds is not None else settings.refresh_delay_seconds
        if self.delay < MIN_REFRESH_DELAY:
            raise ValueError(
                f"Refresh delay must be at least {MIN_REFRESH_DELAY}s, got {self.delay}"
            )
        self.portfolio = portfolio
        self.provider = provider
        self.on_render = on_render
        self.on_error = on_error
        self.tolerate_errors = (
            settings.tolerate_fetch_errors if tolerate_errors is None else tolerate_errors
        )
        self.ctx = ctx or FormatContext.from_settings(settings)
        self.scheduler = BlockingScheduler()
        self.state = LoopState.IDLE
        self.cycle_count = 0
        self.error: Optional[Exception] = None
        self._shutdown_requested = False

    def _run_cycle(self) -> None:
        """Execute one fetch-and-render cycle, then schedule the next."""
        if self._shutdown_requested:
            return

        self.cycle_count += 1
        logger.info(f"[Cycle {self.cycle_count}] Starting")
        self.state = LoopState.FETCHING

        try:
            result = render_once(self.portfolio, self.provider, self.ctx)
        except ProviderFetchError as e:
            logger.error(f"[Cycle {self.cycle_count}] {e}")
            if self.on_error is not None:
                self.on_error(e)
            if not self.tolerate_errors:
                self._fail(e)
                return
        except ProviderConfigurationError as e:
            # Never tolerated: retrying cannot fix configuration
            logger.error(f"[Cycle {self.cycle_count}] {e}")
            self._fail(e)
            return
        except Exception as e:
            logger.exception(f"[Cycle {self.cycle_count}] Unexpected error")
            self._fail(e)
            return
        else:
            self.state = LoopState.RENDERING
            try:
                self.on_render(result)
            except Exception as e:
                logger.exception(f"[Cycle {self.cycle_count}] Render callback failed")
                self._fail(e)
                return
            logger.info(f"[Cycle {self.cycle_count}] Rendered {len(result.rows)} row(s)")

        self._schedule_next()

    def _fail(self, error: Exception) -> None:
        """Record a fatal error and end the loop; ``run()`` re-raises it."""
        self.error = error
        self.stop()

    def _schedule_next(self) -> None:
        if self._shutdown_requested:
            return
        self.state = LoopState.SLEEPING
        run_date = datetime.now(timezone.utc) + timedelta(seconds=self.delay)
        self.scheduler.add_job(
            self._run_cycle,
            trigger=DateTrigger(run_date=run_date),
            id=JOB_ID,
            name="Portfolio Refresh",
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.debug(f"Next refresh at {run_date.isoformat()}")

    def _handle_signal(self, signum, frame) -> None:
        """Handle shutdown signals gracefully."""
        if self._shutdown_requested:
            # Force exit on second signal
            logger.warning("Received second shutdown signal, forcing exit...")
            sys.exit(1)

        logger.info("Received shutdown signal, stopping refresh loop...")
        self.stop()

    def run(self, install_signal_handlers: bool = True) -> None:
        """Run until interrupted (blocking).

        Signal handlers installed here are restored to their previous values
        when the loop ends.

        Raises:
            ProviderFetchError: If a fetch failed and errors are not tolerated
            ProviderConfigurationError: If the provider is misconfigured
        """
        previous_handlers = {}
        if install_signal_handlers:
            for signum in (signal.SIGINT, signal.SIGTERM):
                previous_handlers[signum] = signal.signal(signum, self._handle_signal)

        logger.info(f"Starting refresh loop with {self.delay}s delay")

        try:
            # First cycle runs immediately
            self._run_cycle()
            if not self._shutdown_requested:
                self.scheduler.start()
        except KeyboardInterrupt:
            self.stop()
        finally:
            self.state = LoopState.TERMINATED
            for signum, handler in previous_handlers.items():
                if handler is not None:
                    signal.signal(signum, handler)
            logger.info(f"Refresh loop stopped after {self.cycle_count} cycle(s)")

        if self.error is not None:
            raise self.error

    def stop(self) -> None:
        """Stop the loop; the current sleep ends immediately."""
        self._shutdown_requested = True
        self.state = LoopState.TERMINATED
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler shutdown complete")


def run_refresh_loop(
    portfolio: Portfolio,
    provider: QuoteProvider,
    delay: Optional[int],
    on_render: RenderCallback,
    on_error: Optional[ErrorCallback] = None,
    tolerate_errors: Optional[bool] = None,
    ctx: Optional[FormatContext] = None,
) -> None:
    """Start the refresh loop (convenience function).

    Args:
        portfolio: Portfolio to render
        provider: Quote source
        delay: Seconds between cycles
        on_render: Called with each successful render
        on_error: Called with each fetch error
        tolerate_errors: Keep going after fetch errors
        ctx: Number formatting options
    """
    loop = RefreshLoop(
        portfolio,
        provider,
        on_render=on_render,
        on_error=on_error,
        delay_seconds=delay,
        tolerate_errors=tolerate_errors,
        ctx=ctx,
    )
    loop.run()
