"""Free-running periodic tick scheduler."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TickScheduler:
    """Fires *callback* every *interval* seconds on the running event loop.

    Deadlines are absolute (``loop.time()`` based), so the cadence is never
    restarted by anything other than :meth:`start`. Slots missed because a
    callback overran are skipped rather than replayed in a burst.

    :meth:`stop` cancels the underlying task. A stop issued from inside the
    callback takes effect before the next deadline, so no further tick fires.
    If the callback raises, the loop ends and *on_error* receives the
    exception.
    """

    def __init__(
        self,
        callback: Callable[[], object],
        interval: float,
        on_error: Callable[[BaseException], object] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive.")
        self._callback = callback
        self._on_error = on_error
        self.interval = interval
        self.ticks = 0
        self._task: asyncio.Task | None = None
        self._last_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. Must be called with an event loop running."""
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run())
        self._last_task = self._task
        logger.debug("Tick scheduler started (interval=%.3fs).", self.interval)

    def stop(self) -> None:
        """Cancel the tick loop. Safe to call when already stopped."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Tick scheduler stopped after %d ticks.", self.ticks)

    async def wait_closed(self) -> None:
        """Wait until the most recent tick loop has fully exited."""
        if self._last_task is not None:
            await asyncio.gather(self._last_task, return_exceptions=True)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.interval
        try:
            while True:
                await asyncio.sleep(max(0.0, deadline - loop.time()))
                self.ticks += 1
                self._callback()
                deadline += self.interval
                now = loop.time()
                if deadline < now:
                    missed = math.ceil((now - deadline) / self.interval)
                    deadline += missed * self.interval
                    logger.warning("Tick overran; skipped %d slot(s).", missed)
        except asyncio.CancelledError:
            logger.debug("Tick loop cancelled.")
        except Exception as exc:
            logger.exception("Tick loop error; scheduler stopped.")
            if self._task is asyncio.current_task():
                self._task = None
            if self._on_error is not None:
                self._on_error(exc)
