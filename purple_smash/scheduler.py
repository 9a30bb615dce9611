"""
Periodic work on the session's event loop.

Fade sweeps, trail sweeps and auto-play all run as asyncio tasks on the same
loop that delivers input events, so they never run at the same time as an
event handler and nothing needs a lock.

Usage:
    scheduler = FadeScheduler(store, config, clock=time.monotonic)
    scheduler.start()          # needs a running event loop
    ...
    await scheduler.stop()     # no tick is delivered after this returns
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from .constants import FADE_TICK_INTERVAL

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Calls `callback` every `interval` seconds until stopped.

    Errors raised by the callback are logged and the task keeps going: one bad
    tick must not end the session.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "periodic",
        fire_immediately: bool = False,
    ):
        self.interval = interval
        self.name = name
        self._callback = callback
        self._fire_immediately = fire_immediately
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start ticking. Must be called from inside the running event loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        logger.debug(f"{self.name}: started (every {self.interval}s)")

    async def stop(self) -> None:
        """Stop ticking and wait for the task to finish."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.debug(f"{self.name}: stopped")

    async def _run(self) -> None:
        try:
            if self._fire_immediately:
                self._fire()
            while self._running:
                await asyncio.sleep(self.interval)
                if not self._running:
                    break
                self._fire()
        except asyncio.CancelledError:
            pass

    def _fire(self) -> None:
        try:
            self._callback()
        except Exception as e:
            logger.error(f"{self.name}: tick failed: {e}")


class FadeScheduler(PeriodicTask):
    """Ages the store's figures once a second while fading is enabled.

    The config is read on every tick, so toggling fade_enabled or changing
    fade_after takes effect without a restart.
    """

    def __init__(self, store, config, clock: Callable[[], float] = time.monotonic,
                 interval: float = FADE_TICK_INTERVAL):
        super().__init__(interval, self.tick, name="FadeScheduler")
        self._store = store
        self._config = config
        self._clock = clock

    def tick(self) -> None:
        if not self._config.fade_enabled:
            return
        self._store.age_step(self._clock(), self._config.fade_after)
