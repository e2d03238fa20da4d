"""
PollingController — fixed-interval refresh of the merged display state.

Each tick fans out to both collectors at once and replaces the display state
wholesale when both have answered.  Ticks are fire-and-forget: a slow tick may
land after a faster later one, and the latest write wins.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from .lib.config import cfg
from .models import DisplayState, NowInfo, StatusInfo, utc_now_iso

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 10


class PollingController:

    def __init__(self,
                 fetch_status: Callable[[], Awaitable[StatusInfo]],
                 fetch_now: Callable[[], Awaitable[NowInfo]],
                 interval: float | None = None,
                 playback=None,
                 on_update: Callable[[DisplayState], Awaitable[None]] | None = None):
        self._fetch_status = fetch_status
        self._fetch_now = fetch_now
        self.interval = interval if interval is not None else float(
            cfg("poll", "interval", default=DEFAULT_INTERVAL))
        self.playback = playback
        self.on_update = on_update
        self.display = DisplayState()
        self.ticks = 0
        self._timer_task: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def start(self):
        """Fire one tick now, then one every *interval* seconds."""
        if self.running:
            return
        log.info("Polling every %gs", self.interval)
        self._timer_task = asyncio.create_task(self._timer_loop())

    async def stop(self):
        """Cancel the timer and in-flight ticks, release the stream handle."""
        if self._timer_task:
            self._timer_task.cancel()
            try:
                await self._timer_task
            except asyncio.CancelledError:
                pass
            self._timer_task = None

        pending = list(self._in_flight)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._in_flight.clear()

        if self.playback is not None:
            await self.playback.pause()
        log.info("Polling stopped after %d ticks", self.ticks)

    async def _timer_loop(self):
        while True:
            task = asyncio.create_task(self.tick())
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            await asyncio.sleep(self.interval)

    async def tick(self) -> DisplayState:
        """Fetch both sources concurrently and merge them into the display."""
        status, now = await asyncio.gather(self._fetch_status(), self._fetch_now())
        self.display = DisplayState(status=status, now=now, updated_at=utc_now_iso())
        self.ticks += 1
        log.debug("Tick %d: dj=%s listeners=%d song=%s",
                  self.ticks, status.dj, now.listeners, now.song)
        if self.on_update is not None:
            try:
                await self.on_update(self.display)
            except Exception as e:
                log.error("Display update callback failed: %s", e)
        return self.display
