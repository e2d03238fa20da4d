"""
PlaybackController — play/pause/toggle over a single live-stream handle.

States: idle → loading → playing | errored, and back to idle on pause.
Pausing severs the connection instead of pausing a buffer: this is a live
stream, so the next play must reconnect at the live edge.  Every play points
the handle at the stream URL with a fresh ``t=<ms>`` query parameter so a
stale buffered connection is never reused.

Handle contract:

    class MyHandle(MediaHandle):
        async def open(self, url) -> None: ...   # raise PlaybackError on failure
        async def close(self) -> None: ...       # idempotent

    handle.on_drop(reason) is called by the handle if the stream dies after
    a successful open.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable

from ..lib.config import cfg
from ..models import PlaybackState

log = logging.getLogger(__name__)

CONNECT_ERROR_MESSAGE = "Erro ao conectar com a rádio"
DROP_ERROR_MESSAGE = "Erro na conexão"


def cache_busted(url: str, now: float | None = None) -> str:
    stamp = int((time.time() if now is None else now) * 1000)
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}t={stamp}"


class MediaHandle(ABC):
    """Interface for the thing that actually renders the stream."""

    on_drop: Callable[[str], None] | None = None

    @abstractmethod
    async def open(self, url: str) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...


class PlaybackController:

    def __init__(self, handle: MediaHandle, stream_url: str | None = None):
        self._handle = handle
        self._handle.on_drop = self._on_drop
        self.stream_url = stream_url or cfg("station", "stream_url", default="")
        self.state = PlaybackState.IDLE
        self.error: str | None = None
        self.current_url: str | None = None
        self._connect_task: asyncio.Task | None = None

    async def play(self) -> PlaybackState:
        if self.state in (PlaybackState.LOADING, PlaybackState.PLAYING):
            log.debug("play() ignored while %s", self.state.value)
            return self.state

        self.state = PlaybackState.LOADING
        self.error = None
        self.current_url = cache_busted(self.stream_url)
        log.info("Connecting to %s", self.current_url)

        task = asyncio.create_task(self._handle.open(self.current_url))
        self._connect_task = task
        try:
            await asyncio.wait([task])
        except asyncio.CancelledError:
            task.cancel()
            self._connect_task = None
            self.state = PlaybackState.IDLE
            raise

        if self._connect_task is not task or task.cancelled():
            # pause() took over while we were connecting
            return self.state
        self._connect_task = None

        exc = task.exception()
        if exc is not None:
            log.error("Stream connection failed: %s", exc)
            await self._handle.close()
            self.state = PlaybackState.ERRORED
            self.error = CONNECT_ERROR_MESSAGE
        else:
            log.info("Playing")
            self.state = PlaybackState.PLAYING
        return self.state

    async def pause(self) -> PlaybackState:
        self.state = PlaybackState.IDLE
        self.error = None
        task, self._connect_task = self._connect_task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait([task])
        await self._handle.close()
        log.info("Stopped, stream released")
        return self.state

    async def toggle(self) -> PlaybackState:
        if self.state in (PlaybackState.PLAYING, PlaybackState.LOADING):
            return await self.pause()
        return await self.play()

    def _on_drop(self, reason: str):
        if self.state is not PlaybackState.PLAYING:
            return
        log.warning("Stream dropped: %s", reason)
        self.state = PlaybackState.ERRORED
        self.error = DROP_ERROR_MESSAGE

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "error": self.error,
            "url": self.current_url,
        }
