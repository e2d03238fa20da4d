#!/usr/bin/env python3
"""
radiofeed service — live metadata for the station's player widget.

Polls the SHOUTcast server (status page through the relay ladder, plus the
7.html line), keeps the merged display state fresh, and plays the stream
locally through mpv on request.

Endpoints (all JSON, CORS, never cached):
    GET  /status         {dj, program}
    GET  /now            {listeners, song}
    GET  /status/server  full scraped report (serverStatus, streamStatus, ...)
    GET  /display        merged poll state + playback state
    POST /command        {"command": "play" | "pause" | "toggle"} or {"action": ...}
    GET  /health         service info

Config (config.json): see config/default.json.

Port: 8780
"""

import asyncio
import logging

from .collectors import NowCollector, StatusCollector
from .lib.config import cfg
from .lib.service_base import ServiceBase
from .player import MpvStream, PlaybackController
from .poller import PollingController

log = logging.getLogger(__name__)


class RadioFeedService(ServiceBase):
    id = "radiofeed"
    name = "Radio Feed"
    port = 8780
    action_map = {
        "play": "toggle",
        "go": "toggle",
        "stop": "pause",
        "pause": "pause",
    }

    def __init__(self, status_collector: StatusCollector | None = None,
                 now_collector: NowCollector | None = None,
                 playback: PlaybackController | None = None):
        super().__init__()
        self.port = int(cfg("service", "port", default=self.port))
        self.name = cfg("station", "name", default=self.name)
        self.status_collector = status_collector
        self.now_collector = now_collector
        self.playback = playback or PlaybackController(MpvStream())
        self.poller = PollingController(
            self._poll_status, self._poll_now, playback=self.playback)

    async def on_start(self):
        if self.status_collector is None:
            self.status_collector = StatusCollector(self._http_session)
        if self.now_collector is None:
            self.now_collector = NowCollector(self._http_session)
        self.poller.start()

    async def on_stop(self):
        await self.poller.stop()

    # Indirection so collectors built in on_start() are picked up.
    async def _poll_status(self):
        return await self.status_collector.fetch_status()

    async def _poll_now(self):
        return await self.now_collector.fetch_now()

    def add_routes(self, app):
        app.router.add_get("/status", self._handle_status)
        app.router.add_get("/now", self._handle_now)
        app.router.add_get("/status/server", self._handle_server_status)
        app.router.add_get("/display", self._handle_display)

    async def _handle_status(self, request):
        info = await self.status_collector.fetch_status()
        return self.json_response(info.to_dict())

    async def _handle_now(self, request):
        info = await self.now_collector.fetch_now()
        return self.json_response(info.to_dict())

    async def _handle_server_status(self, request):
        report = await self.status_collector.fetch_report()
        return self.json_response(report.to_dict())

    async def _handle_display(self, request):
        return self.json_response(self.display_snapshot())

    def display_snapshot(self) -> dict:
        data = self.poller.display.to_dict()
        data["playback"] = self.playback.to_dict()
        return data

    async def handle_command(self, cmd, data) -> dict:
        if cmd == "play":
            await self.playback.play()
        elif cmd == "pause":
            await self.playback.pause()
        elif cmd == "toggle":
            await self.playback.toggle()
        elif cmd == "refresh":
            await self.poller.tick()
        else:
            return {"status": "error", "message": f"Unknown: {cmd}"}
        return self.display_snapshot()

    async def handle_health(self) -> dict:
        return {
            "service": self.id,
            "name": self.name,
            "polling": self.poller.running,
            "ticks": self.poller.ticks,
            "last_update": self.poller.display.updated_at,
            "playback": self.playback.state.value,
        }

    def watchdog_status(self) -> str:
        now = self.poller.display.now
        return f"{now.listeners} listeners, {self.playback.state.value}"


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [RADIOFEED] %(message)s",
        datefmt="%H:%M:%S",
    )
    service = RadioFeedService()
    asyncio.run(service.run())


if __name__ == "__main__":
    main()
