"""
Shared fixtures: a pinned config, a client session, and throwaway aiohttp
servers standing in for the SHOUTcast server and the CORS relays.
"""

import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from radiofeed.lib import config as config_mod
from radiofeed.lib.errors import PlaybackError
from radiofeed.player.playback import MediaHandle

TEST_CONFIG = {
    "station": {
        "name": "Radio Teste",
        "genre": "Variados",
        "status_url": "http://upstream.invalid:8342/",
        "now_url": "http://upstream.invalid:8342/7.html",
        "stream_url": "http://upstream.invalid:8342/;",
    },
    "relays": [],
    "timeouts": {"now": 1, "status": 1, "connect": 1},
    "poll": {"interval": 10},
    "service": {"port": 8780},
    "player": {"audio_output": "null", "ipc_socket": "/tmp/radiofeed-test.sock"},
}

SHOUTCAST_PAGE = """<html><body><table>
<tr><td>Server Status: </td><td><b>Server is currently up and public.</b></td></tr>
<tr><td>Stream Status: </td><td><b>Stream is up at 128 kbps with <B>12 of 500 listeners</B></b></td></tr>
<tr><td>Listener Peak: </td><td><b>87</b></td></tr>
<tr><td>Average Listen Time: </td><td><b>12m&nbsp;30s</b></td></tr>
<tr><td>Stream Title:</td><td>DJ Mike</td></tr>
<tr><td>Stream Genre:</td><td>Pop Hits</td></tr>
<tr><td>Current Song: </td><td><b>Artist - Song Title</b></td></tr>
</table></body></html>"""


@pytest.fixture(autouse=True)
def pinned_config(monkeypatch):
    monkeypatch.setattr(config_mod, "_config", TEST_CONFIG)
    return TEST_CONFIG


@pytest.fixture
async def session():
    async with aiohttp.ClientSession() as s:
        yield s


@pytest.fixture
async def serve():
    """Start an aiohttp server from a {path: handler} dict."""
    servers = []

    async def _serve(routes: dict) -> TestServer:
        app = web.Application()
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return server

    yield _serve
    for server in servers:
        await server.close()


def reply(body: str = "", status: int = 200, content_type: str = "text/html"):
    async def handler(request):
        return web.Response(text=body, status=status, content_type=content_type)
    return handler


def reply_json(data, status: int = 200):
    async def handler(request):
        return web.json_response(data, status=status)
    return handler


def stall(seconds: float = 5):
    async def handler(request):
        await asyncio.sleep(seconds)
        return web.Response(text="too late")
    return handler


class Counter:
    """Wraps a handler and counts hits."""

    def __init__(self, handler):
        self.handler = handler
        self.hits = 0

    async def handle(self, request):
        self.hits += 1
        return await self.handler(request)


class FakeHandle(MediaHandle):
    """Media handle whose open() succeeds, fails or hangs on demand."""

    def __init__(self, mode: str = "ok"):
        self.mode = mode
        self.opened: list[str] = []
        self.closes = 0
        self.release = asyncio.Event()

    async def open(self, url: str) -> None:
        self.opened.append(url)
        if self.mode == "fail":
            raise PlaybackError("connection refused")
        if self.mode == "hang":
            await self.release.wait()

    async def close(self) -> None:
        self.closes += 1
