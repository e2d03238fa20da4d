"""
ServiceBase — shared plumbing for radiofeed HTTP services.

Subclass contract:

    class MyService(ServiceBase):
        id   = "radiofeed"   # service ID
        name = "Radio Feed"  # display name
        port = 8780          # HTTP port
        action_map = {       # remote action → command name
            "play": "toggle",
            "go":   "toggle",
        }

        async def handle_command(self, cmd, data) -> dict:
            '''Your command logic.  Return a dict merged into the response.'''

Optional overrides:
    on_start()              — called after HTTP server is up (session ready)
    on_stop()               — called during shutdown
    handle_health()         — return dict for GET /health
    add_routes(app)         — add extra aiohttp routes

Every JSON response carries CORS headers and no-cache headers: the widget
polls these endpoints and must never see a cached snapshot.
"""

import asyncio
import logging
import signal

from aiohttp import web, ClientSession

from .fetch import NO_CACHE_HEADERS
from .watchdog import watchdog_loop

log = logging.getLogger(__name__)


class ServiceBase:
    # ── Subclass must set these ──
    id: str = ""
    name: str = ""
    port: int = 0
    action_map: dict = {}

    def __init__(self):
        self._http_session: ClientSession | None = None
        self._runner: web.AppRunner | None = None
        self._watchdog_task: asyncio.Task | None = None

    # ── HTTP server ──

    def build_app(self) -> web.Application:
        """Create the aiohttp app with the base routes plus subclass routes."""
        app = web.Application()
        app.router.add_get("/health", self._handle_health_route)
        app.router.add_post("/command", self._handle_command_route)
        app.router.add_options("/command", self._handle_cors)

        # Let subclass add extra routes
        self.add_routes(app)
        return app

    async def start(self):
        """Start listening, open the outbound session, run on_start()."""
        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, "0.0.0.0", self.port)
        await site.start()
        log.info("HTTP API on port %d", self.port)

        self._http_session = ClientSession()

        await self.on_start()

        self._watchdog_task = asyncio.create_task(watchdog_loop(status=self.watchdog_status))

    async def stop(self):
        """Shutdown hook — override on_stop() for cleanup."""
        if self._watchdog_task:
            self._watchdog_task.cancel()
            try:
                await self._watchdog_task
            except asyncio.CancelledError:
                pass
            self._watchdog_task = None
        await self.on_stop()
        if self._http_session:
            await self._http_session.close()
            self._http_session = None
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    async def run(self):
        """Convenience entry-point: start + wait for signal + stop."""
        await self.start()
        stop_event = asyncio.Event()
        loop = asyncio.get_event_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, stop_event.set)
        try:
            await stop_event.wait()
        finally:
            await self.stop()

    # ── Headers ──

    def _cors_headers(self):
        return {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
        }

    def _headers(self):
        return {**self._cors_headers(), **NO_CACHE_HEADERS}

    def json_response(self, data, status=200):
        return web.json_response(data, status=status, headers=self._headers())

    async def _handle_cors(self, request):
        return web.Response(headers=self._cors_headers())

    # ── Route handlers (delegate to subclass) ──

    async def _handle_health_route(self, request):
        result = await self.handle_health()
        return self.json_response(result)

    async def _handle_command_route(self, request):
        try:
            data = await request.json()

            # Raw action from a remote / keyboard
            action = data.get("action")
            if action:
                cmd = self.action_map.get(action)
                if not cmd:
                    return self.json_response(
                        {"status": "error", "message": f"Unmapped action: {action}"},
                        status=400,
                    )
            else:
                # Direct command from the widget
                cmd = data.get("command", "")

            result = await self.handle_command(cmd, data)
            resp = {"status": "ok", "command": cmd}
            if result:
                resp.update(result)
            return self.json_response(resp)

        except Exception as e:
            log.exception("Command error")
            return self.json_response(
                {"status": "error", "message": str(e)},
                status=500,
            )

    # ── Subclass hooks (override as needed) ──

    async def on_start(self):
        """Called after HTTP server is up."""

    async def on_stop(self):
        """Called during shutdown."""

    async def handle_health(self) -> dict:
        """Return status dict for GET /health."""
        return {"service": self.id, "name": self.name}

    def watchdog_status(self) -> str:
        return "running"

    def add_routes(self, app: web.Application):
        """Add extra aiohttp routes to the app."""

    async def handle_command(self, cmd: str, data: dict) -> dict:
        """Handle a command. Must be implemented by subclass."""
        raise NotImplementedError
