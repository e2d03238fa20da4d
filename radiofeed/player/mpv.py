"""
MpvStream — live-stream handle backed by an mpv process.

mpv is started idle with a JSON IPC socket; the stream is loaded over IPC so
no event can be missed between launch and connect.  ``playback-restart``
means audio is flowing; ``end-file`` with an error, the process exiting, or
the connect timeout all mean failure.
"""

import asyncio
import json
import logging
import os

from ..lib.config import cfg
from ..lib.errors import PlaybackError
from .playback import MediaHandle

log = logging.getLogger(__name__)

IPC_CONNECT_ATTEMPTS = 50  # x 0.1 s


class MpvStream(MediaHandle):

    def __init__(self, audio_output: str | None = None, ipc_socket: str | None = None,
                 connect_timeout: float | None = None):
        self.audio_output = audio_output or cfg("player", "audio_output", default="pulse")
        self.ipc_socket = ipc_socket or cfg("player", "ipc_socket", default="/tmp/radiofeed-mpv.sock")
        self.connect_timeout = connect_timeout if connect_timeout is not None else float(
            cfg("timeouts", "connect", default=15))
        self.process: asyncio.subprocess.Process | None = None
        self._ipc_reader: asyncio.StreamReader | None = None
        self._ipc_writer: asyncio.StreamWriter | None = None
        self._events_task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    # ── MediaHandle ──

    async def open(self, url: str) -> None:
        async with self._lock:
            await self._teardown()
            try:
                await self._launch()
                await self._send({"command": ["loadfile", url, "replace"]})
                await asyncio.wait_for(self._wait_started(), self.connect_timeout)
            except asyncio.TimeoutError as e:
                await self._teardown()
                raise PlaybackError(f"no audio after {self.connect_timeout:g}s") from e
            except asyncio.CancelledError:
                await self._teardown()
                raise
            except OSError as e:
                await self._teardown()
                raise PlaybackError(f"mpv unavailable: {e}") from e
            except PlaybackError:
                await self._teardown()
                raise
            self._events_task = asyncio.create_task(self._watch_events())

    async def close(self) -> None:
        async with self._lock:
            await self._teardown()

    # ── mpv lifecycle ──

    async def _launch(self):
        try:
            os.unlink(self.ipc_socket)
        except FileNotFoundError:
            pass

        env = os.environ.copy()
        env.setdefault("XDG_RUNTIME_DIR", f"/run/user/{os.getuid()}")
        cmd = [
            "mpv", f"--ao={self.audio_output}",
            "--idle=yes", "--no-video", "--no-terminal",
            f"--input-ipc-server={self.ipc_socket}",
        ]
        self.process = await asyncio.create_subprocess_exec(
            *cmd, stdout=asyncio.subprocess.DEVNULL, stderr=asyncio.subprocess.DEVNULL, env=env)

        for _ in range(IPC_CONNECT_ATTEMPTS):
            await asyncio.sleep(0.1)
            if self.process.returncode is not None:
                raise PlaybackError("mpv exited immediately")
            if os.path.exists(self.ipc_socket):
                try:
                    self._ipc_reader, self._ipc_writer = \
                        await asyncio.open_unix_connection(self.ipc_socket)
                    log.debug("mpv IPC connected (pid %d)", self.process.pid)
                    return
                except (ConnectionRefusedError, FileNotFoundError):
                    continue
        raise PlaybackError("could not connect to mpv IPC")

    async def _send(self, cmd_obj):
        self._ipc_writer.write(json.dumps(cmd_obj).encode() + b"\n")
        await self._ipc_writer.drain()

    async def _next_event(self) -> dict | None:
        """Next IPC event, or None at EOF.  Command replies are skipped."""
        while True:
            line = await self._ipc_reader.readline()
            if not line:
                return None
            try:
                msg = json.loads(line)
            except json.JSONDecodeError:
                continue
            if "event" in msg:
                return msg

    async def _wait_started(self):
        while True:
            msg = await self._next_event()
            if msg is None:
                raise PlaybackError("mpv closed before playback started")
            event = msg["event"]
            if event == "playback-restart":
                return
            if event == "end-file" and msg.get("reason") == "error":
                raise PlaybackError(msg.get("file_error") or "stream error")

    async def _watch_events(self):
        """Background task — report the stream dying after a good start."""
        reason = "mpv closed"
        try:
            while True:
                msg = await self._next_event()
                if msg is None:
                    break
                if msg["event"] == "end-file":
                    reason = msg.get("file_error") or msg.get("reason") or "end of stream"
                    break
        except asyncio.CancelledError:
            return
        except Exception as e:
            log.debug("IPC reader ended: %s", e)
            reason = str(e)
        if self.on_drop is not None:
            self.on_drop(reason)

    async def _teardown(self):
        if self._events_task:
            self._events_task.cancel()
            try:
                await self._events_task
            except asyncio.CancelledError:
                pass
            self._events_task = None

        if self._ipc_writer:
            try:
                self._ipc_writer.close()
                await self._ipc_writer.wait_closed()
            except (ConnectionError, OSError) as e:
                log.debug("IPC close: %s", e)
        self._ipc_reader = None
        self._ipc_writer = None

        if self.process and self.process.returncode is None:
            self.process.terminate()
            try:
                await asyncio.wait_for(self.process.wait(), 2)
            except asyncio.TimeoutError:
                self.process.kill()
                await self.process.wait()
        self.process = None

        try:
            os.unlink(self.ipc_socket)
        except FileNotFoundError:
            pass
