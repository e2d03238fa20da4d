"""Systemd watchdog heartbeat for the radiofeed service.

Sends WATCHDOG=1 to the systemd notify socket at regular intervals, with a
STATUS= line describing the last poll.  Silently no-ops when NOTIFY_SOCKET
is unset (dev mode, tests).

Usage:
    from radiofeed.lib.watchdog import watchdog_loop
    asyncio.create_task(watchdog_loop(status=lambda: "12 listeners"))
"""

import asyncio
import logging
import os
import socket

logger = logging.getLogger(__name__)


def sd_notify(msg: str) -> bool:
    """Send a notification message to the systemd notify socket."""
    addr = os.environ.get("NOTIFY_SOCKET")
    if not addr:
        return False
    if addr[0] == "@":
        addr = "\0" + addr[1:]
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
    try:
        sock.sendto(msg.encode(), addr)
    finally:
        sock.close()
    return True


async def watchdog_loop(interval: int = 20, status=None):
    """Send WATCHDOG=1 every *interval* seconds.  Call as asyncio.create_task().

    Sends READY=1 first.  *status* is an optional zero-arg callable whose
    result is reported as the unit's STATUS= text.
    """
    sd_notify("READY=1")
    logger.info("Watchdog started (interval=%ds)", interval)
    while True:
        msg = "WATCHDOG=1"
        if status is not None:
            msg += f"\nSTATUS={status()}"
        sd_notify(msg)
        await asyncio.sleep(interval)
