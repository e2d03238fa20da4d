"""
Bounded-timeout GET helper shared by the collectors and relay sources.

Every call gets its own total timeout.  Leaving the ``async with`` block,
whether normally or through cancellation, returns the connection to the
pool, so a timed-out call never leaks a socket.
"""

import asyncio

import aiohttp

from .errors import NetworkFailure, NetworkTimeout, UpstreamHTTPError

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Cache-Control": "no-cache",
}

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


async def fetch_text(session: aiohttp.ClientSession, url: str, timeout: float,
                     headers: dict | None = None) -> str:
    """GET *url* and return the body as text.

    Raises NetworkTimeout, NetworkFailure or UpstreamHTTPError.
    """
    merged = dict(DEFAULT_HEADERS)
    if headers:
        merged.update(headers)
    try:
        async with session.get(
            url, headers=merged, timeout=aiohttp.ClientTimeout(total=timeout)
        ) as resp:
            if not 200 <= resp.status < 300:
                raise UpstreamHTTPError(url, resp.status)
            return await resp.text(errors="replace")
    except asyncio.TimeoutError as e:
        raise NetworkTimeout(url, timeout) from e
    except aiohttp.ClientError as e:
        raise NetworkFailure(url, str(e) or type(e).__name__) from e
