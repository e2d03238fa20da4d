"""
NowCollector: listener count and current song from the SHOUTcast 7.html line.

The line is ``currentlisteners,peaklisteners,maxlisteners,reportedlisteners,
bitrate,serverstatus,songtitle`` and the song title may itself contain commas.
"""

import logging
import re

import aiohttp

from ..lib.config import cfg
from ..lib.errors import MalformedPayload
from ..lib.fetch import fetch_text
from ..models import NowInfo

log = logging.getLogger(__name__)

MIN_FIELDS = 7
SONG_FIELD = 6

_LEADING_INT = re.compile(r"\s*(\d+)")
# SHOUTcast serves the line inside <html>...<body>LINE</body></html>.
_HEAD = re.compile(r"^.*?<body\b[^>]*>", re.IGNORECASE | re.DOTALL)
_TAIL = re.compile(r"</body\b.*$", re.IGNORECASE | re.DOTALL)


def parse_listeners(value: str) -> int:
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def unwrap_body(text: str) -> str:
    """Drop the page wrapper around the line, leaving its payload untouched."""
    if not text:
        return ""
    return _TAIL.sub("", _HEAD.sub("", text, count=1), count=1)


def split_now_line(text: str) -> list[str]:
    """Split the status line into fields, raising MalformedPayload if short."""
    parts = unwrap_body(text).strip().split(",")
    if len(parts) < MIN_FIELDS:
        raise MalformedPayload("7.html", f"expected {MIN_FIELDS} fields, got {len(parts)}")
    return parts


def parse_now(text: str) -> NowInfo:
    """Parse a 7.html body.  Never raises; short lines give the default."""
    try:
        parts = split_now_line(text)
    except MalformedPayload as e:
        log.debug("Malformed now line: %s", e)
        return NowInfo()

    song = ",".join(parts[SONG_FIELD:]).strip()
    return NowInfo(listeners=parse_listeners(parts[0]), song=song or None)


class NowCollector:

    def __init__(self, session: aiohttp.ClientSession, url: str | None = None,
                 timeout: float | None = None):
        self._session = session
        self.url = url or cfg("station", "now_url", default="")
        self.timeout = timeout if timeout is not None else float(cfg("timeouts", "now", default=5))

    async def fetch_now(self) -> NowInfo:
        try:
            body = await fetch_text(self._session, self.url, self.timeout)
        except Exception as e:
            log.warning("Now fetch failed: %s", e)
            return NowInfo()
        return parse_now(body)
