"""
StatusCollector: DJ, program and server figures from the SHOUTcast status page.

The page is reached through an ordered ladder of CORS relays ending in a
direct fetch.  When every rung fails the collector still answers, with an
offline placeholder report that lists what was tried.
"""

import logging

import aiohttp

from ..lib.config import cfg
from ..lib.relays import RelaySource, create_relay_ladder
from ..models import (
    CONNECTION_ERROR_LABEL,
    UNAVAILABLE_LABEL,
    FetchAttempt,
    StationReport,
    StatusInfo,
)
from .extraction import SERVER_RULES, STATUS_RULES, extract

log = logging.getLogger(__name__)

DEFAULT_STATION_NAME = "Radio Habblive"
DEFAULT_GENRE = "Variados"
DEBUG_PREVIEW_CHARS = 200


def extract_status(page: str) -> StatusInfo:
    values = extract(page, STATUS_RULES)
    return StatusInfo(dj=values["dj"], program=values["program"])


def parse_station_report(page: str, *, station_name: str = DEFAULT_STATION_NAME,
                         genre: str = DEFAULT_GENRE, stream_url: str = "",
                         debug: dict | None = None) -> StationReport:
    """Build the full report from a status page.  Never raises."""
    values = extract(page, SERVER_RULES)
    return StationReport(
        radio_title=values["dj"] or station_name,
        genre=values["program"] or genre,
        stream_url=stream_url,
        debug=debug or {},
        **values,
    )


class StatusCollector:

    def __init__(self, session: aiohttp.ClientSession, status_url: str | None = None,
                 ladder: list[RelaySource] | None = None):
        self._session = session
        self.status_url = status_url or cfg("station", "status_url", default="")
        self.ladder = ladder if ladder is not None else create_relay_ladder(session)
        self.station_name = cfg("station", "name", default=DEFAULT_STATION_NAME)
        self.genre = cfg("station", "genre", default=DEFAULT_GENRE)
        self.stream_url = cfg("station", "stream_url", default="")

    async def fetch_status(self) -> StatusInfo:
        report = await self.fetch_report()
        return report.info

    async def fetch_report(self) -> StationReport:
        try:
            page, attempts = await self._walk_ladder()
            if page is None:
                log.error("All %d status sources failed", len(attempts))
                return self.offline_report(attempts)

            used = attempts[-1].source
            return parse_station_report(
                page,
                station_name=self.station_name,
                genre=self.genre,
                stream_url=self.stream_url,
                debug={
                    "proxyUsed": used,
                    "htmlLength": len(page),
                    "extractedFromHtml": page[:DEBUG_PREVIEW_CHARS] + "...",
                    "attempts": [a.to_dict() for a in attempts],
                },
            )
        except Exception as e:
            log.exception("Status collection failed")
            return self._placeholder(CONNECTION_ERROR_LABEL, {"error": str(e)}, bitrate="0 kbps",
                                     max_listeners=0)

    async def _walk_ladder(self) -> tuple[str | None, list[FetchAttempt]]:
        """Try each source in order; stop at the first usable page."""
        attempts: list[FetchAttempt] = []
        for source in self.ladder:
            url = source.url_for(self.status_url)
            try:
                page = await source.fetch(self.status_url)
            except Exception as e:
                log.warning("Source %s failed: %s", source.name, e)
                attempts.append(FetchAttempt(source.name, url, type(e).__name__))
                continue
            attempts.append(FetchAttempt(source.name, url))
            log.debug("Status page via %s (%d bytes)", source.name, len(page))
            return page, attempts
        return None, attempts

    def offline_report(self, attempts: list[FetchAttempt]) -> StationReport:
        return self._placeholder(UNAVAILABLE_LABEL, {
            "error": "All connection methods failed",
            "proxyTried": [a.to_dict() for a in attempts],
        })

    def _placeholder(self, song: str, debug: dict, **overrides) -> StationReport:
        return StationReport(
            server_status="offline",
            radio_title=self.station_name,
            current_song=song,
            genre=self.genre,
            stream_url=self.stream_url,
            debug=debug,
            **overrides,
        )
