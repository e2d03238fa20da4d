"""
Records exchanged between the collectors, the poller and the HTTP surface.

Every record is frozen: a poll produces fresh values that replace the old
ones wholesale.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone

LOADING_LABEL = "Carregando..."
UNAVAILABLE_LABEL = "Stream temporariamente indisponível"
CONNECTION_ERROR_LABEL = "Erro de conexão"
NO_INFO_LABEL = "Sem informação"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class StatusInfo:
    dj: str | None = None
    program: str | None = None

    def to_dict(self) -> dict:
        return {"dj": self.dj, "program": self.program}


@dataclass(frozen=True)
class NowInfo:
    listeners: int = 0
    song: str | None = None

    def to_dict(self) -> dict:
        return {"listeners": self.listeners, "song": self.song}


@dataclass(frozen=True)
class FetchAttempt:
    """One rung of the relay ladder and how it went."""
    source: str
    url: str
    outcome: str = "ok"

    @property
    def ok(self) -> bool:
        return self.outcome == "ok"

    def to_dict(self) -> dict:
        return {"source": self.source, "url": self.url, "outcome": self.outcome}


@dataclass(frozen=True)
class StationReport:
    """Everything scraped from the status page, with literal defaults."""
    server_status: str = "offline"
    bitrate: str = "128 kbps"
    current_listeners: int = 0
    max_listeners: int = 1000
    peak_listeners: int = 0
    average_listen_time: str = "0:00"
    dj: str | None = None
    program: str | None = None
    radio_title: str = ""
    current_song: str = NO_INFO_LABEL
    genre: str = ""
    stream_url: str = ""
    last_updated: str = field(default_factory=utc_now_iso)
    debug: dict = field(default_factory=dict)

    @property
    def info(self) -> StatusInfo:
        return StatusInfo(dj=self.dj, program=self.program)

    def to_dict(self) -> dict:
        return {
            "serverStatus": self.server_status,
            "streamStatus": {
                "bitrate": self.bitrate,
                "currentListeners": self.current_listeners,
                "maxListeners": self.max_listeners,
            },
            "peakListeners": self.peak_listeners,
            "averageListenTime": self.average_listen_time,
            "radioTitle": self.radio_title,
            "currentSong": self.current_song,
            "genre": self.genre,
            "streamUrl": self.stream_url,
            "lastUpdated": self.last_updated,
            "dj": self.dj,
            "program": self.program,
            "debugInfo": self.debug,
        }


class PlaybackState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    ERRORED = "errored"


@dataclass(frozen=True)
class DisplayState:
    """Merged result of the latest poll tick, as the player widget shows it."""
    status: StatusInfo = field(default_factory=StatusInfo)
    now: NowInfo = field(default_factory=NowInfo)
    updated_at: str | None = None

    @property
    def loaded(self) -> bool:
        return self.updated_at is not None

    def to_dict(self) -> dict:
        # Before the first tick completes every label shows the loading text.
        placeholder = LOADING_LABEL if not self.loaded else None
        return {
            "dj": self.status.dj,
            "program": self.status.program,
            "listeners": self.now.listeners,
            "song": self.now.song,
            "updatedAt": self.updated_at,
            "labels": {
                "dj": self.status.dj or placeholder or "-",
                "program": self.status.program or placeholder or "-",
                "song": self.now.song or placeholder or NO_INFO_LABEL,
                "listeners": str(self.now.listeners),
            },
        }
