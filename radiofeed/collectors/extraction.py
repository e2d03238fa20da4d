"""
Tolerant field extraction from the SHOUTcast status page.

Each field is one row of a declarative table: a strict primary pattern, a
looser secondary pattern and a literal default.  Rules are applied
independently, so a miss on one field never blanks another.
"""

import html as htmllib
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from ..lib.errors import ExtractionMiss
from ..models import NO_INFO_LABEL

log = logging.getLogger(__name__)

# Optional colon on the label line, then any run of tags that does not cross a table row.
_LABEL_TAIL = r"[ \t]*:?[ \t]*(?:<(?!/?tr\b)[^>]*>\s*)*"
# Rest of the line up to the next tag, not starting on the colon or blanks.
_LINE_VALUE = r"([^<\r\n:\s][^<\r\n]*)"


def _strict_cell(label: str) -> re.Pattern:
    """``Label:</td><td>VALUE</td>``, optionally bolded."""
    return re.compile(
        label + r":\s*</td>\s*<td[^>]*>\s*(?:<b>\s*)?([^<]+?)\s*(?:</b>\s*)?</td>"
    )


def _loose_line(label: str) -> re.Pattern:
    return re.compile(label + _LABEL_TAIL + _LINE_VALUE, re.IGNORECASE)


def text(value: str) -> str:
    """Unescape entities; ``&nbsp;`` becomes a plain space."""
    return htmllib.unescape(value).replace("\xa0", " ").strip()


def kbps(value: str) -> str:
    return f"{int(value)} kbps"


def up_down(value: str) -> str:
    return "online" if value.lower() == "up" else "offline"


@dataclass(frozen=True)
class FieldRule:
    name: str
    primary: re.Pattern
    secondary: re.Pattern | None = None
    default: Any = None
    convert: Callable[[str], Any] = text

    def search(self, page: str):
        """Return the converted value of the first pattern that matches.

        Raises ExtractionMiss when neither pattern yields a non-empty value.
        """
        for pattern in (self.primary, self.secondary):
            if pattern is None:
                continue
            match = pattern.search(page)
            if not match:
                continue
            try:
                value = self.convert(match.group(1))
            except ValueError:
                continue
            if value not in ("", None):
                return value
        raise ExtractionMiss(self.name)


STATUS_RULES = (
    FieldRule("dj", _strict_cell("Stream Title"), _loose_line("Stream Title")),
    FieldRule("program", _strict_cell("Stream Genre"), _loose_line("Stream Genre")),
)

SERVER_RULES = (
    FieldRule("server_status",
              re.compile(r"Server is currently (up|down)"),
              re.compile(r"Stream is (up|down)", re.IGNORECASE),
              default="offline", convert=up_down),
    FieldRule("bitrate",
              re.compile(r"(\d+)\s*kbps"),
              re.compile(r"Bit\s?rate" + _LABEL_TAIL + r"(\d+)", re.IGNORECASE),
              default="128 kbps", convert=kbps),
    FieldRule("current_listeners",
              re.compile(r"(\d+) of \d+ listeners"),
              re.compile(r"Current Listeners" + _LABEL_TAIL + r"(\d+)", re.IGNORECASE),
              default=0, convert=int),
    FieldRule("max_listeners",
              re.compile(r"\d+ of (\d+) listeners"),
              re.compile(r"Max(?:imum)? Listeners" + _LABEL_TAIL + r"(\d+)", re.IGNORECASE),
              default=1000, convert=int),
    FieldRule("peak_listeners",
              re.compile(r"Listener Peak" + _LABEL_TAIL + r"(\d+)"),
              re.compile(r"Peak.*?(\d+)", re.IGNORECASE),
              default=0, convert=int),
    FieldRule("average_listen_time",
              re.compile(r"Average Listen Time.*?<b>([^<]+)<"),
              _loose_line("Average Listen Time"),
              default="0:00"),
    FieldRule("current_song",
              re.compile(r"Current Song.*?<b>([^<]+)<"),
              _loose_line("Current Song"),
              default=NO_INFO_LABEL),
) + STATUS_RULES


def extract(page: str, rules=STATUS_RULES) -> dict:
    """Apply every rule to *page*; misses fall back to the rule's default."""
    values = {}
    for rule in rules:
        try:
            values[rule.name] = rule.search(page)
        except ExtractionMiss as e:
            log.debug("Extraction miss: %s", e)
            values[rule.name] = rule.default
    return values
