"""
Collectors — fetch one upstream data source and normalize it.

A collector never raises to its caller.  Every failure (timeout, refused
connection, non-2xx, malformed payload, pattern miss) is absorbed and turned
into a default record of the same shape, so the poller and the HTTP surface
only ever see valid values.

Current collectors:
  now.py     — listeners + current song from the 7.html status line
  status.py  — DJ + program (and server figures) from the status page,
               reached through the relay ladder
"""

from .now import NowCollector, parse_now
from .status import StatusCollector, extract_status, parse_station_report

__all__ = [
    "NowCollector",
    "StatusCollector",
    "parse_now",
    "extract_status",
    "parse_station_report",
]
