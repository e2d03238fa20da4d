"""
Pluggable sources for reaching the upstream status page.

The status collector walks an ordered ladder of sources and stops at the
first one that returns usable HTML.  The factory ``create_relay_ladder``
reads the ``relays`` config list and always appends a direct fetch last.

Supported relay kinds:
  - ``envelope``     – relay answers JSON with the body under a named field
                       (``"envelope": "contents"`` in config)
  - ``passthrough``  – relay answers the proxied body verbatim (no envelope key)
  - ``direct``       – plain GET of the upstream page (implicit, always last)
"""

import logging

import aiohttp

from ..config import cfg
from .base import RelaySource, TemplateRelay
from .direct import DirectSource
from .envelope import EnvelopeRelay
from .passthrough import PassthroughRelay

logger = logging.getLogger(__name__)

__all__ = [
    "RelaySource",
    "TemplateRelay",
    "DirectSource",
    "EnvelopeRelay",
    "PassthroughRelay",
    "create_relay_ladder",
]


def create_relay_ladder(session: aiohttp.ClientSession, relays: list | None = None,
                        timeout: float | None = None) -> list[RelaySource]:
    """Build the ordered list of sources, relays first, direct last.

    Each entry of *relays* (default: config ``relays``) is a dict:
      name      – label used in logs and debug output
      url       – template containing ``{url}`` or ``{raw}``
      envelope  – JSON field holding the body; omit for passthrough relays
    """
    if relays is None:
        relays = cfg("relays", default=[])
    if timeout is None:
        timeout = float(cfg("timeouts", "status", default=8))

    ladder: list[RelaySource] = []
    for i, entry in enumerate(relays):
        template = entry.get("url")
        if not template:
            logger.warning("Relay #%d has no url, skipping", i)
            continue
        name = entry.get("name") or f"relay-{i}"
        envelope = entry.get("envelope")
        if envelope:
            ladder.append(EnvelopeRelay(session, name, template, timeout, fields=envelope))
        else:
            ladder.append(PassthroughRelay(session, name, template, timeout))

    ladder.append(DirectSource(session, timeout))
    logger.info("Relay ladder: %s", " -> ".join(s.name for s in ladder))
    return ladder
