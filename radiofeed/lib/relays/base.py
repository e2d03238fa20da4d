"""
Abstract base class for status-page sources.

A source knows how to reach the upstream page by some path (a public CORS
relay, or directly) and hands back the raw upstream HTML.  Any failure is
raised as a FetchError subclass so the ladder can move on.
"""

from abc import ABC, abstractmethod
from urllib.parse import quote

import aiohttp


class RelaySource(ABC):
    """Interface every rung of the relay ladder implements."""

    name: str = ""

    def __init__(self, session: aiohttp.ClientSession, timeout: float = 8):
        self._session = session
        self.timeout = timeout

    @abstractmethod
    def url_for(self, target: str) -> str: ...

    @abstractmethod
    async def fetch(self, target: str) -> str:
        """Return the raw upstream body for *target*."""

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


class TemplateRelay(RelaySource):
    """A relay whose URL is a template around the target.

    ``{url}`` is replaced with the URL-encoded target, ``{raw}`` with the
    target as-is (cors-anywhere style path relays).
    """

    def __init__(self, session: aiohttp.ClientSession, name: str, template: str,
                 timeout: float = 8):
        super().__init__(session, timeout)
        self.name = name
        self.template = template

    def url_for(self, target: str) -> str:
        return self.template.replace("{url}", quote(target, safe="")).replace("{raw}", target)
