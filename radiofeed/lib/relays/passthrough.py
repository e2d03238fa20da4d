"""Relays that return the proxied body verbatim (corsproxy.io, cors-anywhere)."""

from ..errors import MalformedPayload
from ..fetch import fetch_text
from .base import TemplateRelay


class PassthroughRelay(TemplateRelay):

    async def fetch(self, target: str) -> str:
        url = self.url_for(target)
        body = await fetch_text(
            self._session, url, self.timeout,
            headers={"X-Requested-With": "XMLHttpRequest"},
        )
        if not body.strip():
            raise MalformedPayload(url, "empty body")
        return body
