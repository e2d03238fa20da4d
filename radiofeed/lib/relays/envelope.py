"""Relays that wrap the proxied body in a JSON envelope (allorigins style)."""

import json

import aiohttp

from ..errors import MalformedPayload
from ..fetch import fetch_text
from .base import TemplateRelay

DEFAULT_ENVELOPE_FIELDS = ("contents", "data")


class EnvelopeRelay(TemplateRelay):
    """GET the relay, parse JSON, return the first non-empty envelope field."""

    def __init__(self, session: aiohttp.ClientSession, name: str, template: str,
                 timeout: float = 8, fields=DEFAULT_ENVELOPE_FIELDS):
        super().__init__(session, name, template, timeout)
        self.fields = (fields,) if isinstance(fields, str) else tuple(fields)

    async def fetch(self, target: str) -> str:
        url = self.url_for(target)
        body = await fetch_text(
            self._session, url, self.timeout,
            headers={"X-Requested-With": "XMLHttpRequest"},
        )
        try:
            envelope = json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedPayload(url, f"envelope is not JSON ({e})") from e
        if not isinstance(envelope, dict):
            raise MalformedPayload(url, "envelope is not an object")

        for key in self.fields:
            value = envelope.get(key)
            if isinstance(value, str) and value:
                return value
        raise MalformedPayload(url, f"envelope has none of {', '.join(self.fields)}")
