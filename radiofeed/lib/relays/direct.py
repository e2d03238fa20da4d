"""Direct fetch of the upstream page, the last rung of every ladder."""

from ..fetch import fetch_text
from .base import RelaySource


class DirectSource(RelaySource):
    name = "direct"

    def url_for(self, target: str) -> str:
        return target

    async def fetch(self, target: str) -> str:
        return await fetch_text(self._session, target, self.timeout)
