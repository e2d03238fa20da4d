"""
Error taxonomy for radiofeed.

Collectors raise these internally and absorb them at their boundary; the
only error that reaches a user is a PlaybackError's message.
"""


class RadioFeedError(Exception):
    """Base class for every error raised inside radiofeed."""


class FetchError(RadioFeedError):
    """An outbound fetch did not yield usable content."""

    def __init__(self, url: str, message: str = ""):
        self.url = url
        super().__init__(f"{url}: {message}" if message else url)


class NetworkTimeout(FetchError):
    def __init__(self, url: str, timeout: float):
        self.timeout = timeout
        super().__init__(url, f"timed out after {timeout:g}s")


class NetworkFailure(FetchError):
    """DNS failure, refused connection, reset, TLS error."""


class UpstreamHTTPError(FetchError):
    def __init__(self, url: str, status: int):
        self.status = status
        super().__init__(url, f"HTTP {status}")


class MalformedPayload(FetchError):
    """Body arrived but has the wrong shape (short CSV, bad relay envelope)."""


class ExtractionMiss(RadioFeedError):
    """No pattern of a field rule matched the page."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"no match for {field}")


class PlaybackError(RadioFeedError):
    """The live stream could not be opened or dropped while playing."""
