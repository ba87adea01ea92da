"""Exception hierarchy for rss2ical.

Fetch and parse failures are typed so callers can tell the causes apart even
though the HTTP edge only reports a generic upstream failure. The date
normalizer and calendar builder never raise for bad content; they degrade.
"""

from __future__ import annotations

from typing import Optional


class RSS2ICalError(Exception):
    """Base exception for all rss2ical errors."""


class FeedFetchError(RSS2ICalError):
    """Retrieving the feed failed.

    All fetch failures inherit from this class. Subclasses identify the stage
    at which the request broke down.
    """

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class FeedRequestError(FeedFetchError):
    """The request could not be made or no response status was received.

    Raised when:
    - The URL is malformed or uses a scheme other than http/https
    - DNS resolution, connection or TLS handshake fails
    - The request times out before a status line arrives
    """


class FeedStatusError(FeedFetchError):
    """The final response status was not 200 OK."""

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message, url)
        self.status_code = status_code


class FeedReadError(FeedFetchError):
    """The status line was fine but the body could not be read.

    Also raised when the body exceeds the configured size cap.
    """


class FeedParseError(RSS2ICalError):
    """The payload is not well-formed XML or is not an rss>channel document."""


class OrchestratorError(RSS2ICalError):
    """Resolving a feed URL into a calendar failed.

    The originating FeedFetchError or FeedParseError is chained as __cause__.
    """

    kind = "unknown"

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class FetchFailedError(OrchestratorError):
    """The upstream feed could not be retrieved."""

    kind = "fetch"


class ParseFailedError(OrchestratorError):
    """The upstream feed was retrieved but could not be decoded."""

    kind = "parse"
