"""Exceptions raised by the Brave client and the local search workflow."""

from __future__ import annotations

from typing import Optional


class ConfigurationError(ValueError):
    """Raised when the server configuration is missing or invalid."""


class BraveAPIError(RuntimeError):
    """A Brave Search API call failed.

    ``status`` is ``None`` for network errors and timeouts.
    """

    def __init__(self, endpoint: str, status: Optional[int] = None, reason: str = "") -> None:
        self.endpoint = endpoint
        self.status = status
        self.reason = reason
        super().__init__(f"Error fetching {endpoint} Status:{status} Status Text:{reason}")


class PositionalMismatchError(BraveAPIError):
    """POI results could not be matched to the requested ids by position."""

    def __init__(self, endpoint: str, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        BraveAPIError.__init__(
            self,
            endpoint,
            None,
            f"expected {expected} results in request order, received {received}",
        )
