"""Error taxonomy shared by the core and adapters."""

from __future__ import annotations

from typing import Optional


class ExtractionError(ValueError):
    """Entity range does not fit the message text."""


class FetchError(Exception):
    """Base class for failures of the update fetch call."""


class TransportError(FetchError):
    """Connectivity-level failure (refused, timeout, DNS, TLS).

    Soft: the poller retries immediately with the same cursor.
    """


class ProtocolError(FetchError):
    """The source answered, but with an error or an unusable payload.

    Hard: logged at a visible level; the poller keeps running.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        retry_after: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.retry_after = retry_after


class DeliverError(Exception):
    """A destination failed to persist forwarded text."""
