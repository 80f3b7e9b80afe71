"""Telegram Bot API update source.

Implements the core UpdateSource port with ``getUpdates`` long polling and
classifies failures for the poller: connectivity problems become
TransportError, anything the API answers with that is not a usable update
list becomes ProtocolError.
"""

from __future__ import annotations

from typing import List, Optional

import httpx

from hashbridge.adapters.telegram_mapper import build_update
from hashbridge.core.errors import ProtocolError, TransportError
from hashbridge.core.models import Update

TELEGRAM_API_URL = "https://api.telegram.org"
# Extra read time on top of the long-poll timeout so the server answers first.
LONG_POLL_GRACE_SECONDS = 10.0


def bot_id_from_token(bot_token: str) -> str:
    """Return the numeric bot id prefix of a Bot API token."""

    return bot_token.split(":", 1)[0]


class TelegramBotSource:
    """UpdateSource adapter backed by the Bot API."""

    def __init__(self, bot_token: str, client: httpx.AsyncClient, api_url: str = TELEGRAM_API_URL) -> None:
        self._bot_token = bot_token
        self._client = client
        self._api_url = api_url.rstrip("/")

    @property
    def source_key(self) -> str:
        return f"telegram_bot:{bot_id_from_token(self._bot_token)}"

    def _endpoint(self, method: str) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"{self._api_url}/bot{self._bot_token}/{method}"

    async def fetch_updates(self, cursor: int, timeout_seconds: int) -> List[Update]:
        """Long-poll for updates with id >= cursor."""

        params = {"offset": cursor, "timeout": timeout_seconds}
        request_timeout = httpx.Timeout(10.0, read=timeout_seconds + LONG_POLL_GRACE_SECONDS)
        try:
            response = await self._client.get(self._endpoint("getUpdates"), params=params, timeout=request_timeout)
        except httpx.TransportError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ProtocolError(
                f"Malformed getUpdates response (HTTP {response.status_code})",
                error_code=response.status_code,
            ) from exc

        if not isinstance(body, dict):
            raise ProtocolError("getUpdates response is not an object", error_code=response.status_code)
        if not body.get("ok"):
            raise self._api_error(body, response.status_code)

        result = body.get("result")
        if not isinstance(result, list):
            raise ProtocolError("getUpdates response has no result list", error_code=response.status_code)
        return [build_update(raw) for raw in result]

    @staticmethod
    def _api_error(body: dict, status_code: int) -> ProtocolError:
        description = body.get("description") or "unknown error"
        error_code = body.get("error_code", status_code)
        retry_after: Optional[int] = None
        parameters = body.get("parameters")
        if isinstance(parameters, dict) and isinstance(parameters.get("retry_after"), int):
            retry_after = parameters["retry_after"]
        return ProtocolError(f"Bot API error {error_code}: {description}", error_code=error_code, retry_after=retry_after)
