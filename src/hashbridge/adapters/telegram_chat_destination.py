"""Telegram chat destination.

Forwards matched text to another chat via the Bot API so a channel or group
can serve as the record.
"""

from __future__ import annotations

import httpx

from hashbridge.adapters.telegram_bot_source import TELEGRAM_API_URL
from hashbridge.core.errors import DeliverError


class TelegramChatDestination:
    """Destination adapter that sends text with the Bot API ``sendMessage``."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        client: httpx.AsyncClient,
        api_url: str = TELEGRAM_API_URL,
        timeout: float = 10.0,
    ) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._client = client
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    def _endpoint(self) -> str:
        return f"{self._api_url}/bot{self._bot_token}/sendMessage"

    async def deliver(self, text: str) -> None:
        """Send the text verbatim, without parse mode."""

        payload = {
            "chat_id": self._chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        try:
            response = await self._client.post(self._endpoint(), json=payload, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise DeliverError(f"Bot API request failed: {type(exc).__name__}") from exc

        if response.is_error:
            raise DeliverError(f"Bot API error {response.status_code}: {response.text}")

    def __str__(self) -> str:
        return f"telegram chat {self._chat_id}"
