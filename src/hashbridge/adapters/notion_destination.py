"""Notion page destination.

Appends each forwarded message as a new paragraph block on a preconfigured
page through the Notion REST API.
"""

from __future__ import annotations

from typing import List

import httpx

from hashbridge.core.errors import DeliverError

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
# Notion rejects rich text objects whose content exceeds 2000 characters.
RICH_TEXT_LIMIT = 2000


def _chunk_text(text: str, size: int = RICH_TEXT_LIMIT) -> List[str]:
    if not text:
        return [""]
    return [text[start : start + size] for start in range(0, len(text), size)]


def build_paragraph_block(text: str) -> dict:
    """Return a paragraph block carrying ``text``."""

    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {
            "rich_text": [{"type": "text", "text": {"content": chunk}} for chunk in _chunk_text(text)],
        },
    }


class NotionPageDestination:
    """Destination adapter that appends text to a Notion page."""

    def __init__(
        self,
        target_id: str,
        token: str,
        client: httpx.AsyncClient,
        api_url: str = NOTION_API_URL,
        timeout: float = 10.0,
    ) -> None:
        self._target_id = target_id
        self._token = token
        self._client = client
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    @property
    def target_id(self) -> str:
        return self._target_id

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._token}",
            "Notion-Version": NOTION_VERSION,
            "Content-Type": "application/json",
        }

    async def deliver(self, text: str) -> None:
        """Append ``text`` as one paragraph block at the end of the page."""

        url = f"{self._api_url}/blocks/{self._target_id}/children"
        payload = {"children": [build_paragraph_block(text)]}
        try:
            response = await self._client.patch(url, json=payload, headers=self._headers(), timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise DeliverError(f"Notion request failed: {type(exc).__name__}: {exc}") from exc

        if response.is_error:
            raise DeliverError(f"Notion API error {response.status_code}: {response.text}")

    def __str__(self) -> str:
        return f"notion page {self._target_id}"
