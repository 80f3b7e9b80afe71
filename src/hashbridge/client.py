"""Client and adapter factory for hashbridge.

Credentials come from the environment (optionally a .env file) and are
checked before anything connects, so a misconfigured deployment fails at
startup rather than inside the poll loop.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
from dotenv import find_dotenv, load_dotenv

from hashbridge.adapters.log_destination import LogDestination
from hashbridge.adapters.notion_destination import NotionPageDestination
from hashbridge.adapters.sqlite_state import SQLiteStateStore
from hashbridge.adapters.telegram_bot_source import TelegramBotSource
from hashbridge.adapters.telegram_chat_destination import TelegramChatDestination
from hashbridge.core.ports import Destination
from hashbridge.settings import ConfigError, Settings

ENV_TELEGRAM_BOT_TOKEN = "TELEGRAM_BOT_TOKEN"
ENV_NOTION_TOKEN = "NOTION_TOKEN"

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    telegram_bot_token: str
    notion_token: Optional[str]


def load_credentials(settings: Settings) -> Credentials:
    """Read API tokens via python-dotenv to keep secrets out of the repo.

    The Notion token is only required when a Notion destination is configured.
    """

    load_dotenv(find_dotenv(usecwd=True))

    bot_token = os.getenv(ENV_TELEGRAM_BOT_TOKEN)
    notion_token = os.getenv(ENV_NOTION_TOKEN)

    # Fail fast on missing credentials to avoid polling with a broken setup.
    if not bot_token:
        raise ConfigError(f"Missing {ENV_TELEGRAM_BOT_TOKEN} in environment")
    needs_notion = any(destination.type == "notion_page" for destination in settings.destinations)
    if needs_notion and not notion_token:
        raise ConfigError(f"Missing {ENV_NOTION_TOKEN} in environment (required by notion_page destinations)")

    return Credentials(telegram_bot_token=bot_token, notion_token=notion_token)


def build_http_client() -> httpx.AsyncClient:
    """Create the shared HTTP client used by every adapter."""

    return httpx.AsyncClient(
        timeout=httpx.Timeout(10.0),
        headers={"User-Agent": "hashbridge"},
        limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
    )


def build_source(credentials: Credentials, client: httpx.AsyncClient) -> TelegramBotSource:
    LOGGER.info("Initializing Telegram update source")
    return TelegramBotSource(credentials.telegram_bot_token, client)


def build_destinations(
    settings: Settings,
    credentials: Credentials,
    client: httpx.AsyncClient,
) -> Dict[str, Destination]:
    """Instantiate every configured destination, keyed by name."""

    destinations: Dict[str, Destination] = {}
    for config in settings.destinations:
        if config.type == "notion_page":
            destinations[config.name] = NotionPageDestination(
                target_id=str(config.options["page_id"]),
                token=credentials.notion_token or "",
                client=client,
            )
        elif config.type == "telegram_chat":
            destinations[config.name] = TelegramChatDestination(
                bot_token=credentials.telegram_bot_token,
                chat_id=str(config.options["chat_id"]),
                client=client,
            )
        elif config.type == "log":
            destinations[config.name] = LogDestination(config.name)
        else:
            raise ConfigError(f"Unsupported destination type: {config.type}")
    return destinations


def build_cursor_store(settings: Settings, source: TelegramBotSource) -> Optional[SQLiteStateStore]:
    """Return an initialised cursor store, or None when persistence is off."""

    if not settings.state.enabled:
        return None
    db_path = settings.state.db_path
    if not os.path.isabs(db_path):
        db_path = os.path.join(settings.base_dir, db_path)
    store = SQLiteStateStore(db_path, source.source_key)
    store.init_db()
    LOGGER.info("Cursor persistence enabled at %s", db_path)
    return store
