"""Application entry point for the hashbridge forwarder."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import replace
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import find_dotenv, load_dotenv

from hashbridge.client import (
    ENV_NOTION_TOKEN,
    ENV_TELEGRAM_BOT_TOKEN,
    build_cursor_store,
    build_destinations,
    build_http_client,
    build_source,
    load_credentials,
)
from hashbridge.core.dispatcher import Dispatcher
from hashbridge.core.poller import UpdatePoller
from hashbridge.core.routes import ForwardRoute, build_routes
from hashbridge.settings import ConfigError, Settings, load_settings

NAME = "HASHBRIDGE"
FONT = "tarty-1"

DEFAULT_REDACT_PATTERNS = [ENV_TELEGRAM_BOT_TOKEN, ENV_NOTION_TOKEN]


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    # Bot API URLs embed the token, so redaction is on unless disabled.
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", True):
        return []
    values = []
    for name in redact_cfg.get("patterns", DEFAULT_REDACT_PATTERNS):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def configure_logging(settings: Settings) -> None:
    config = settings.logging or {}
    if not config.get("enabled", True):
        return

    load_dotenv(find_dotenv(usecwd=True))
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/hashbridge.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.base_dir, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)
    # httpx logs every request URL at INFO, and long polling makes that one
    # line per minute of idle time.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def _serve(settings: Settings) -> None:
    logger = logging.getLogger(__name__)
    credentials = load_credentials(settings)

    async with build_http_client() as http_client:
        source = build_source(credentials, http_client)
        destinations = build_destinations(settings, credentials, http_client)
        routes = build_routes(settings.routes, destinations)
        if not routes:
            logger.warning("No routes are configured; updates will be consumed without forwarding")
        logger.info("%s routes are loaded", len(routes))
        for route in routes:
            logger.info("Route %s: %s -> %s", route.name, route.matcher, route.destination)

        poller = UpdatePoller(
            source=source,
            dispatcher=Dispatcher(routes),
            config=settings.poll,
            cursor_store=build_cursor_store(settings, source),
        )
        await poller.run_forever()


def _with_timeout(settings: Settings, timeout: Optional[int]) -> Settings:
    if timeout is None:
        return settings
    if timeout < 0:
        raise ConfigError("--timeout must not be negative")
    return replace(settings, poll=replace(settings.poll, timeout_seconds=timeout))


def _run(config_path: Optional[str], timeout: Optional[int]) -> None:
    _print_banner()
    settings = _with_timeout(load_settings(config_path), timeout)
    configure_logging(settings)
    logger = logging.getLogger(__name__)

    logger.info("Starting hashbridge")
    try:
        asyncio.run(_serve(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


def format_route_table(routes: list[ForwardRoute]) -> str:
    """Render routes in evaluation order, one per line."""

    if not routes:
        return "No routes configured."
    return "\n".join(
        f"{index}. {route.name} | {route.matcher} | {route.destination}" for index, route in enumerate(routes, start=1)
    )


class _DescribedDestination:
    """Stand-in destination used only for printing the route table."""

    def __init__(self, label: str) -> None:
        self._label = label

    async def deliver(self, text: str) -> None:
        raise RuntimeError("Route listing destinations cannot deliver")

    def __str__(self) -> str:
        return self._label


def _routes(config_path: Optional[str]) -> None:
    settings = load_settings(config_path)
    # Destinations are built without credentials; listing must not need secrets.
    placeholders = {}
    for destination in settings.destinations:
        placeholders[destination.name] = _DescribedDestination(f"{destination.type} {destination.name}")
    routes = build_routes(settings.routes, placeholders)
    print(format_route_table(list(routes)))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="hashbridge")
    parser.add_argument("--config", help="Path to config.json (defaults to $HASHBRIDGE_CONFIG or ./config.json)")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Start forwarding")
    run_parser.add_argument("--timeout", type=int, help="Long-poll timeout in seconds (default 60)")
    subparsers.add_parser("routes", help="Print the configured route table and exit")

    args = parser.parse_args(argv)
    try:
        if args.command == "routes":
            _routes(args.config)
            return
        _run(args.config, getattr(args, "timeout", None))
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc


if __name__ == "__main__":
    main()
