"""Application entry point for telebind bots."""

from __future__ import annotations

import argparse
import importlib
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events

import settings
from adapters.event_logger import EventLogger
from adapters.telegram_mapper import build_incoming
from adapters.telegram_messenger import TelethonMessenger
from adapters.telegram_moderation import MODERATOR, TelethonModerator
from adapters.telegram_permissions import TelethonPermissionOracle
from client import bot_token, build_client
from core.config import MessagingConfig
from core.engine import BotEngine
from core.registry import BotDefinition
from core.static_replies import build_static_replies
from get_session import authorize

NAME = "TELEBIND"
FONT = "tarty-1"


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
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = [os.getenv(name) for name in redact_cfg.get("patterns", ["API_HASH", "BOT_TOKEN"])]
    return sorted({value for value in values if value}, key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", True):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/telebind.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def load_bot(path: str) -> BotDefinition:
    """Import a BotDefinition given as "module:attribute"."""

    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise RuntimeError(f"Bot path must look like 'module:attribute', got {path!r}")

    module = importlib.import_module(module_name)
    definition = getattr(module, attribute, None)
    if not isinstance(definition, BotDefinition):
        raise RuntimeError(f"{path} is not a BotDefinition")
    return definition


def _prepare_definition(bot_path: str) -> BotDefinition:
    definition = load_bot(bot_path)
    if not definition.registry.frozen:
        definition.registry.register_all(build_static_replies(settings.STATIC_REPLIES))
    return definition


def _messaging_config() -> MessagingConfig:
    return MessagingConfig(
        denied_notice=settings.DENIED_NOTICE,
        request_timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS,
    )


def _run(bot_path: str) -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting telebind with %s", bot_path)
    definition = _prepare_definition(bot_path)

    client = build_client()
    client.loop.run_until_complete(client.connect())
    client.loop.run_until_complete(authorize(client, bot_token()))

    messaging = _messaging_config()
    event_logger = EventLogger()
    engine = BotEngine(
        definition,
        messenger=TelethonMessenger(client, messaging),
        permissions=TelethonPermissionOracle(client, messaging),
        event_logger=event_logger,
        services={MODERATOR: TelethonModerator(client, messaging)},
    )

    # Single handler keeps Telethon integration minimal and defers all routing
    # to the core dispatcher.
    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            await engine.handle(build_incoming(event.message))
        except Exception as exc:
            event_logger.log_error(exc, "message_dispatch")

    async def _start_scheduler() -> None:
        engine.start()

    client.loop.run_until_complete(_start_scheduler())
    logger.info("Client connected. Listening for incoming messages...")
    try:
        client.run_until_disconnected()
    finally:
        client.loop.run_until_complete(engine.stop())


def _login() -> None:
    _print_banner()
    _configure_logging()
    client = build_client()

    async def _run_login() -> None:
        await client.connect()
        await authorize(client, bot_token())
        me = await client.get_me()
        logging.getLogger(__name__).info("Logged in as: %s", me.username or me.first_name)
        await client.disconnect()

    client.loop.run_until_complete(_run_login())


def _describe_handlers(bot_path: str) -> None:
    definition = _prepare_definition(bot_path)
    registry = definition.registry

    print(f"Bot: {definition.name}")
    for descriptor in registry.commands():
        gate = " [admin]" if descriptor.admin_only else ""
        print(f"command     {descriptor.trigger_value:<24} {descriptor.name}{gate}")
    for position, descriptor in enumerate(registry.auto_reply_candidates(), start=1):
        gate = " [admin]" if descriptor.admin_only else ""
        print(f"auto-reply  #{position} {descriptor.trigger_value!r:<21} {descriptor.name}{gate}")
    for descriptor in registry.scheduled_descriptors():
        every = f"every {descriptor.interval_seconds:g}s"
        print(f"scheduled   {every:<24} {descriptor.name}")
    if not len(registry):
        print("(no handlers registered)")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="telebind")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Start the bot")
    run_parser.add_argument("--bot", default=None, help="BotDefinition as module:attribute")
    subparsers.add_parser("login", help="Authorize the Telegram session")
    handlers_parser = subparsers.add_parser("handlers", help="List the registered handlers")
    handlers_parser.add_argument("--bot", default=None, help="BotDefinition as module:attribute")

    args = parser.parse_args(argv)
    bot_path = getattr(args, "bot", None) or settings.BOT_PATH
    if args.command == "login":
        _login()
        return
    if args.command == "handlers":
        _describe_handlers(bot_path)
        return
    _run(bot_path)


if __name__ == "__main__":
    main()
