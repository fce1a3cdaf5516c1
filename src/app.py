"""Application entry point for the telerelay service."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events

import settings
from adapters.json_store import JsonConfigStore
from adapters.notification_formatting import format_disabled_notice, format_topics
from adapters.telegram_bot_notifier import TelegramBotNotifier
from adapters.telegram_commands import register_commands
from adapters.telegram_directory import TelethonDirectory
from adapters.telegram_mapper import build_inbound
from adapters.telegram_notifier import TelegramSavedMessagesNotifier
from adapters.telegram_transport import TelethonTransport
from client import build_bot_client, build_client
from core.config import RelayConfig
from core.engine import RelayEngine
from core.errors import RelayError
from core.operators import OperatorService, resolve_ref
from get_session import authorize

NAME = "TELERELAY"
FONT = "tarty-1"

SECRET_ENV_NAMES = ("API_HASH", "BOT_TOKEN", "STRING_SESSION", "2FA")


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
    if not redact_cfg.get("enabled", True):
        return []
    values = []
    for name in redact_cfg.get("patterns", SECRET_ENV_NAMES):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", True):
        return

    load_dotenv()
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
        path = file_cfg.get("path", "logs/telerelay.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
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


async def _bootstrap_pairs(operators: OperatorService) -> None:
    """Create the pairings listed in config.json that do not exist yet."""

    logger = logging.getLogger(__name__)
    for entry in settings.BOOTSTRAP_PAIRS:
        source = entry.get("source")
        target = entry.get("target")
        if not source or not target:
            logger.warning("Skipping bootstrap pairing without source/target: %s", entry)
            continue
        topic_id = entry.get("topic_id")
        try:
            pairing = await operators.add_pairing(str(source), str(target), int(topic_id) if topic_id else None)
        except RelayError as exc:
            logger.info("Bootstrap pairing %s -> %s skipped: %s", source, target, exc)
            continue
        logger.info("Bootstrap pairing %s created: %s -> %s", pairing.id, source, target)


async def _flush_on_exit(client, engine: RelayEngine) -> None:
    if not client.is_connected():
        await client.connect()
    await engine.scheduler.flush_all()
    await client.disconnect()


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting telerelay")

    store = JsonConfigStore(settings.STORE_PATH)
    document = store.load()
    logger.info(
        "%s pairings and %s filters are loaded from %s",
        len(document.pairings),
        len(document.filters),
        store.path,
    )

    client = build_client()
    client.loop.run_until_complete(client.connect())
    client.loop.run_until_complete(authorize(client))

    bot = None
    bot_token = os.getenv("BOT_TOKEN")
    if bot_token:
        bot = build_bot_client()
        bot.start(bot_token=bot_token)
    else:
        logger.warning("BOT_TOKEN is not set; operator commands are unavailable")

    if settings.NOTIFICATION_METHOD == "bot":
        if bot is None:
            raise RuntimeError("BOT_TOKEN is required when notification_method=bot")
        notifier = TelegramBotNotifier(bot, admins=lambda: engine.registry.admins())
    elif settings.NOTIFICATION_METHOD == "saved_messages":
        notifier = TelegramSavedMessagesNotifier(client)
    else:
        raise RuntimeError("notification_method must be 'bot' or 'saved_messages'")
    logger.info("Selected notification method - %s", settings.NOTIFICATION_METHOD)

    engine = RelayEngine.build(
        document=document,
        store=store,
        transport=TelethonTransport(client),
        directory=TelethonDirectory(client),
        notifier=notifier,
        config=RelayConfig(debounce_seconds=settings.DEBOUNCE_SECONDS, link_marker=settings.LINK_MARKER),
        disabled_notice=format_disabled_notice,
    )
    added = engine.registry.add_admins(settings.ADMINS)
    if added:
        logger.info("%s admins added from config", added)

    client.loop.run_until_complete(_bootstrap_pairs(engine.operators))

    if bot is not None:
        register_commands(bot, engine.operators)

    @client.on(events.NewMessage())
    async def handler(event) -> None:
        try:
            inbound = build_inbound(event.message)
            if inbound is not None:
                await engine.processor.handle(inbound)
        except Exception:
            logger.exception("Error while processing message")

    client.start()
    logger.info("Client connected. Ready to relay messages...")
    try:
        client.run_until_disconnected()
    finally:
        # Whatever is still buffered gets one delivery attempt before exit.
        if engine.scheduler.has_pending:
            client.loop.run_until_complete(_flush_on_exit(client, engine))
        if bot is not None:
            client.loop.run_until_complete(bot.disconnect())


def _lookup(ref: str, with_topics: bool) -> None:
    _print_banner()
    client = build_client()
    directory = TelethonDirectory(client)

    async def _run_lookup() -> None:
        await client.connect()
        if not await client.is_user_authorized():
            print("Authorization required. Starting login...")
            await authorize(client)
        try:
            chat_id = await resolve_ref(ref, directory)
            print(f"ID: {chat_id}")
            if with_topics:
                print(format_topics(chat_id, await directory.list_topics(chat_id)))
        except RelayError as exc:
            print(f"Lookup failed: {exc}")
        await client.disconnect()

    client.loop.run_until_complete(_run_lookup())


def _login() -> None:
    _print_banner()
    from get_session import main as login_main

    asyncio.run(login_main())


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="telerelay")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the relay")
    subparsers.add_parser("login", help="Log in and print a STRING_SESSION")
    getid_parser = subparsers.add_parser("getid", help="Resolve @handle or id to a canonical channel id")
    getid_parser.add_argument("ref")
    topics_parser = subparsers.add_parser("topics", help="List forum topics of a group")
    topics_parser.add_argument("ref")

    args = parser.parse_args(argv)
    if args.command == "login":
        _login()
        return
    if args.command == "getid":
        _lookup(args.ref, with_topics=False)
        return
    if args.command == "topics":
        _lookup(args.ref, with_topics=True)
        return
    _run()


if __name__ == "__main__":
    main()
