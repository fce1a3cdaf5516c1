"""Telegram client factories for telerelay.

We explicitly manage each client's lifecycle (start/run_until_disconnected)
so it is obvious when a session is created and when it ends. The user
client reads sources and sends relayed posts; the optional bot client
serves operator commands and notices.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient
from telethon.sessions import StringSession


def _credentials() -> tuple[int, str]:
    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")

    # Fail fast on missing credentials to avoid an ambiguous login prompt.
    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")
    return int(api_id), api_hash


def build_client() -> TelegramClient:
    """Create the relaying user client from environment variables.

    STRING_SESSION takes precedence; otherwise a local .session file named
    by SESSION_NAME (default "telerelay") is used.
    """

    api_id, api_hash = _credentials()
    string_session = os.getenv("STRING_SESSION")
    session = StringSession(string_session) if string_session else os.getenv("SESSION_NAME", "telerelay")

    logging.getLogger(__name__).info("Initializing Telegram client")

    return TelegramClient(session, api_id, api_hash, connection_retries=5)


def build_bot_client() -> TelegramClient:
    """Create the operator bot client; it is started with BOT_TOKEN later."""

    api_id, api_hash = _credentials()
    session_name = os.getenv("BOT_SESSION_NAME", "telerelay-bot")

    logging.getLogger(__name__).info("Initializing operator bot client")

    return TelegramClient(session_name, api_id, api_hash)
