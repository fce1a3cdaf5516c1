"""Static configuration for telerelay.

All user-editable settings (batching, storage, notifications, admins,
bootstrap pairings, logging) live in a single JSON file for quick edits
without touching Python. Secrets stay in .env.
"""

import json
import os

from core.config import DEFAULT_DEBOUNCE_MS, DEFAULT_LINK_MARKER

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.environ.get("TELERELAY_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Where the relay document (pairings, filters, admins, stats) is persisted.
_storage = _CONFIG.get("storage", {})
STORE_PATH = _resolve_path(_storage.get("path", "db.json"))

# Batching: quiet period after which a pairing's buffered messages are sent.
_relay = _CONFIG.get("relay", {})
DEBOUNCE_SECONDS = int(_relay.get("debounce_ms", DEFAULT_DEBOUNCE_MS)) / 1000
# Trailing marker that carries the link back to the source message.
LINK_MARKER = _relay.get("link_marker", DEFAULT_LINK_MARKER)

# Notification method switches adapters without changing core logic.
# - "bot": notices go to every admin through the command bot (BOT_TOKEN)
# - "saved_messages": notices go to the relaying account's Saved Messages
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "bot")

# Operator ids merged into the stored admin list on startup.
ADMINS = [int(admin) for admin in _CONFIG.get("admins", [])]

# Pairings created on startup if they do not exist yet.
# Each entry: {"source": "@name", "target": "@name", "topic_id": 58}
BOOTSTRAP_PAIRS = _CONFIG.get("bootstrap_pairs", [])

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
