"""Static configuration for telebind.

All user-editable settings (bot module, static replies, messages, logging)
live in a single JSON file for quick edits without touching Python. Secrets
stay in the environment (see client.py).
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# TELEBIND_CONFIG points at another config file, e.g. one per deployed bot.
CONFIG_PATH = os.getenv("TELEBIND_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Import path of the BotDefinition to run, as "module:attribute".
BOT_PATH = _CONFIG.get("bot", "sample_bot:bot")

# Outbound messaging settings shared by the Telegram adapters.
_messages = _CONFIG.get("messages", {})
DENIED_NOTICE = _messages.get("denied_notice", "This command is for admins only!")
REQUEST_TIMEOUT_SECONDS = float(_CONFIG.get("request_timeout_seconds", 15))

# Static replies: "commands", "auto_replies" and "broadcasts" lists.
STATIC_REPLIES = {
    "commands": _CONFIG.get("commands", []),
    "auto_replies": _CONFIG.get("auto_replies", []),
    "broadcasts": _CONFIG.get("broadcasts", []),
}

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
