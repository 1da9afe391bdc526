"""Example bot used when config.json does not name another one.

Run it with ``telebind run --bot sample_bot:bot``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from adapters.telegram_moderation import MODERATOR
from core.models import CHAT_ID, EVENT_LOGGER, MESSENGER, PERMISSIONS, USER_ID
from core.registry import BotDefinition

bot = BotDefinition("sample")


@bot.command("/start", params=(CHAT_ID, MESSENGER))
async def start(chat_id, messenger) -> None:
    await messenger.send_text(chat_id, "Hi! Try /ping, /whoami or say hello.")


@bot.command("/ping", params=(CHAT_ID, MESSENGER))
async def ping(chat_id, messenger) -> None:
    await messenger.send_text(chat_id, "pong")


@bot.command("/whoami", params=(CHAT_ID, USER_ID, MESSENGER, PERMISSIONS))
async def whoami(chat_id, user_id, messenger, permissions) -> None:
    role = "an admin" if await permissions.is_admin(chat_id, user_id) else "a member"
    await messenger.send_text(chat_id, f"You are {role} of this chat.")


@bot.command("/announce", params=(CHAT_ID, USER_ID, MESSENGER, EVENT_LOGGER), admin_only=True)
async def announce(chat_id, user_id, messenger, event_logger) -> None:
    event_logger.log_user_action(user_id, f"announce in {chat_id}")
    await messenger.send_text(chat_id, "Announcement: the bot is up and running.")


@bot.command("/selfmute", params=(CHAT_ID, USER_ID, MESSENGER, MODERATOR))
async def selfmute(chat_id, user_id, messenger, moderator) -> None:
    await moderator.restrict_member(chat_id, user_id, timedelta(minutes=10))
    await messenger.send_text(chat_id, "Muted for 10 minutes. Enjoy the quiet.")


@bot.auto_reply("hello", params=(CHAT_ID, MESSENGER))
async def greet(chat_id, messenger) -> None:
    await messenger.send_text(chat_id, "Hello to you too!")


@bot.scheduled(interval_seconds=6 * 60 * 60, params=(CHAT_ID, MESSENGER))
async def heartbeat(chat_id, messenger) -> None:
    now = datetime.now(timezone.utc).strftime("%H:%M UTC")
    await messenger.send_text(chat_id, f"Still here ({now}).")
