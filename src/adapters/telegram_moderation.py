"""Telegram moderation adapter.

Chat administration actions for admin-only handlers: restricting members,
pinning messages and editing the chat title or description. The app
registers an instance as the ``moderator`` service. The bot account must be
an administrator of the chat for any of these calls to succeed.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Optional, TypeVar

from telethon import functions, types, utils

from core.config import MessagingConfig

LOGGER = logging.getLogger(__name__)

MODERATOR = "moderator"

T = TypeVar("T")

# Everything a member can do except reading the chat.
_MEMBER_RIGHTS = (
    "send_messages",
    "send_media",
    "send_stickers",
    "send_gifs",
    "send_games",
    "send_inline",
    "embed_link_previews",
    "send_polls",
    "change_info",
    "invite_users",
    "pin_messages",
)


class TelethonModerator:
    """Moderation actions executed through Telethon."""

    def __init__(self, client, config: MessagingConfig) -> None:
        self._client = client
        self._timeout = config.request_timeout_seconds

    async def _bounded(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self._timeout)

    async def restrict_member(self, chat_id: int, user_id: int, duration: Optional[timedelta] = None) -> None:
        """Mute ``user_id`` in ``chat_id``.

        Without ``duration`` the restriction is permanent; otherwise Telegram
        lifts it automatically once the duration has elapsed.
        """

        until = None if duration is None else datetime.now(timezone.utc) + duration
        rights = {right: False for right in _MEMBER_RIGHTS}
        await self._bounded(self._client.edit_permissions(chat_id, user_id, until_date=until, **rights))
        LOGGER.info("Restricted user %s in chat %s until %s", user_id, chat_id, until or "forever")

    async def unrestrict_member(self, chat_id: int, user_id: int) -> None:
        rights = {right: True for right in _MEMBER_RIGHTS}
        await self._bounded(self._client.edit_permissions(chat_id, user_id, **rights))
        LOGGER.info("Lifted restrictions for user %s in chat %s", user_id, chat_id)

    async def pin_message(self, chat_id: int, message_id: int, notify: bool = False) -> None:
        await self._bounded(self._client.pin_message(chat_id, message_id, notify=notify))

    async def unpin_message(self, chat_id: int, message_id: Optional[int] = None) -> None:
        """Unpin one message, or every pinned message when ``message_id`` is None."""

        await self._bounded(self._client.unpin_message(chat_id, message_id))

    async def set_chat_title(self, chat_id: int, title: str) -> None:
        real_id, peer_type = utils.resolve_id(chat_id)
        if peer_type is types.PeerChat:
            request = functions.messages.EditChatTitleRequest(chat_id=real_id, title=title)
        else:
            request = functions.channels.EditTitleRequest(channel=chat_id, title=title)
        await self._bounded(self._client(request))

    async def set_chat_description(self, chat_id: int, description: str) -> None:
        await self._bounded(self._client(functions.messages.EditChatAboutRequest(peer=chat_id, about=description)))
