"""Telegram permission adapter.

Implements the core PermissionOraclePort plus the membership checks bots
commonly need before moderating a chat.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from telethon import errors, types, utils

from core.config import MessagingConfig
from core.errors import BotNotAdminError


class TelethonPermissionOracle:
    """Answers admin and membership questions through Telethon."""

    def __init__(self, client, config: MessagingConfig) -> None:
        self._client = client
        self._timeout = config.request_timeout_seconds
        self._bot_id: Optional[int] = None

    async def _permissions(self, chat_id: int, user_id: int):
        return await asyncio.wait_for(self._client.get_permissions(chat_id, user_id), timeout=self._timeout)

    async def _own_id(self) -> int:
        if self._bot_id is None:
            me = await asyncio.wait_for(self._client.get_me(), timeout=self._timeout)
            self._bot_id = me.id
        return self._bot_id

    async def is_admin(self, chat_id: int, user_id: int) -> bool:
        """True if ``user_id`` is an administrator or the creator of ``chat_id``.

        Private chats have no administrators, so the answer there is False.
        """

        if _is_private(chat_id):
            return False
        try:
            permissions = await self._permissions(chat_id, user_id)
        except errors.UserNotParticipantError:
            return False
        return bool(permissions.is_admin or permissions.is_creator)

    async def is_bot_admin(self, chat_id: int) -> bool:
        return await self.is_admin(chat_id, await self._own_id())

    async def is_bot_admin_everywhere(self, chat_ids: Iterable[int]) -> bool:
        for chat_id in chat_ids:
            if not await self.is_bot_admin(chat_id):
                return False
        return True

    async def is_chat_member(self, chat_id: int, user_id: int) -> bool:
        """True if ``user_id`` currently belongs to ``chat_id``.

        Raises :class:`BotNotAdminError` when the bot cannot inspect the chat.
        """

        if not await self.is_bot_admin(chat_id):
            raise BotNotAdminError(f"Bot is not admin of this chat: {chat_id}")
        try:
            permissions = await self._permissions(chat_id, user_id)
        except errors.UserNotParticipantError:
            return False
        return not (permissions.has_left or permissions.is_banned)

    async def is_member_of_any(self, chat_ids: Iterable[int], user_id: int) -> bool:
        for chat_id in chat_ids:
            if await self.is_chat_member(chat_id, user_id):
                return True
        return False


def _is_private(chat_id: int) -> bool:
    _, peer_type = utils.resolve_id(chat_id)
    return peer_type is types.PeerUser
