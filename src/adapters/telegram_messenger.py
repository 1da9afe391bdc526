"""Telegram messaging adapter.

Implements the core MessengerPort on top of a Telethon client. Every
outbound request is bounded by the configured timeout.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Iterable, TypeVar

from core.config import MessagingConfig

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class TelethonMessenger:
    """Messenger adapter that sends chat messages through Telethon."""

    def __init__(self, client, config: MessagingConfig) -> None:
        self._client = client
        self._config = config

    async def _bounded(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self._config.request_timeout_seconds)

    async def send_text(self, chat_id: int, text: str) -> Any:
        """Send a plain text message; returns the sent Telethon message."""

        sent = await self._bounded(self._client.send_message(chat_id, text, parse_mode=None))
        LOGGER.debug("Sent message to chat %s", chat_id)
        return sent

    async def send_denied_notice(self, chat_id: int) -> None:
        await self.send_text(chat_id, self._config.denied_notice)

    async def edit_text(self, chat_id: int, message_id: int, text: str) -> Any:
        return await self._bounded(self._client.edit_message(chat_id, message_id, text, parse_mode=None))

    async def delete_messages(self, chat_id: int, message_ids: Iterable[int]) -> None:
        await self._bounded(self._client.delete_messages(chat_id, list(message_ids)))
