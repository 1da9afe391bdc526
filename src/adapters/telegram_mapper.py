"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core dispatcher.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message
from telethon.tl.types import MessageMediaWebPage

from core.models import IncomingMessage


def text_from_message(message: Message) -> Optional[str]:
    """Return the text of a plain text message, or None for anything else."""

    media = getattr(message, "media", None)
    # Link previews are still text messages; other media (and their captions) are not.
    if media is not None and not isinstance(media, MessageMediaWebPage):
        return None
    if getattr(message, "action", None) is not None:
        return None
    text = getattr(message, "raw_text", None)
    return text or None


def build_incoming(message: Message) -> IncomingMessage:
    """Build a core IncomingMessage from a Telethon Message."""

    return IncomingMessage(
        chat_id=message.chat_id,
        user_id=getattr(message, "sender_id", None),
        text=text_from_message(message),
    )
