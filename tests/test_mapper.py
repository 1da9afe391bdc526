from __future__ import annotations

from telethon.tl.types import MessageMediaPhoto, MessageMediaWebPage, WebPageEmpty

from adapters.telegram_mapper import build_incoming


class DummyMessage:
    def __init__(
        self,
        *,
        chat_id: int,
        sender_id: "int | None",
        text: str,
        media=None,
        action=None,
    ) -> None:
        self.chat_id = chat_id
        self.sender_id = sender_id
        self.raw_text = text
        self.media = media
        self.action = action


def test_plain_text_message() -> None:
    incoming = build_incoming(DummyMessage(chat_id=-100123, sender_id=42, text="/ping"))

    assert incoming.chat_id == -100123
    assert incoming.user_id == 42
    assert incoming.text == "/ping"


def test_link_preview_is_still_text() -> None:
    message = DummyMessage(
        chat_id=1,
        sender_id=2,
        text="look https://example.com",
        media=MessageMediaWebPage(webpage=WebPageEmpty(id=1)),
    )

    assert build_incoming(message).text == "look https://example.com"


def test_captioned_media_has_no_text() -> None:
    message = DummyMessage(chat_id=1, sender_id=2, text="caption", media=MessageMediaPhoto())

    assert build_incoming(message).text is None


def test_service_message_has_no_text() -> None:
    message = DummyMessage(chat_id=1, sender_id=None, text="", action=object())

    incoming = build_incoming(message)
    assert incoming.text is None
    assert incoming.user_id is None
