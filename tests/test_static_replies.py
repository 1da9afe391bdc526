from __future__ import annotations

import asyncio

import pytest

from core.errors import DescriptorError
from core.models import TriggerKind
from core.static_replies import STATIC_SIGNATURE, build_static_replies


class FakeMessenger:
    def __init__(self) -> None:
        self.sent: list[tuple[int, str]] = []

    async def send_text(self, chat_id: int, text: str) -> None:
        self.sent.append((chat_id, text))


def test_builds_descriptors_from_config_sections() -> None:
    descriptors = build_static_replies(
        {
            "commands": [
                {"command": "/help", "reply": "help text"},
                {"command": "/rules", "reply": "be nice", "admin_only": True},
                {"command": "/old", "reply": "gone", "enabled": False},
            ],
            "auto_replies": [{"trigger": "Thanks", "reply": "welcome"}],
            "broadcasts": [{"interval_seconds": 30, "text": "ping", "name": "keepalive"}],
        }
    )

    kinds = [d.trigger_kind for d in descriptors]
    assert kinds == [TriggerKind.COMMAND, TriggerKind.COMMAND, TriggerKind.AUTO_REPLY, TriggerKind.SCHEDULED]
    assert descriptors[1].admin_only is True
    assert descriptors[2].trigger_value == "thanks"
    assert descriptors[3].name == "keepalive"
    assert descriptors[3].interval_seconds == 30.0
    assert all(d.parameter_signature == STATIC_SIGNATURE for d in descriptors)


def test_static_handler_sends_its_reply() -> None:
    (descriptor,) = build_static_replies({"commands": [{"command": "/help", "reply": "help text"}]})
    messenger = FakeMessenger()

    asyncio.run(descriptor.invoke(12, messenger))

    assert messenger.sent == [(12, "help text")]


def test_missing_fields_are_rejected() -> None:
    with pytest.raises(DescriptorError):
        build_static_replies({"auto_replies": [{"trigger": "hi"}]})
    with pytest.raises(DescriptorError):
        build_static_replies({"broadcasts": [{"text": "no interval"}]})


def test_empty_config_builds_nothing() -> None:
    assert build_static_replies({}) == []
    assert build_static_replies({"commands": None}) == []
