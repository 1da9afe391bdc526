"""Fixed-text handlers declared in configuration (core domain).

config.json may declare plain text replies without any Python:

    "commands":     [{"command": "/help", "reply": "...", "admin_only": false}]
    "auto_replies": [{"trigger": "hello", "reply": "Hi!"}]
    "broadcasts":   [{"interval_seconds": 3600, "text": "Still here."}]

Entries with ``"enabled": false`` are skipped. List order is registration
order, which matters for auto-replies.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Mapping

from core.errors import DescriptorError
from core.models import CHAT_ID, MESSENGER, HandlerDescriptor, TriggerKind

STATIC_SIGNATURE = (CHAT_ID, MESSENGER)


def _reply_with(text: str) -> Callable[..., Any]:
    async def reply(chat_id: int, messenger) -> None:
        await messenger.send_text(chat_id, text)

    return reply


def _enabled(entries: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return [entry for entry in entries if entry.get("enabled", True)]


def _required(entry: Mapping[str, Any], key: str, section: str) -> Any:
    value = entry.get(key)
    if value in (None, ""):
        raise DescriptorError(f"{section} entry is missing {key!r}: {dict(entry)}")
    return value


def build_static_replies(config: Mapping[str, Any]) -> List[HandlerDescriptor]:
    """Build descriptors for every enabled static entry in ``config``."""

    descriptors: List[HandlerDescriptor] = []

    for entry in _enabled(config.get("commands", []) or []):
        command = _required(entry, "command", "commands")
        descriptors.append(
            HandlerDescriptor(
                name=f"static_command:{command}",
                trigger_kind=TriggerKind.COMMAND,
                trigger_value=command,
                admin_only=bool(entry.get("admin_only", False)),
                parameter_signature=STATIC_SIGNATURE,
                invoke=_reply_with(_required(entry, "reply", "commands")),
            )
        )

    for entry in _enabled(config.get("auto_replies", []) or []):
        trigger = _required(entry, "trigger", "auto_replies")
        descriptors.append(
            HandlerDescriptor(
                name=f"static_auto_reply:{trigger}",
                trigger_kind=TriggerKind.AUTO_REPLY,
                trigger_value=trigger,
                admin_only=bool(entry.get("admin_only", False)),
                parameter_signature=STATIC_SIGNATURE,
                invoke=_reply_with(_required(entry, "reply", "auto_replies")),
            )
        )

    for index, entry in enumerate(_enabled(config.get("broadcasts", []) or [])):
        interval = float(_required(entry, "interval_seconds", "broadcasts"))
        descriptors.append(
            HandlerDescriptor(
                name=entry.get("name") or f"static_broadcast:{index}",
                trigger_kind=TriggerKind.SCHEDULED,
                interval_seconds=interval,
                parameter_signature=STATIC_SIGNATURE,
                invoke=_reply_with(_required(entry, "text", "broadcasts")),
            )
        )

    return descriptors
