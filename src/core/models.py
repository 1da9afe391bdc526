"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from core.errors import DescriptorError

# Identity roles. CHAT_ID binds only to the first slot and USER_ID only to
# the second one.
CHAT_ID = "chat_id"
USER_ID = "user_id"

# Built-in service capabilities.
MESSENGER = "messenger"
PERMISSIONS = "permissions"
EVENT_LOGGER = "event_logger"

IDENTITY_ROLES = frozenset({CHAT_ID, USER_ID})


class TriggerKind(str, Enum):
    """How a handler is triggered."""

    COMMAND = "command"
    AUTO_REPLY = "auto_reply"
    SCHEDULED = "scheduled"


@dataclass(frozen=True)
class HandlerDescriptor:
    """One declared handler, built once at startup and never mutated.

    ``trigger_value`` is the exact command string for commands and the
    lower-cased substring for auto-replies; scheduled handlers have no
    trigger value but a positive ``interval_seconds`` instead.
    """

    name: str
    trigger_kind: TriggerKind
    invoke: Callable[..., Any] = field(compare=False)
    trigger_value: Optional[str] = None
    interval_seconds: Optional[float] = None
    admin_only: bool = False
    parameter_signature: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not callable(self.invoke):
            raise DescriptorError(f"{self.name}: invoke target is not callable")

        kind = self.trigger_kind
        if kind is TriggerKind.SCHEDULED:
            if self.trigger_value is not None:
                raise DescriptorError(f"{self.name}: scheduled handlers take no trigger value")
            if self.interval_seconds is None or self.interval_seconds <= 0:
                raise DescriptorError(f"{self.name}: interval_seconds must be > 0")
            if self.admin_only:
                raise DescriptorError(f"{self.name}: scheduled handlers cannot be admin-only")
        else:
            if not self.trigger_value:
                raise DescriptorError(f"{self.name}: {kind.value} trigger must be a non-empty string")
            if self.interval_seconds is not None:
                raise DescriptorError(f"{self.name}: interval_seconds is only valid for scheduled handlers")

        if kind is TriggerKind.AUTO_REPLY:
            object.__setattr__(self, "trigger_value", self.trigger_value.lower())
        object.__setattr__(self, "parameter_signature", tuple(self.parameter_signature))


@dataclass(frozen=True)
class IncomingMessage:
    """Minimal message context used by the dispatcher.

    ``text`` is None for non-text messages (media, service messages).
    """

    chat_id: int
    user_id: Optional[int]
    text: Optional[str]


@dataclass(frozen=True)
class ChatSession:
    """A chat that has sent at least one text message."""

    chat_id: int
    first_seen: datetime


@dataclass(frozen=True)
class DispatchResult:
    """Handlers matched for one incoming message.

    ``command_ran`` and ``auto_reply_ran`` tell whether the matched handler
    passed the permission gate and returned without raising.
    """

    command: Optional[HandlerDescriptor] = None
    auto_reply: Optional[HandlerDescriptor] = None
    command_ran: bool = False
    auto_reply_ran: bool = False

    @property
    def matched(self) -> bool:
        return self.command is not None or self.auto_reply is not None
