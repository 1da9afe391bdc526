"""Core message dispatch.

This module is integration-agnostic. It only relies on ports for messaging,
permissions and logging, enabling other chat backends without changes here.

For every text message the dispatcher:
1) marks the chat active,
2) runs the command whose string equals the full text, if any,
3) runs the first auto-reply, in registration order, whose trigger occurs
   in the lower-cased text, if any.

Steps 2 and 3 are independent, so one message may fire both a command and
an auto-reply. Handler failures are logged and never propagate.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.binder import ArgumentBinder
from core.config import CONTEXT_AUTO_REPLY, CONTEXT_COMMAND, CONTEXT_PERMISSION
from core.errors import PermissionCheckError
from core.models import DispatchResult, HandlerDescriptor, IncomingMessage
from core.permissions import PermissionGate
from core.ports import EventLoggerPort
from core.registry import HandlerRegistry
from core.sessions import SessionTracker

LOGGER = logging.getLogger(__name__)


class Dispatcher:
    """Routes incoming messages to registered handlers."""

    def __init__(
        self,
        registry: HandlerRegistry,
        gate: PermissionGate,
        binder: ArgumentBinder,
        sessions: SessionTracker,
        event_logger: EventLoggerPort,
    ) -> None:
        self._registry = registry
        self._gate = gate
        self._binder = binder
        self._sessions = sessions
        self._event_logger = event_logger

    async def dispatch(self, message: IncomingMessage) -> DispatchResult:
        """Process one incoming message."""

        # Non-text messages are not routed and do not activate the chat.
        if not message.text:
            return DispatchResult()

        self._sessions.mark_active(message.chat_id)

        command = self._registry.lookup_command(message.text)
        command_ran = False
        if command is not None:
            command_ran = await self._invoke(command, message, CONTEXT_COMMAND)

        auto_reply = self.match_auto_reply(message.text)
        auto_reply_ran = False
        if auto_reply is not None:
            auto_reply_ran = await self._invoke(auto_reply, message, CONTEXT_AUTO_REPLY)

        return DispatchResult(
            command=command,
            auto_reply=auto_reply,
            command_ran=command_ran,
            auto_reply_ran=auto_reply_ran,
        )

    def match_auto_reply(self, text: str) -> Optional[HandlerDescriptor]:
        """Return the first registered auto-reply whose trigger occurs in ``text``."""

        lowered = text.lower()
        for descriptor in self._registry.auto_reply_candidates():
            if descriptor.trigger_value in lowered:
                return descriptor
        return None

    async def _invoke(self, descriptor: HandlerDescriptor, message: IncomingMessage, context: str) -> bool:
        try:
            if not await self._gate.authorize(descriptor, message.chat_id, message.user_id):
                return False
            LOGGER.info(
                "Running %s for user %s in chat %s", descriptor.name, message.user_id, message.chat_id
            )
            await self._binder.call(descriptor, message.chat_id, message.user_id)
        except PermissionCheckError as exc:
            self._event_logger.log_error(exc, CONTEXT_PERMISSION)
            return False
        except Exception as exc:
            self._event_logger.log_error(exc, context)
            return False
        return True
