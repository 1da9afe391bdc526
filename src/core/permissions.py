"""Admin-only enforcement before handler invocation."""

from __future__ import annotations

import logging
from typing import Optional

from core.errors import PermissionCheckError
from core.models import HandlerDescriptor
from core.ports import MessengerPort, PermissionOraclePort

LOGGER = logging.getLogger(__name__)


class PermissionGate:
    """Decides whether a matched handler may run for the acting user.

    A denial is not an error: the chat receives the messenger's denial
    notice and the handler is skipped. A failing oracle raises
    :class:`PermissionCheckError`, which the dispatcher logs like any other
    invocation failure.
    """

    def __init__(self, oracle: PermissionOraclePort, messenger: MessengerPort) -> None:
        self._oracle = oracle
        self._messenger = messenger

    async def authorize(self, descriptor: HandlerDescriptor, chat_id: int, user_id: Optional[int]) -> bool:
        if not descriptor.admin_only:
            return True

        if user_id is None:
            allowed = False
        else:
            try:
                allowed = bool(await self._oracle.is_admin(chat_id, user_id))
            except Exception as exc:
                raise PermissionCheckError(chat_id, user_id, exc) from exc

        if not allowed:
            LOGGER.info("Denied %s for user %s in chat %s", descriptor.name, user_id, chat_id)
            await self._messenger.send_denied_notice(chat_id)
        return allowed
