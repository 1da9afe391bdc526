"""Ports (interfaces) used by the dispatch core.

Ports define the minimal contracts for the messaging, permission and logging
collaborators so that the core can be reused with different chat backends.
"""

from __future__ import annotations

from typing import Protocol


class MessengerPort(Protocol):
    """Outbound messaging operations required by the core."""

    async def send_text(self, chat_id: int, text: str) -> None:
        ...

    async def send_denied_notice(self, chat_id: int) -> None:
        ...


class PermissionOraclePort(Protocol):
    """Answers admin-status questions. Implementations may raise."""

    async def is_admin(self, chat_id: int, user_id: int) -> bool:
        ...


class EventLoggerPort(Protocol):
    """Receives every suppressed invocation failure with a context tag."""

    def log_error(self, error: BaseException, context: str) -> None:
        ...
