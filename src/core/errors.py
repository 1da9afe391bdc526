"""Exceptions raised by the dispatch core.

Startup defects (bad descriptors, duplicate commands, unresolvable
signatures) are raised to the caller. Runtime failures inside a handler are
caught at the dispatcher/scheduler boundary and only logged.
"""

from __future__ import annotations

from typing import Sequence


class TelebindError(Exception):
    """Base class for all telebind errors."""


class DescriptorError(TelebindError, ValueError):
    """A handler descriptor has an invalid combination of fields."""


class DuplicateCommandError(TelebindError, ValueError):
    """Two handlers claim the same command string."""

    def __init__(self, command: str, existing: str, duplicate: str) -> None:
        super().__init__(
            f"Command {command!r} is already registered by {existing!r} (rejected {duplicate!r})"
        )
        self.command = command


class RegistryFrozenError(TelebindError, RuntimeError):
    """A handler was registered after startup finished."""


class UnresolvableSignatureError(TelebindError, ValueError):
    """A handler declares parameter roles the binder cannot satisfy."""

    def __init__(self, handler_name: str, problems: Sequence[str]) -> None:
        super().__init__(f"Handler {handler_name!r} cannot be bound: {'; '.join(problems)}")
        self.handler_name = handler_name
        self.problems = list(problems)


class PermissionCheckError(TelebindError):
    """The permission oracle could not determine a user's admin status."""

    def __init__(self, chat_id: int, user_id: int, cause: BaseException) -> None:
        super().__init__(f"Admin check failed for user {user_id} in chat {chat_id}: {cause}")
        self.chat_id = chat_id
        self.user_id = user_id


class BotNotAdminError(TelebindError):
    """The bot lacks the admin rights needed to inspect a chat."""
