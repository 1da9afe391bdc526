"""Event logging adapter.

Implements the core EventLoggerPort on stdlib logging. Handlers (console,
rotating file) are configured once by the app, so this class only shapes
messages and carries optional key/value context.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional


class EventLogger:
    """Logs user actions, bot actions, warnings and suppressed errors."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("telebind.events")
        self._lock = threading.Lock()
        self._context: Dict[str, str] = {}

    def _with_context(self, message: str) -> str:
        with self._lock:
            if not self._context:
                return message
            pairs = ", ".join(f"{key}={value}" for key, value in self._context.items())
        return f"{message} | context: {pairs}"

    def log_user_action(self, user_id: int, action: str) -> None:
        self._logger.info(self._with_context(f"User {user_id} performed action: {action}"))

    def log_bot_action(self, action: str, details: str) -> None:
        self._logger.info(self._with_context(f"Bot action: {action} | details: {details}"))

    def log_error(self, error: BaseException, context: str) -> None:
        """Log a suppressed failure with its traceback and a context tag."""

        self._logger.error(
            self._with_context(f"Error in context '{context}': {error}"),
            exc_info=(type(error), error, error.__traceback__),
        )

    def log_warning(self, message: str, context: str) -> None:
        self._logger.warning(self._with_context(f"Warning in context '{context}': {message}"))

    def add_context(self, key: str, value: str) -> None:
        with self._lock:
            self._context[key] = value

    def clear_context(self) -> None:
        with self._lock:
            self._context.clear()
