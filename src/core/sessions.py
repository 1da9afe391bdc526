"""Active chat tracking.

Every chat that sends a text message becomes active for the lifetime of the
process; there is no eviction. The dispatcher inserts while the scheduler
iterates, so readers always get a copy.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List

from core.models import ChatSession

LOGGER = logging.getLogger(__name__)


class SessionTracker:
    """Thread-safe set of active chat ids."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: Dict[int, ChatSession] = {}

    def mark_active(self, chat_id: int) -> bool:
        """Record ``chat_id`` as active. Returns True on first observation."""

        with self._lock:
            if chat_id in self._sessions:
                return False
            self._sessions[chat_id] = ChatSession(chat_id=chat_id, first_seen=datetime.now(timezone.utc))
            total = len(self._sessions)
        LOGGER.info("New active chat %s (%s total)", chat_id, total)
        return True

    def snapshot(self) -> frozenset:
        """Current membership, safe to iterate while inserts continue."""

        with self._lock:
            return frozenset(self._sessions)

    def sessions(self) -> List[ChatSession]:
        with self._lock:
            return list(self._sessions.values())

    def __contains__(self, chat_id: object) -> bool:
        with self._lock:
            return chat_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
