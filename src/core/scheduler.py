"""Periodic broadcast of scheduled handlers to every active chat.

Each scheduled descriptor gets its own timer task. A timer fires immediately
on start and then every ``interval_seconds`` at a fixed rate measured on the
event loop clock. Every fire spawns a separate tick task, so a slow handler
never delays the next fire or any other timer.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import List, Set

from core.binder import ArgumentBinder
from core.config import CONTEXT_SCHEDULED
from core.models import HandlerDescriptor
from core.ports import EventLoggerPort
from core.registry import HandlerRegistry
from core.sessions import SessionTracker

LOGGER = logging.getLogger(__name__)


class Scheduler:
    """Runs scheduled handlers against the active-chat set."""

    def __init__(
        self,
        registry: HandlerRegistry,
        binder: ArgumentBinder,
        sessions: SessionTracker,
        event_logger: EventLoggerPort,
    ) -> None:
        self._registry = registry
        self._binder = binder
        self._sessions = sessions
        self._event_logger = event_logger
        self._timers: List[asyncio.Task] = []
        self._ticks: Set[asyncio.Task] = set()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start one timer per scheduled descriptor. Must run inside an event loop."""

        if self._running:
            return

        self._running = True
        for descriptor in self._registry.scheduled_descriptors():
            timer = asyncio.create_task(self._run_timer(descriptor), name=f"schedule:{descriptor.name}")
            self._timers.append(timer)
        LOGGER.info("Scheduler started with %s timer(s)", len(self._timers))

    async def stop(self) -> None:
        """Cancel every timer and any tick still in flight."""

        self._running = False
        tasks = [*self._timers, *self._ticks]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timers.clear()
        self._ticks.clear()
        LOGGER.info("Scheduler stopped")

    async def _run_timer(self, descriptor: HandlerDescriptor) -> None:
        loop = asyncio.get_running_loop()
        interval = descriptor.interval_seconds
        next_fire = loop.time()
        while True:
            tick = asyncio.create_task(self.run_tick(descriptor), name=f"tick:{descriptor.name}")
            self._ticks.add(tick)
            tick.add_done_callback(self._tick_done)

            next_fire += interval
            delay = next_fire - loop.time()
            if delay < 0:
                # The loop was blocked past one or more fires: skip them rather than burst.
                skipped = math.ceil(-delay / interval)
                LOGGER.warning("Timer for %s fell behind, skipping %s fire(s)", descriptor.name, skipped)
                next_fire += skipped * interval
                delay = next_fire - loop.time()
            await asyncio.sleep(max(delay, 0))

    def _tick_done(self, task: asyncio.Task) -> None:
        self._ticks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            LOGGER.error("%s crashed", task.get_name(), exc_info=_exc_info(error))

    async def run_tick(self, descriptor: HandlerDescriptor) -> int:
        """Invoke ``descriptor`` once for every active chat.

        Returns the number of chats for which the handler completed.
        """

        chat_ids = sorted(self._sessions.snapshot())
        if not chat_ids:
            return 0
        results = await asyncio.gather(
            *(self._invoke(descriptor, chat_id) for chat_id in chat_ids), return_exceptions=True
        )
        for chat_id, outcome in zip(chat_ids, results):
            if isinstance(outcome, Exception):
                LOGGER.error(
                    "Tick for %s failed in chat %s", descriptor.name, chat_id, exc_info=_exc_info(outcome)
                )
        succeeded = sum(1 for ok in results if ok is True)
        LOGGER.debug("Tick for %s: %s/%s chats", descriptor.name, succeeded, len(chat_ids))
        return succeeded

    async def _invoke(self, descriptor: HandlerDescriptor, chat_id: int) -> bool:
        try:
            await self._binder.call(descriptor, chat_id, None)
        except Exception as exc:
            self._event_logger.log_error(exc, CONTEXT_SCHEDULED)
            return False
        return True


def _exc_info(error: BaseException):
    return type(error), error, error.__traceback__
