"""Startup wiring for the dispatch core.

The engine owns the registry, binder, session tracker, dispatcher and
scheduler for one bot. Construction validates every handler signature and
freezes the registry, so configuration defects surface before the first
message is processed.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from core.binder import ArgumentBinder
from core.dispatcher import Dispatcher
from core.models import EVENT_LOGGER, MESSENGER, PERMISSIONS, DispatchResult, IncomingMessage
from core.permissions import PermissionGate
from core.ports import EventLoggerPort, MessengerPort, PermissionOraclePort
from core.registry import BotDefinition
from core.scheduler import Scheduler
from core.sessions import SessionTracker

LOGGER = logging.getLogger(__name__)


class BotEngine:
    """Dispatcher and scheduler for one :class:`BotDefinition`."""

    def __init__(
        self,
        definition: BotDefinition,
        messenger: MessengerPort,
        permissions: PermissionOraclePort,
        event_logger: EventLoggerPort,
        services: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.definition = definition
        self.registry = definition.registry

        all_services = {
            MESSENGER: messenger,
            PERMISSIONS: permissions,
            EVENT_LOGGER: event_logger,
        }
        all_services.update(definition.services)
        if services:
            all_services.update(services)
        self.binder = ArgumentBinder(all_services)

        # Fail fast: every handler must be bindable before we accept traffic.
        for descriptor in self.registry.descriptors():
            self.binder.check(descriptor)
        self.registry.freeze()

        self.sessions = SessionTracker()
        self.gate = PermissionGate(permissions, messenger)
        self.dispatcher = Dispatcher(self.registry, self.gate, self.binder, self.sessions, event_logger)
        self.scheduler = Scheduler(self.registry, self.binder, self.sessions, event_logger)

        LOGGER.info(
            "Bot %s ready: %s command(s), %s auto-reply(s), %s scheduled task(s)",
            definition.name,
            len(self.registry.commands()),
            len(self.registry.auto_reply_candidates()),
            len(self.registry.scheduled_descriptors()),
        )

    async def handle(self, message: IncomingMessage) -> DispatchResult:
        return await self.dispatcher.dispatch(message)

    def start(self) -> None:
        self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()
