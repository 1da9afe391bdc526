"""Handler registry and the declarative registration surface.

Bots declare handlers explicitly through :class:`BotDefinition`; every
declaration becomes a :class:`HandlerDescriptor` stored in a
:class:`HandlerRegistry`. The registry is filled once at startup and frozen
before the dispatcher and scheduler read it, so it needs no locking.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from core.errors import DuplicateCommandError, RegistryFrozenError
from core.models import HandlerDescriptor, TriggerKind

LOGGER = logging.getLogger(__name__)

Handler = Callable[..., Any]


class HandlerRegistry:
    """Lookup tables for command, auto-reply and scheduled handlers.

    Commands are keyed by their exact string; registering the same command
    twice raises :class:`DuplicateCommandError`. Auto-reply and scheduled
    handlers keep registration order, which is the order the dispatcher
    scans auto-reply triggers in.
    """

    def __init__(self) -> None:
        self._commands: Dict[str, HandlerDescriptor] = {}
        self._auto_replies: List[HandlerDescriptor] = []
        self._scheduled: List[HandlerDescriptor] = []
        self._frozen = False

    def register(self, descriptor: HandlerDescriptor) -> HandlerDescriptor:
        """Add one descriptor to the table matching its trigger kind."""

        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register {descriptor.name!r}: the registry is frozen after startup"
            )

        kind = descriptor.trigger_kind
        if kind is TriggerKind.COMMAND:
            existing = self._commands.get(descriptor.trigger_value)
            if existing is not None:
                raise DuplicateCommandError(descriptor.trigger_value, existing.name, descriptor.name)
            self._commands[descriptor.trigger_value] = descriptor
        elif kind is TriggerKind.AUTO_REPLY:
            for earlier in self._auto_replies:
                if earlier.trigger_value in descriptor.trigger_value:
                    LOGGER.warning(
                        "Auto-reply %s can never fire: %s (trigger %r) is registered first and always matches",
                        descriptor.name,
                        earlier.name,
                        earlier.trigger_value,
                    )
                    break
            self._auto_replies.append(descriptor)
        else:
            self._scheduled.append(descriptor)

        LOGGER.debug("Registered %s handler %s", kind.value, descriptor.name)
        return descriptor

    def register_all(self, descriptors: Iterable[HandlerDescriptor]) -> None:
        for descriptor in descriptors:
            self.register(descriptor)

    def freeze(self) -> None:
        """Mark the end of startup registration."""

        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup_command(self, text: str) -> Optional[HandlerDescriptor]:
        """Exact-string command lookup."""

        return self._commands.get(text)

    def commands(self) -> Tuple[HandlerDescriptor, ...]:
        return tuple(self._commands.values())

    def auto_reply_candidates(self) -> Tuple[HandlerDescriptor, ...]:
        """Auto-reply descriptors in registration order."""

        return tuple(self._auto_replies)

    def scheduled_descriptors(self) -> Tuple[HandlerDescriptor, ...]:
        return tuple(self._scheduled)

    def descriptors(self) -> List[HandlerDescriptor]:
        """Every registered descriptor: commands, then auto-replies, then scheduled."""

        return [*self._commands.values(), *self._auto_replies, *self._scheduled]

    def __len__(self) -> int:
        return len(self._commands) + len(self._auto_replies) + len(self._scheduled)


class BotDefinition:
    """Declarative registration surface for bot authors.

    Example::

        bot = BotDefinition("demo")

        @bot.command("/ping", params=(CHAT_ID, MESSENGER))
        async def ping(chat_id, messenger):
            await messenger.send_text(chat_id, "pong")

    Parameter roles are declared explicitly in ``params``; nothing is
    inferred from the handler's signature.
    """

    def __init__(self, name: str = "bot", registry: Optional[HandlerRegistry] = None) -> None:
        self.name = name
        self.registry = registry if registry is not None else HandlerRegistry()
        self._services: Dict[str, Any] = {}

    def command(
        self,
        command: str,
        *,
        params: Sequence[str] = (),
        admin_only: bool = False,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Register the decorated callable for messages equal to ``command``."""

        def decorator(func: Handler) -> Handler:
            self.registry.register(
                HandlerDescriptor(
                    name=name or _handler_name(func),
                    trigger_kind=TriggerKind.COMMAND,
                    trigger_value=command,
                    admin_only=admin_only,
                    parameter_signature=tuple(params),
                    invoke=func,
                )
            )
            return func

        return decorator

    def auto_reply(
        self,
        trigger: str,
        *,
        params: Sequence[str] = (),
        admin_only: bool = False,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Register the decorated callable for messages containing ``trigger``.

        Matching is case-insensitive. When several triggers match one
        message, only the one registered first fires.
        """

        def decorator(func: Handler) -> Handler:
            self.registry.register(
                HandlerDescriptor(
                    name=name or _handler_name(func),
                    trigger_kind=TriggerKind.AUTO_REPLY,
                    trigger_value=trigger,
                    admin_only=admin_only,
                    parameter_signature=tuple(params),
                    invoke=func,
                )
            )
            return func

        return decorator

    def scheduled(
        self,
        interval_seconds: float,
        *,
        params: Sequence[str] = (),
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Run the decorated callable every ``interval_seconds`` for each active chat."""

        def decorator(func: Handler) -> Handler:
            self.registry.register(
                HandlerDescriptor(
                    name=name or _handler_name(func),
                    trigger_kind=TriggerKind.SCHEDULED,
                    interval_seconds=interval_seconds,
                    parameter_signature=tuple(params),
                    invoke=func,
                )
            )
            return func

        return decorator

    def provide(self, name: str, service: Any) -> None:
        """Expose an extra named service to handlers that declare it in ``params``."""

        self._services[name] = service

    @property
    def services(self) -> Dict[str, Any]:
        return dict(self._services)


def _handler_name(func: Handler) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)
