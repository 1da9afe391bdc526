"""Argument binding for handler invocations.

A handler declares an ordered tuple of parameter roles. The binder turns
that tuple plus a call context into the positional arguments for the call:

- ``chat_id`` in the first slot receives the chat id,
- ``user_id`` in the second slot receives the acting user id, or ``None``
  when there is no acting user (scheduled invocations),
- any other role is looked up among the registered service singletons.

Anything else binds to :data:`UNRESOLVED`. :meth:`ArgumentBinder.check`
reports such slots up front so misconfigured bots fail at startup.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.errors import UnresolvableSignatureError
from core.models import CHAT_ID, USER_ID, HandlerDescriptor

CHAT_ID_SLOT = 0
USER_ID_SLOT = 1


class _Unresolved:
    _instance: Optional["_Unresolved"] = None

    def __new__(cls) -> "_Unresolved":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESOLVED"

    def __bool__(self) -> bool:
        return False


UNRESOLVED: Any = _Unresolved()


class ArgumentBinder:
    """Resolves parameter roles against the call context and service singletons."""

    def __init__(self, services: Mapping[str, Any]) -> None:
        for reserved in (CHAT_ID, USER_ID):
            if reserved in services:
                raise ValueError(f"{reserved!r} is an identity role and cannot name a service")
        self._services: Dict[str, Any] = dict(services)

    @property
    def service_names(self) -> frozenset:
        return frozenset(self._services)

    def problems(self, signature: Sequence[str]) -> List[str]:
        """Describe every slot in ``signature`` that cannot be resolved."""

        found: List[str] = []
        for index, role in enumerate(signature):
            if role == CHAT_ID:
                if index != CHAT_ID_SLOT:
                    found.append(f"slot {index}: {CHAT_ID!r} is only bound in slot {CHAT_ID_SLOT}")
            elif role == USER_ID:
                if index != USER_ID_SLOT:
                    found.append(f"slot {index}: {USER_ID!r} is only bound in slot {USER_ID_SLOT}")
            elif role not in self._services:
                known = ", ".join(sorted(self._services)) or "none"
                found.append(f"slot {index}: unknown role {role!r} (services: {known})")
        return found

    def check(self, descriptor: HandlerDescriptor) -> None:
        """Raise :class:`UnresolvableSignatureError` if any slot is unresolvable."""

        problems = self.problems(descriptor.parameter_signature)
        if problems:
            raise UnresolvableSignatureError(descriptor.name, problems)

    def bind(self, signature: Sequence[str], chat_id: int, user_id: Optional[int]) -> List[Any]:
        """Return the positional arguments for one invocation."""

        args: List[Any] = []
        for index, role in enumerate(signature):
            if role == CHAT_ID and index == CHAT_ID_SLOT:
                args.append(chat_id)
            elif role == USER_ID and index == USER_ID_SLOT:
                args.append(user_id)
            elif role in self._services:
                args.append(self._services[role])
            else:
                args.append(UNRESOLVED)
        return args

    async def call(self, descriptor: HandlerDescriptor, chat_id: int, user_id: Optional[int]) -> Any:
        """Bind arguments and run the handler.

        Coroutine functions are awaited on the loop. Plain callables run in a
        worker thread via :func:`asyncio.to_thread`, and an awaitable they
        return is awaited afterwards.
        """

        args = self.bind(descriptor.parameter_signature, chat_id, user_id)
        if inspect.iscoroutinefunction(descriptor.invoke):
            return await descriptor.invoke(*args)
        result = await asyncio.to_thread(descriptor.invoke, *args)
        if inspect.isawaitable(result):
            result = await result
        return result
