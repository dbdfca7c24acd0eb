"""Subscribable event variants.

``BaseEvent`` carries the subscribe capability set. ``SealedEvent`` adds
nothing to it, so only the emitter returned alongside it can dispatch.
``Event`` composes its own :class:`~typed_events.emitter.Emitter` as ``emit``.

Events are created through :mod:`typed_events.factory` only.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any, Generic, TypeVar, overload

from .emitter import Emitter
from .exceptions import EventConstructionError
from .registry import ListenerRegistry

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# Handed to event constructors by the factory; anything else is rejected.
_FACTORY_TOKEN = object()


class BaseEvent(Generic[T]):
    """Subscribe/unsubscribe surface shared by every event variant."""

    def __init__(self, token: object, registry: ListenerRegistry[T]) -> None:
        if token is not _FACTORY_TOKEN:
            LOGGER.warning(
                "event.construction.rejected",
                extra={"event": "event.construction.rejected", "cls": type(self).__name__},
            )
            raise EventConstructionError(
                f"{type(self).__name__} must be created with "
                "create_event_emitter() or create_sealed_event_emitter()."
            )
        self._registry = registry

    def on(self, callback: Callable[[T], Any]) -> None:
        """Call ``callback`` on every emit until it is removed."""
        self._registry.add(callback)

    @overload
    def once(self, callback: Callable[[T], Any]) -> None: ...

    @overload
    def once(self, callback: None = None) -> asyncio.Future[T]: ...

    def once(self, callback: Callable[[T], Any] | None = None) -> asyncio.Future[T] | None:
        """Listen for the next emit only.

        With a callback, the callback is invoked once and then removed.
        Without one, returns a future that resolves with the next emitted
        value; pass that future to :meth:`off` to cancel it. The future belongs
        to the running event loop, so calling ``once()`` from synchronous code
        raises ``RuntimeError``; use ``once_awaitable(loop=...)`` there. Emits
        from other threads are handed to that loop safely.
        """
        if callback is None:
            return self.once_awaitable()
        self.once_callback(callback)
        return None

    def once_callback(self, callback: Callable[[T], Any]) -> None:
        self._registry.add(callback, once=True)

    def once_awaitable(
        self, loop: asyncio.AbstractEventLoop | None = None
    ) -> asyncio.Future[T]:
        return self._registry.add_awaitable(loop)

    def off(self, listener: Callable[[T], Any] | asyncio.Future[T]) -> bool:
        """Remove a callback or pending ``once()`` future, regardless of once vs on.

        Every subscription matching ``listener`` by identity is removed.
        Returns True if something was removed.
        """
        return self._registry.remove(listener)

    def off_all(self) -> int:
        """Remove all subscriptions and return how many were removed."""
        return self._registry.clear()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} listeners={len(self._registry)}>"


class SealedEvent(BaseEvent[T]):
    """Event whose dispatch capability lives only in its paired emitter."""


class Event(BaseEvent[T]):
    """Event that can also dispatch to its own subscribers via ``emit``.

    ``event.emit`` and the emitter returned by the factory share one
    registry, so either notifies the same subscribers.
    """

    def __init__(self, token: object, registry: ListenerRegistry[T]) -> None:
        super().__init__(token, registry)
        self.emit: Emitter[T] = Emitter(registry, self)
