"""Factories that build bound event/emitter pairs."""

from __future__ import annotations

from typing import Any, TypeVar

from .config import current_config
from .emitter import Emitter
from .event import _FACTORY_TOKEN, Event, SealedEvent
from .registry import ListenerRegistry

T = TypeVar("T")


def _new_registry(thread_safe: bool | None) -> ListenerRegistry[Any]:
    if thread_safe is None:
        thread_safe = bool(current_config()["registry"]["thread_safe"])
    return ListenerRegistry(thread_safe=thread_safe)


def create_event_emitter(*, thread_safe: bool | None = None) -> Emitter[Any]:
    """Create an :class:`Event` and return its emitter.

    The event can dispatch on its own through ``event.emit``, which is the
    returned emitter. Unpack the result as ``event, emit`` or use
    ``emit.event``. ``thread_safe`` overrides the configured registry default.
    """
    event: Event[Any] = Event(_FACTORY_TOKEN, _new_registry(thread_safe))
    return event.emit


def create_sealed_event_emitter(*, thread_safe: bool | None = None) -> Emitter[Any]:
    """Create a :class:`SealedEvent` and the only emitter able to dispatch to it."""
    registry = _new_registry(thread_safe)
    event: SealedEvent[Any] = SealedEvent(_FACTORY_TOKEN, registry)
    return Emitter(registry, event)
