"""The dispatch half of an event/emitter pair."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .registry import ListenerRegistry

if TYPE_CHECKING:
    from .event import BaseEvent

T = TypeVar("T")


class Emitter(Generic[T]):
    """Callable that pushes a value to every subscriber of one event.

    Besides being callable, an emitter exposes the event it dispatches to and
    itself, so it unpacks either way::

        emit = create_event_emitter()
        emit.event.on(print)
        event, emit = create_event_emitter()
    """

    def __init__(self, registry: ListenerRegistry[T], event: BaseEvent[T]) -> None:
        self._registry = registry
        self.event = event

    def __call__(self, value: T | None = None) -> bool:
        """Dispatch ``value`` and report whether anyone was listening.

        ``value`` may be omitted for signal events; it is then delivered as
        ``None``. Whatever is passed is forwarded verbatim.
        """
        return self._registry.dispatch(value)  # type: ignore[arg-type]

    @property
    def emit(self) -> Emitter[T]:
        """Return this emitter itself."""
        return self

    def __iter__(self) -> Iterator[Any]:
        yield self.event
        yield self

    def __repr__(self) -> str:
        return f"<{type(self).__name__} for {type(self.event).__name__} listeners={len(self._registry)}>"
