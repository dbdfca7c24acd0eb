"""Top-level package for typed-events.

``events`` is the :mod:`typed_events.groups` module; build groups with
``events.group({...})``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import apply_config, load_config
    from .emitter import Emitter
    from .event import BaseEvent, Event, SealedEvent
    from .exceptions import (
        ConfigValidationError,
        EventConstructionError,
        InvalidGroupError,
        TypedEventsError,
    )
    from .factory import create_event_emitter, create_sealed_event_emitter
    from . import groups as events

__all__ = [
    "BaseEvent",
    "ConfigValidationError",
    "Emitter",
    "Event",
    "EventConstructionError",
    "InvalidGroupError",
    "SealedEvent",
    "TypedEventsError",
    "apply_config",
    "create_event_emitter",
    "create_sealed_event_emitter",
    "events",
    "load_config",
]


def __getattr__(name: str) -> Any:
    """Lazily import symbols so config and logging dependencies load on demand."""
    if name in {"create_event_emitter", "create_sealed_event_emitter"}:
        from .factory import create_event_emitter, create_sealed_event_emitter

        return {
            "create_event_emitter": create_event_emitter,
            "create_sealed_event_emitter": create_sealed_event_emitter,
        }[name]
    if name in {"BaseEvent", "Event", "SealedEvent"}:
        from .event import BaseEvent, Event, SealedEvent

        return {"BaseEvent": BaseEvent, "Event": Event, "SealedEvent": SealedEvent}[name]
    if name == "Emitter":
        from .emitter import Emitter

        return Emitter
    if name == "events":
        from . import groups

        return groups
    if name in {"apply_config", "load_config"}:
        from .config import apply_config, load_config

        return {"apply_config": apply_config, "load_config": load_config}[name]
    if name in {
        "ConfigValidationError",
        "EventConstructionError",
        "InvalidGroupError",
        "TypedEventsError",
    }:
        from .exceptions import (
            ConfigValidationError,
            EventConstructionError,
            InvalidGroupError,
            TypedEventsError,
        )

        return {
            "ConfigValidationError": ConfigValidationError,
            "EventConstructionError": EventConstructionError,
            "InvalidGroupError": InvalidGroupError,
            "TypedEventsError": TypedEventsError,
        }[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
