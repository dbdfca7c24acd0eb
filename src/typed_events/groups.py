"""Named groups of events.

A group is a read-only mapping of name to event. The package exports this
module as ``typed_events.events``; it is a namespace, not a callable, so
groups are built with ``events.group(...)``::

    group = events.group({"opened": opened_event, "closed": closed_event})
    both = events.concat(group, {"failed": failed_event})
    events.off_all(both)
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from types import MappingProxyType
from typing import TypeVar

from .event import BaseEvent
from .exceptions import InvalidGroupError

LOGGER = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseEvent)


def _validated_copy(events: Mapping[str, E]) -> dict[str, E]:
    if not isinstance(events, Mapping):
        raise InvalidGroupError(
            f"Expected a mapping of name to event, got {type(events).__name__}."
        )
    copied: dict[str, E] = {}
    for name, event in events.items():
        if not isinstance(name, str):
            raise InvalidGroupError(f"Event names must be strings, got {name!r}.")
        if not isinstance(event, BaseEvent):
            raise InvalidGroupError(
                f"Group entry {name!r} is {type(event).__name__}, not an event."
            )
        copied[name] = event
    return copied


def group(events: Mapping[str, E]) -> Mapping[str, E]:
    """Freeze ``events`` into a read-only mapping."""
    return MappingProxyType(_validated_copy(events))


def concat(first: Mapping[str, E], second: Mapping[str, E]) -> Mapping[str, E]:
    """Combine two groups into a new one; ``second`` wins on name clashes."""
    merged = _validated_copy(first)
    merged.update(_validated_copy(second))
    return MappingProxyType(merged)


def off_all(events: Mapping[str, BaseEvent]) -> None:
    """Remove every listener from every event in the group."""
    removed = 0
    for event in events.values():
        removed += event.off_all()
    LOGGER.debug(
        "group.off_all",
        extra={"event": "group.off_all", "events": len(events), "removed": removed},
    )
