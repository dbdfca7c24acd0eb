"""Domain exception hierarchy for typed events."""

from __future__ import annotations


class TypedEventsError(RuntimeError):
    """Base class for all typed-events errors."""


class EventConstructionError(TypedEventsError, TypeError):
    """Raised when an event is constructed outside the factory functions."""


class InvalidGroupError(TypedEventsError, TypeError):
    """Raised when an event group contains something other than events."""


class ConfigValidationError(TypedEventsError):
    """Raised when configuration cannot be validated safely."""
