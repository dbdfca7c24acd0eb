"""Ordered listener bookkeeping behind a single event.

Every event owns exactly one :class:`ListenerRegistry`. The paired emitter
holds a reference to the same registry and only ever dispatches through it.

Dispatch works on a snapshot of the subscriptions and prunes fired one-shot
entries afterwards, so subscribers may freely subscribe or unsubscribe while
being called:

    registry = ListenerRegistry()
    registry.add(print)
    registry.add(print, once=True)
    registry.dispatch("hello")   # prints twice, returns True
    registry.dispatch("again")   # prints once, returns True
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
import logging
import threading
from typing import Any, Generic, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(eq=False)
class Subscription(Generic[T]):
    """One registered callback plus its one-shot flag."""

    callback: Callable[[T], Any]
    once: bool = False
    # Set only for subscriptions created by ``add_awaitable``.
    pending: asyncio.Future[T] | None = None

    def matches(self, identity: object) -> bool:
        """Return True when ``identity`` is this callback or its future."""
        if identity is self.callback:
            return True
        return self.pending is not None and identity is self.pending


def _set_if_pending(future: asyncio.Future[T], value: T) -> None:
    # The awaiting side may have cancelled the future already.
    if not future.done():
        future.set_result(value)


def _resolve_future(future: asyncio.Future[T], value: T) -> None:
    loop = future.get_loop()
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop or not loop.is_running():
        _set_if_pending(future, value)
        return
    # Dispatch is happening on another thread; hand the result to the loop.
    loop.call_soon_threadsafe(_set_if_pending, future, value)


class ListenerRegistry(Generic[T]):
    """Insertion-ordered list of subscriptions for one event."""

    def __init__(self, thread_safe: bool = True) -> None:
        self._subscriptions: list[Subscription[T]] = []
        self.thread_safe = thread_safe
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if thread_safe else nullcontext()
        )

    def __len__(self) -> int:
        return len(self._subscriptions)

    def add(self, callback: Callable[[T], Any], once: bool = False) -> None:
        """Append a subscription. Duplicate callbacks are separate entries."""
        with self._lock:
            self._subscriptions.append(Subscription(callback=callback, once=once))
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug(
                "registry.subscribe",
                extra={"event": "registry.subscribe", "once": once},
            )

    def add_awaitable(
        self, loop: asyncio.AbstractEventLoop | None = None
    ) -> asyncio.Future[T]:
        """Subscribe once and return a future resolved by the next dispatch.

        The future is bound to ``loop`` or, when omitted, to the running event
        loop; calling this outside a running loop without ``loop`` raises
        ``RuntimeError``. The returned future doubles as the identity that
        :meth:`remove` accepts to cancel the subscription.
        """
        target_loop = loop if loop is not None else asyncio.get_running_loop()
        future: asyncio.Future[T] = target_loop.create_future()

        def resolve(value: T) -> None:
            _resolve_future(future, value)

        with self._lock:
            self._subscriptions.append(
                Subscription(callback=resolve, once=True, pending=future)
            )
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug(
                "registry.subscribe",
                extra={"event": "registry.subscribe", "once": True, "awaitable": True},
            )
        return future

    def remove(self, identity: object) -> bool:
        """Remove every subscription whose callback or future is ``identity``.

        Matching is by reference, not equality. Returns True if anything was
        removed.
        """
        with self._lock:
            original_length = len(self._subscriptions)
            self._subscriptions = [
                sub for sub in self._subscriptions if not sub.matches(identity)
            ]
            removed = original_length - len(self._subscriptions)
        if removed and LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug(
                "registry.unsubscribe",
                extra={"event": "registry.unsubscribe", "removed": removed},
            )
        return removed > 0

    def clear(self) -> int:
        """Drop every subscription and return how many there were."""
        with self._lock:
            count = len(self._subscriptions)
            self._subscriptions = []
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug("registry.clear", extra={"event": "registry.clear", "removed": count})
        return count

    def dispatch(self, value: T) -> bool:
        """Invoke every current subscriber with ``value``, in order.

        Returns True if there was at least one subscriber. Exceptions raised by
        a subscriber propagate immediately; later subscribers are not called.
        One-shot entries that already ran, or that were added during this
        dispatch, are pruned either way; one-shot entries after the raising
        subscriber stay.
        """
        with self._lock:
            snapshot = tuple(self._subscriptions)
            invoked: set[Subscription[T]] = set()
            try:
                for sub in snapshot:
                    invoked.add(sub)
                    sub.callback(value)
            except BaseException:
                pending = set(snapshot) - invoked
                self._subscriptions = [
                    sub
                    for sub in self._subscriptions
                    if not sub.once or sub in pending
                ]
                raise
            self._subscriptions = [sub for sub in self._subscriptions if not sub.once]
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug(
                "registry.dispatch",
                extra={"event": "registry.dispatch", "listeners": len(snapshot)},
            )
        return bool(snapshot)
