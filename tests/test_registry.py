"""Tests for the listener registry behind every event."""

from __future__ import annotations

import asyncio
import threading
import unittest

from typed_events.registry import ListenerRegistry, Subscription


class SubscriptionTests(unittest.TestCase):
    """Validate identity matching of a single subscription."""

    def test_matches_callback_by_identity(self) -> None:
        def callback(_: object) -> None:
            pass

        sub = Subscription(callback=callback)
        self.assertTrue(sub.matches(callback))
        self.assertFalse(sub.matches(lambda _: None))

    def test_subscriptions_compare_by_identity(self) -> None:
        first = Subscription(callback=print)
        second = Subscription(callback=print)
        self.assertNotEqual(first, second)
        self.assertEqual(len({first, second}), 2)


class ListenerRegistryTests(unittest.TestCase):
    """Validate add/remove/clear/dispatch bookkeeping."""

    def test_dispatch_without_subscribers_returns_false(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        self.assertFalse(registry.dispatch(1))

    def test_dispatch_visits_in_insertion_order(self) -> None:
        registry: ListenerRegistry[str] = ListenerRegistry()
        seen: list[tuple[str, str]] = []
        for name in ("a", "b", "c"):
            registry.add(lambda value, name=name: seen.append((name, value)))

        self.assertTrue(registry.dispatch("v"))
        self.assertEqual(seen, [("a", "v"), ("b", "v"), ("c", "v")])

    def test_removal_keeps_survivor_order(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        seen: list[str] = []

        def second(_: int) -> None:
            seen.append("second")

        registry.add(lambda _: seen.append("first"))
        registry.add(second)
        registry.add(lambda _: seen.append("third"))

        self.assertTrue(registry.remove(second))
        registry.dispatch(0)
        self.assertEqual(seen, ["first", "third"])

    def test_remove_drops_every_duplicate(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        calls: list[int] = []

        def callback(value: int) -> None:
            calls.append(value)

        registry.add(callback)
        registry.add(callback, once=True)
        self.assertEqual(len(registry), 2)

        self.assertTrue(registry.remove(callback))
        self.assertEqual(len(registry), 0)
        self.assertFalse(registry.dispatch(1))
        self.assertEqual(calls, [])

    def test_remove_unknown_returns_false(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        registry.add(print)
        self.assertFalse(registry.remove(lambda _: None))
        self.assertEqual(len(registry), 1)

    def test_clear_returns_count(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        for _ in range(5):
            registry.add(lambda _: None)
        self.assertEqual(registry.clear(), 5)
        self.assertEqual(registry.clear(), 0)
        self.assertFalse(registry.dispatch(1))

    def test_once_subscription_removed_after_dispatch(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        calls: list[int] = []
        registry.add(calls.append, once=True)

        self.assertTrue(registry.dispatch(1))
        self.assertFalse(registry.dispatch(2))
        self.assertEqual(calls, [1])

    def test_subscriber_added_during_dispatch_waits_for_next(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        late: list[int] = []

        def adder(_: int) -> None:
            registry.add(late.append)

        registry.add(adder, once=True)
        registry.dispatch(1)
        self.assertEqual(late, [])

        registry.dispatch(2)
        self.assertEqual(late, [2])

    def test_once_added_during_dispatch_is_pruned(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        late: list[int] = []

        def adder(_: int) -> None:
            registry.add(late.append, once=True)

        registry.add(adder, once=True)
        registry.dispatch(1)
        self.assertEqual(len(registry), 0)
        self.assertEqual(late, [])

    def test_remove_during_dispatch_does_not_break_iteration(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        seen: list[str] = []

        def last(_: int) -> None:
            seen.append("last")

        def remover(_: int) -> None:
            seen.append("remover")
            registry.remove(last)

        registry.add(remover)
        registry.add(last)

        self.assertTrue(registry.dispatch(1))
        # The snapshot still held ``last``; the next dispatch does not.
        self.assertEqual(seen, ["remover", "last"])
        registry.dispatch(2)
        self.assertEqual(seen, ["remover", "last", "remover"])

    def test_raising_subscriber_aborts_and_prunes_fired_once(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        seen: list[str] = []

        def boom(_: int) -> None:
            seen.append("boom")
            raise ValueError("subscriber failed")

        registry.add(lambda _: seen.append("before"), once=True)
        registry.add(boom, once=True)
        registry.add(lambda _: seen.append("after"), once=True)
        registry.add(lambda _: seen.append("steady"))

        with self.assertRaises(ValueError):
            registry.dispatch(1)
        self.assertEqual(seen, ["before", "boom"])
        self.assertEqual(len(registry), 2)

        self.assertTrue(registry.dispatch(2))
        self.assertEqual(seen, ["before", "boom", "after", "steady"])
        self.assertEqual(len(registry), 1)

    def test_once_added_before_raise_is_pruned(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        late: list[int] = []
        tail: list[int] = []

        def late_listener(value: int) -> None:
            late.append(value)

        def tail_listener(value: int) -> None:
            tail.append(value)

        def adder(_: int) -> None:
            registry.add(late_listener, once=True)

        def boom(_: int) -> None:
            raise ValueError("subscriber failed")

        registry.add(adder)
        registry.add(boom)
        registry.add(tail_listener, once=True)

        with self.assertRaises(ValueError):
            registry.dispatch(1)
        # Same outcome as a dispatch that did not raise: the late once is gone.
        self.assertEqual(len(registry), 3)
        self.assertFalse(registry.remove(late_listener))
        self.assertTrue(registry.remove(tail_listener))
        self.assertEqual(late, [])
        self.assertEqual(tail, [])

    def test_concurrent_adds_are_all_kept(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry(thread_safe=True)

        def worker() -> None:
            for _ in range(200):
                registry.add(lambda _: None)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(len(registry), 800)

    def test_unlocked_registry_behaves_the_same(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry(thread_safe=False)
        self.assertFalse(registry.thread_safe)
        calls: list[int] = []
        registry.add(calls.append)
        self.assertTrue(registry.dispatch(3))
        self.assertEqual(calls, [3])

    def test_add_awaitable_requires_loop(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        with self.assertRaises(RuntimeError):
            registry.add_awaitable()
        self.assertEqual(len(registry), 0)

    def test_add_awaitable_with_explicit_loop(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        loop = asyncio.new_event_loop()
        try:
            future = registry.add_awaitable(loop)
            self.assertTrue(registry.dispatch(7))
            self.assertEqual(future.result(), 7)
            self.assertFalse(registry.dispatch(8))
        finally:
            loop.close()


class ListenerRegistryAwaitableTests(unittest.IsolatedAsyncioTestCase):
    """Validate the awaitable form of one-shot subscription."""

    async def test_future_resolves_with_next_value_only(self) -> None:
        registry: ListenerRegistry[str] = ListenerRegistry()
        future = registry.add_awaitable()

        self.assertTrue(registry.dispatch("first"))
        self.assertFalse(registry.dispatch("second"))
        self.assertEqual(await future, "first")

    async def test_remove_by_future_cancels_subscription(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        future = registry.add_awaitable()
        continuations: list[asyncio.Future[int]] = []
        future.add_done_callback(continuations.append)

        self.assertTrue(registry.remove(future))
        self.assertFalse(registry.dispatch(1))
        await asyncio.sleep(0)
        self.assertFalse(future.done())
        self.assertEqual(continuations, [])

    async def test_dispatch_from_worker_thread_resolves_future(self) -> None:
        registry: ListenerRegistry[str] = ListenerRegistry()
        asyncio.get_running_loop().set_debug(True)
        future = registry.add_awaitable()
        results: list[bool] = []
        errors: list[BaseException] = []

        def worker() -> None:
            try:
                results.append(registry.dispatch("from-thread"))
            except BaseException as exc:
                errors.append(exc)

        thread = threading.Thread(target=worker)
        thread.start()
        value = await asyncio.wait_for(future, timeout=2)
        await asyncio.to_thread(thread.join)

        self.assertEqual(value, "from-thread")
        self.assertEqual(results, [True])
        self.assertEqual(errors, [])
        self.assertEqual(len(registry), 0)

    async def test_cancelled_future_is_skipped_on_dispatch(self) -> None:
        registry: ListenerRegistry[int] = ListenerRegistry()
        future = registry.add_awaitable()
        future.cancel()

        self.assertTrue(registry.dispatch(1))
        self.assertTrue(future.cancelled())
        self.assertEqual(len(registry), 0)


if __name__ == "__main__":
    unittest.main()
