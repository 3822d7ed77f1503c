"""Live queries: a registry of (predicate, callback) subscriptions fed from commits.

Every commit the core makes is published here as (key, value) where value
is the committed record or None for a deletion. Each subscription keeps its
own view of the matching records, its own delivery queue and its own worker
task, so publishers never wait for subscribers and each subscriber sees
commits in the order they were published.

Callbacks receive the full ordered view (a list) and may be plain functions
or coroutine functions.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, TypeVar

from printflow.shared.telemetry.logging import get_logger
from printflow.shared.utils import generate_cuid

logger = get_logger(__name__)

T = TypeVar("T")

Predicate = Callable[[T], bool]
ViewCallback = Callable[[list[T]], Awaitable[None] | None]
Loader = Callable[[], Awaitable[Iterable[T]]]


class Subscription(Generic[T]):
    """Handle for one live query. Call unsubscribe() to stop deliveries."""

    def __init__(
        self,
        manager: LiveQueryManager[T],
        predicate: Predicate[T],
        callback: ViewCallback[T],
    ) -> None:
        self.id = generate_cuid()
        self._manager = manager
        self._predicate = predicate
        self._callback = callback
        self._view: dict[str, T] = {}
        self._queue: asyncio.Queue[tuple[str, T | None]] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self.active = True

    @property
    def view(self) -> list[T]:
        """Current ordered view (a copy)."""
        return self._manager.order(self._view.values())

    def enqueue(self, key: str, value: T | None) -> None:
        if self.active:
            self._queue.put_nowait((key, value))

    def seed(self, items: Iterable[T]) -> None:
        for item in items:
            if self._predicate(item):
                self._view[self._manager.key(item)] = item

    def start(self) -> None:
        self._worker = asyncio.create_task(self._run(), name=f"live-query-{self.id}")

    def apply(self, key: str, value: T | None) -> bool:
        """Fold one commit into the view; return whether the view changed."""
        present = key in self._view
        if value is not None and self._predicate(value):
            if present and self._view[key] == value:
                return False
            self._view[key] = value
            return True
        if present:
            del self._view[key]
            return True
        return False

    async def deliver(self) -> None:
        if not self.active:
            return
        try:
            result = self._callback(self.view)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Live query callback failed (subscription=%s)", self.id)

    async def _run(self) -> None:
        while self.active:
            key, value = await self._queue.get()
            try:
                if self.active and self.apply(key, value):
                    await self.deliver()
            finally:
                self._queue.task_done()

    async def wait_idle(self) -> None:
        """Wait until every change queued so far has been delivered."""
        await self._queue.join()

    async def unsubscribe(self) -> None:
        """Stop deliveries. No callback invocation starts after this returns."""
        if not self.active:
            return
        self.active = False
        self._manager.unregister(self)
        worker = self._worker
        if worker is None or worker is asyncio.current_task():
            return
        worker.cancel()
        try:
            await worker
        except asyncio.CancelledError:
            pass


class LiveQueryManager(Generic[T]):
    """Registry of live subscriptions over one record kind.

    Args:
        key: Returns the record's identity (e.g. task id).
        sort_key: Ordering key for the delivered view.
        descending: Deliver views in descending sort_key order.
        name: Used in log messages.
    """

    def __init__(
        self,
        *,
        key: Callable[[T], str],
        sort_key: Callable[[T], Any],
        descending: bool = True,
        name: str = "live",
    ) -> None:
        self.key = key
        self._sort_key = sort_key
        self._descending = descending
        self.name = name
        self._subscriptions: dict[str, Subscription[T]] = {}

    def __len__(self) -> int:
        return len(self._subscriptions)

    def order(self, items: Iterable[T]) -> list[T]:
        return sorted(items, key=self._sort_key, reverse=self._descending)

    async def subscribe(
        self,
        predicate: Predicate[T],
        callback: ViewCallback[T],
        *,
        loader: Loader[T],
    ) -> Subscription[T]:
        """Register a live query and deliver its current matches immediately.

        The subscription is registered before loader runs so no commit made
        while loading is lost.
        """
        subscription: Subscription[T] = Subscription(self, predicate, callback)
        self._subscriptions[subscription.id] = subscription
        try:
            subscription.seed(await loader())
        except Exception:
            self.unregister(subscription)
            raise
        await subscription.deliver()
        subscription.start()
        logger.debug(
            "%s: subscription %s registered (total=%d)",
            self.name,
            subscription.id,
            len(self._subscriptions),
        )
        return subscription

    def publish(self, key: str, value: T | None) -> None:
        """Queue a committed change (None means deleted) for every subscriber."""
        for subscription in list(self._subscriptions.values()):
            subscription.enqueue(key, value)

    def unregister(self, subscription: Subscription[T]) -> None:
        self._subscriptions.pop(subscription.id, None)

    async def wait_idle(self) -> None:
        """Wait until every subscriber has processed all published changes."""
        for subscription in list(self._subscriptions.values()):
            await subscription.wait_idle()

    async def close(self) -> None:
        """Unsubscribe everyone (application shutdown)."""
        for subscription in list(self._subscriptions.values()):
            await subscription.unsubscribe()
