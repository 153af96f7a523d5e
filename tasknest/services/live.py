"""
Live task snapshots.

A ``TaskFeed`` keeps the open subscriptions per owner. Whenever an owner's
tasks change, the writer publishes the owner's complete task list and every
subscription of that owner receives it as a ``TaskSnapshot``. Snapshots are
full replacements: a subscriber that falls behind only ever sees the newest
one.

``publish`` may be called from any thread (sync FastAPI endpoints run in a
worker pool); delivery is handed to the subscriber's event loop.
"""
import asyncio
import logging
import threading
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Optional, Set

from sqlmodel import Session, select

from ..models.task import Task
from ..schemas.task import TaskRead

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskSnapshot:
    owner_id: uuid.UUID
    tasks: List[TaskRead]
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Subscription:
    """Handle for one live query. Iterate it to receive snapshots; cancel it to stop."""

    def __init__(self, feed: "TaskFeed", owner_id: uuid.UUID, loop: asyncio.AbstractEventLoop):
        self.owner_id = owner_id
        self._feed = feed
        self._loop = loop
        # At most one undelivered snapshot is kept.
        self._queue: "asyncio.Queue[Optional[TaskSnapshot]]" = asyncio.Queue(maxsize=1)
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._feed._remove(self)
        self._post(None)

    def _deliver(self, snapshot: TaskSnapshot) -> None:
        # Called from any thread
        if not self._cancelled:
            self._post(snapshot)

    def _post(self, item: Optional[TaskSnapshot]) -> None:
        try:
            self._loop.call_soon_threadsafe(self._offer, item)
        except RuntimeError:
            # Event loop already closed; the subscriber is gone.
            logger.debug("Dropping snapshot for closed loop (owner=%s)", self.owner_id)

    def _offer(self, snapshot: Optional[TaskSnapshot]) -> None:
        # Runs on the subscriber's loop; None marks the end of the stream
        if self._cancelled and snapshot is not None:
            return
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(snapshot)

    async def next(self) -> TaskSnapshot:
        """Wait for the next snapshot. Raises StopAsyncIteration once cancelled."""
        if self._cancelled and self._queue.empty():
            raise StopAsyncIteration
        snapshot = await self._queue.get()
        if snapshot is None:
            raise StopAsyncIteration
        return snapshot

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> TaskSnapshot:
        return await self.next()


class TaskFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: Dict[uuid.UUID, Set[Subscription]] = {}

    def open(self, owner_id: uuid.UUID) -> Subscription:
        """Register a subscription bound to the running event loop."""
        subscription = Subscription(self, owner_id, asyncio.get_running_loop())
        with self._lock:
            self._subscriptions.setdefault(owner_id, set()).add(subscription)
        logger.info("Live subscription opened (owner=%s)", owner_id)
        return subscription

    @asynccontextmanager
    async def subscribe(self, owner_id: uuid.UUID) -> AsyncIterator[Subscription]:
        subscription = self.open(owner_id)
        try:
            yield subscription
        finally:
            subscription.cancel()

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscriptions = self._subscriptions.get(subscription.owner_id)
            if subscriptions is None:
                return
            subscriptions.discard(subscription)
            if not subscriptions:
                del self._subscriptions[subscription.owner_id]
        logger.info("Live subscription closed (owner=%s)", subscription.owner_id)

    def subscriber_count(self, owner_id: uuid.UUID) -> int:
        with self._lock:
            return len(self._subscriptions.get(owner_id, ()))

    def publish(self, owner_id: uuid.UUID, tasks: List[TaskRead]) -> int:
        """Push a full snapshot to every subscription of ``owner_id``. Returns the fan-out."""
        with self._lock:
            targets = list(self._subscriptions.get(owner_id, ()))
        if not targets:
            return 0
        snapshot = TaskSnapshot(owner_id=owner_id, tasks=list(tasks))
        for subscription in targets:
            subscription._deliver(snapshot)
        logger.debug("Published %d tasks to %d subscriber(s) (owner=%s)", len(snapshot.tasks), len(targets), owner_id)
        return len(targets)


def load_snapshot(session: Session, owner_id: uuid.UUID) -> List[TaskRead]:
    """The owner's complete task list, oldest first."""
    rows = session.exec(
        select(Task).where(Task.user_id == owner_id).order_by(Task.created_at)
    ).all()
    return [TaskRead.model_validate(row) for row in rows]


def publish_snapshot(feed: TaskFeed, session: Session, owner_id: uuid.UUID) -> int:
    """Reload the owner's tasks and broadcast them. Skips the query when nobody listens."""
    if feed.subscriber_count(owner_id) == 0:
        return 0
    return feed.publish(owner_id, load_snapshot(session, owner_id))
