"""
In-process change feed behind live assessment subscriptions.

Repositories publish after every committed create; subscribers registered for
the same (namespace, owner) pair re-read their full snapshot and receive it.
"""

from __future__ import annotations

import itertools
import threading
import weakref
from collections.abc import Callable, Sequence
from types import TracebackType

from ..domain.models import Assessment
from ..infrastructure.exceptions import PersistenceError
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)

FeedKey = tuple[str, str]  # (namespace, owner_id)
SnapshotListener = Callable[[list[Assessment]], None]
ErrorListener = Callable[[PersistenceError], None]


class ChangeFeed:
    """Registry of refresh callbacks keyed by owner."""

    def __init__(self):
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._listeners: dict[int, tuple[FeedKey, Callable[[], None]]] = {}

    def register(self, namespace: str, owner_id: str, callback: Callable[[], None]) -> int:
        with self._lock:
            token = next(self._tokens)
            self._listeners[token] = ((namespace, owner_id), callback)
        return token

    def unregister(self, token: int) -> bool:
        with self._lock:
            return self._listeners.pop(token, None) is not None

    def listener_count(self, namespace: str | None = None, owner_id: str | None = None) -> int:
        with self._lock:
            keys = [key for key, _ in self._listeners.values()]
        if namespace is None:
            return len(keys)
        return sum(1 for key in keys if key == (namespace, owner_id))

    def publish(self, namespace: str, owner_id: str) -> int:
        """Notify every listener of the owner. Returns how many were notified."""
        with self._lock:
            targets = [cb for key, cb in self._listeners.values() if key == (namespace, owner_id)]

        for callback in targets:
            try:
                callback()
            except Exception:
                # the write already committed; a broken observer must not fail it
                logger.exception("Assessment listener failed", extra={"user_id": owner_id})
        return len(targets)


class Subscription:
    """Handle returned by ``watch``; closing it always unregisters."""

    def __init__(self, feed: ChangeFeed, token: int):
        self._feed = feed
        self._token = token
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._feed.unregister(self._token)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class LiveAssessmentList:
    """
    Latest snapshot of an owner's assessments, kept current by a subscription.

    Each delivery replaces the whole snapshot under a lock, so readers see
    either the previous list or the new one. A failed refresh leaves an empty
    list with ``error`` set until the next successful delivery.

    The feed only holds the list weakly: once the owning context drops it
    (e.g. a Streamlit session ends) the subscription is released.
    """

    def __init__(self, repository):
        self._lock = threading.Lock()
        self._items: tuple[Assessment, ...] = ()
        self._error: PersistenceError | None = None
        self._version = 0
        self.owner_id: str = repository.owner_id

        ref = weakref.ref(self)

        def deliver(snapshot: Sequence[Assessment]) -> None:
            live = ref()
            if live is not None:
                live._replace(snapshot)

        def fail(error: PersistenceError) -> None:
            live = ref()
            if live is not None:
                live._fail(error)

        self._subscription = repository.watch(deliver, on_error=fail)
        self._finalizer = weakref.finalize(self, self._subscription.close)

    def _replace(self, snapshot: Sequence[Assessment]) -> None:
        items = tuple(snapshot)
        with self._lock:
            self._items = items
            self._error = None
            self._version += 1

    def _fail(self, error: PersistenceError) -> None:
        with self._lock:
            self._items = ()
            self._error = error
            self._version += 1

    @property
    def items(self) -> tuple[Assessment, ...]:
        with self._lock:
            return self._items

    @property
    def latest(self) -> Assessment | None:
        items = self.items
        return items[0] if items else None

    @property
    def error(self) -> PersistenceError | None:
        with self._lock:
            return self._error

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    @property
    def closed(self) -> bool:
        return self._subscription.closed

    def close(self) -> None:
        self._finalizer()

    def __enter__(self) -> LiveAssessmentList:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
