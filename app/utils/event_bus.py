"""
In-process publish/subscribe for garden activity.

Topics are dotted strings such as ``activity.plant_added``. A subscription
ending in ``.*`` receives every topic under that prefix. Payloads may be
dataclasses, Pydantic models or plain dicts; subscribers always receive a
plain dict (or the primitive that was published).

Callbacks run on a small worker pool fed by a bounded queue. When the
queue is full the event is dropped and counted instead of blocking the
publisher. ``worker_count=0`` delivers inline, which is what tests use.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict
from dataclasses import asdict, is_dataclass
from enum import Enum
from queue import Empty, Full, Queue
from typing import Any, Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]

_STOP = object()


def _topic(name: Enum | str) -> str:
    return name.value if isinstance(name, Enum) else str(name)


def _normalize(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump()
    if is_dataclass(data) and not isinstance(data, type):
        return asdict(data)
    return data


class EventBus:
    """Topic-based event routing shared by the services of one container."""

    def __init__(self, queue_size: int = 1024, worker_count: int = 2) -> None:
        self._subscribers: dict[str, list[Callback]] = defaultdict(list)
        self._lock = threading.Lock()
        self._queue: Queue = Queue(maxsize=max(1, queue_size))
        self._queue_size = max(1, queue_size)
        self._workers: list[threading.Thread] = []
        self._worker_count = max(0, worker_count)
        self._published = 0
        self._dropped = 0
        self._drops_by_topic: dict[str, int] = defaultdict(int)
        self._closed = False

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, topic: Enum | str, callback: Callback) -> Callable[[], None]:
        """Register *callback* for *topic* (or ``prefix.*``); returns an unsubscribe function."""
        name = _topic(topic)
        with self._lock:
            self._subscribers[name].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(name, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def listener(self, topic: Enum | str) -> Callable[[Callback], Callback]:
        """Decorator form of :meth:`subscribe`."""

        def decorator(func: Callback) -> Callback:
            self.subscribe(topic, func)
            return func

        return decorator

    def _callbacks_for(self, name: str) -> list[Callback]:
        with self._lock:
            matched = list(self._subscribers.get(name, []))
            for pattern, callbacks in self._subscribers.items():
                if pattern.endswith(".*") and name.startswith(pattern[:-1]):
                    matched.extend(callbacks)
        return matched

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def publish(self, topic: Enum | str, data: Any | None = None) -> int:
        """Queue *data* for every subscriber of *topic*; returns how many were reached."""
        name = _topic(topic)
        callbacks = self._callbacks_for(name)
        if not callbacks or self._closed:
            return 0

        payload = _normalize(data)
        self._published += 1
        if self._worker_count == 0:
            for callback in callbacks:
                self._invoke(name, callback, payload)
            return len(callbacks)

        self._ensure_workers()
        queued = 0
        for callback in callbacks:
            try:
                self._queue.put_nowait((name, callback, payload))
                queued += 1
            except Full:
                self._record_drop(name)
        return queued

    def _invoke(self, name: str, callback: Callback, payload: Any) -> None:
        try:
            callback(payload)
        except Exception as exc:
            logger.error("Subscriber for %s failed: %s", name, exc, exc_info=True)

    def _record_drop(self, name: str) -> None:
        self._dropped += 1
        self._drops_by_topic[name] += 1
        if self._dropped == 1 or self._dropped % 50 == 0:
            logger.warning(
                "EventBus queue full (size=%d); dropped %d event(s) so far, latest %s",
                self._queue_size, self._dropped, name,
            )

    # ------------------------------------------------------------------
    # Workers
    # ------------------------------------------------------------------

    def _ensure_workers(self) -> None:
        with self._lock:
            if self._workers or self._closed:
                return
            for index in range(self._worker_count):
                worker = threading.Thread(target=self._worker_loop, name=f"event-bus-{index}", daemon=True)
                worker.start()
                self._workers.append(worker)
        logger.debug("EventBus started %d worker(s)", self._worker_count)

    def _worker_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                name, callback, payload = item
                self._invoke(name, callback, payload)
            finally:
                self._queue.task_done()

    def wait_idle(self, timeout: float = 2.0) -> bool:
        """Block until queued callbacks have run; False on timeout."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self._queue.unfinished_tasks == 0:
                return True
            time.sleep(0.01)
        return self._queue.unfinished_tasks == 0

    def shutdown(self, timeout: float = 2.0) -> None:
        """Stop accepting events, drain the queue and join the workers."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            workers = list(self._workers)
        self.wait_idle(timeout)
        for _ in workers:
            try:
                self._queue.put(_STOP, timeout=timeout)
            except Full:
                break
        for worker in workers:
            worker.join(timeout)
        # Anything left is discarded.
        while True:
            try:
                self._queue.get_nowait()
                self._queue.task_done()
            except Empty:
                break

    def get_metrics(self) -> dict[str, Any]:
        top = dict(sorted(self._drops_by_topic.items(), key=lambda kv: kv[1], reverse=True)[:5])
        with self._lock:
            subscribers = sum(len(v) for v in self._subscribers.values())
        return {
            "published": self._published,
            "queue_depth": self._queue.qsize(),
            "queue_size": self._queue_size,
            "dropped_events": self._dropped,
            "drops_by_topic_top5": top,
            "subscribers": subscribers,
            "workers": len(self._workers),
        }
