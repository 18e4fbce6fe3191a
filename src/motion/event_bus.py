"""EventBus — thread-safe pub/sub between the motion core and its renderers.

The controller publishes ``motion_frame`` events once per stepped frame and
``motion_stopped`` when it is torn down.  Whatever draws the element
subscribes and drains its queue at its own pace.

A renderer that only ever draws the newest position can subscribe with
``coalesce={MOTION_FRAME}``: a frame published while the previous frame is
still the last undrained message replaces it instead of queueing behind
it.  Lifecycle events such as ``motion_stopped`` are never coalesced away.
"""

from __future__ import annotations

import queue
import threading
from typing import Iterable

MOTION_FRAME = "motion_frame"
MOTION_STOPPED = "motion_stopped"


class _Subscription:
    __slots__ = ("queue", "coalesce")

    def __init__(self, q: queue.Queue, coalesce: frozenset[str]) -> None:
        self.queue = q
        self.coalesce = coalesce

    def offer(self, msg: dict) -> None:
        q = self.queue
        if msg["type"] in self.coalesce:
            with q.mutex:
                pending = q.queue
                if pending and pending[-1]["type"] == msg["type"]:
                    pending[-1] = msg
                    return
        try:
            q.put_nowait(msg)
        except queue.Full:
            # Full queue: the oldest message is the least useful one.
            try:
                q.get_nowait()
            except queue.Empty:
                pass
            try:
                q.put_nowait(msg)
            except queue.Full:
                pass


class EventBus:
    """Fan-out of motion events to bounded subscriber queues."""

    def __init__(self, maxsize: int = 100) -> None:
        self._lock = threading.Lock()
        self._maxsize = maxsize
        self._subscribers: list[_Subscription] = []

    def subscribe(self, coalesce: Iterable[str] = ()) -> queue.Queue:
        """Return a new Queue that receives every published event.

        Event types in ``coalesce`` keep at most one undrained message at
        the tail of the queue.
        """
        q: queue.Queue = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers.append(_Subscription(q, frozenset(coalesce)))
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscribers = [s for s in self._subscribers if s.queue is not q]

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            subscribers = list(self._subscribers)
        for sub in subscribers:
            sub.offer(msg)
