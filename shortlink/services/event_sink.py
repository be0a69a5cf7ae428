"""
Lifecycle Event Sink

Collects binding lifecycle events (insert, get, delete, expired, exhausted)
for statistics without slowing down the request path.

Design:
- push_event is a non-blocking put on a bounded asyncio.Queue
- A single worker task drains the queue and hands events to a handler
- When the queue is full the event is dropped and counted
- Handler failures are logged and never reach the producer
"""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from shortlink.core.policy import utcnow

logger = logging.getLogger(__name__)


class Opcode(str, Enum):
    """Binding operations recorded by the sink."""
    INSERT = "insert"
    GET = "get"
    DELETE = "delete"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class LifecycleEvent:
    """One recorded operation on a binding."""
    identifier: str
    opcode: Opcode
    error: Optional[Exception] = None
    occurred_at: datetime = field(default_factory=utcnow)


EventHandler = Callable[[LifecycleEvent], None]


class EventStats:
    """Default event handler: in-process counters per opcode."""

    def __init__(self):
        self.counts: Counter = Counter()
        self.last_event_at: Optional[datetime] = None

    def __call__(self, event: LifecycleEvent) -> None:
        self.counts[event.opcode.value] += 1
        self.last_event_at = event.occurred_at
        if event.error is not None:
            logger.debug(f"{event.opcode.value} {event.identifier}: {event.error}")

    def snapshot(self) -> dict:
        return {
            "counts": {opcode.value: self.counts[opcode.value] for opcode in Opcode},
            "last_event_at": self.last_event_at.isoformat() if self.last_event_at else None,
        }


class EventSink:
    """
    Bounded, asynchronous event queue.

    Producers call push_event from the request path; a worker task started
    with start() applies the handler to each event in order.
    """

    def __init__(self, handler: Optional[EventHandler] = None, max_queue_size: int = 1000):
        """
        Initialize the sink.

        Args:
            handler: Called once per event by the worker (default: EventStats)
            max_queue_size: Pending events kept before new ones are dropped
        """
        self.handler = handler if handler is not None else EventStats()
        self.max_queue_size = max_queue_size

        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._worker: Optional[asyncio.Task] = None

        self._total_pushed = 0
        self._total_dropped = 0
        self._total_failed = 0

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def push_event(self, event: LifecycleEvent) -> None:
        """Queue an event without waiting. Drops it if the queue is full."""
        try:
            self._queue.put_nowait(event)
            self._total_pushed += 1
        except asyncio.QueueFull:
            self._total_dropped += 1
            logger.warning(
                f"Event queue full, dropped {event.opcode.value} event for {event.identifier}"
            )

    def start(self) -> None:
        """Start the worker task on the running event loop."""
        if self.running:
            logger.warning("Event sink already running")
            return
        self._worker = asyncio.create_task(self._drain())
        logger.info(f"Event sink started: queue_size={self.max_queue_size}")

    async def stop(self, timeout: float = 5.0) -> None:
        """Process pending events (up to timeout seconds), then stop the worker."""
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Event sink stopped with {self._queue.qsize()} pending events")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info("Event sink stopped")

    async def _drain(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                self.handler(event)
            except Exception as e:
                self._total_failed += 1
                logger.error(
                    f"Event handler failed for {event.opcode.value} {event.identifier}: {e}",
                    exc_info=True
                )
            finally:
                self._queue.task_done()

    def get_stats(self) -> dict:
        """
        Get sink statistics for monitoring.

        Returns:
            Dictionary with queue metrics, plus the handler snapshot when the
            handler provides one
        """
        stats = {
            "queue_size": self.max_queue_size,
            "pending": self._queue.qsize(),
            "total_pushed": self._total_pushed,
            "total_dropped": self._total_dropped,
            "total_failed": self._total_failed,
            "is_running": self.running,
        }
        snapshot = getattr(self.handler, "snapshot", None)
        if callable(snapshot):
            stats["events"] = snapshot()
        return stats
