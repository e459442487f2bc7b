"""
Data-changed event channel.

Restores publish an event after each section is written so that
interested components (caches, UI state) can reload what changed.
Each subscriber gets its own asyncio queue.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Union


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionRestored:
    """A section was written to the store by a restore."""
    section_key: str
    record_count: int
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class RestoreCompleted:
    """A restore finished, successfully or not."""
    summary: Dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.now)


DataChangeEvent = Union[SectionRestored, RestoreCompleted]


class DataChangeChannel:
    """Publish/subscribe channel for data-changed events."""

    def __init__(self, maxsize: int = 0):
        self._maxsize = maxsize
        self._subscribers: List[asyncio.Queue] = []

    def subscribe(self) -> asyncio.Queue:
        """Register a subscriber and return its queue."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._maxsize)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        """Stop delivering events to ``queue``."""
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: DataChangeEvent) -> None:
        """Deliver ``event`` to every subscriber without waiting."""
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Dropped {type(event).__name__} for a full subscriber queue")

    @staticmethod
    def drain(queue: asyncio.Queue) -> List[DataChangeEvent]:
        """Take every event currently waiting in ``queue``."""
        events = []
        while not queue.empty():
            events.append(queue.get_nowait())
        return events
