"""
Simple in‑memory event bus for decoupling the order desk from the
collaborators that feed it and the views that observe it.  Each event
type has its own asyncio queue.

Market data and account updates arrive on the ``ticker``, ``book`` and
``balances`` topics; order sessions publish on ``submission_state``.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, AsyncIterator, Dict


class EventBus:
    """In‑memory publish/subscribe keyed by event type.

    Each event type is backed by a single queue, so an event is
    delivered to one consumer of that type.
    """

    def __init__(self) -> None:
        self._queues: Dict[str, asyncio.Queue] = defaultdict(asyncio.Queue)

    async def publish(self, event_type: str, data: Any) -> None:
        """Publish an event to the queue for the given type."""
        queue = self._queues[event_type]
        await queue.put(data)

    async def subscribe(self, event_type: str) -> AsyncIterator[Any]:
        """Yield events of a given type as they arrive."""
        queue = self._queues[event_type]
        while True:
            data = await queue.get()
            yield data

    def pending(self, event_type: str) -> int:
        """Number of events of a type not yet consumed."""
        return self._queues[event_type].qsize()
