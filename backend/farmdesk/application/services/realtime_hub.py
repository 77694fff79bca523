"""Realtime hub — in-process, per-user broadcaster of row-change events."""

import asyncio
import json
import logging
from collections import defaultdict
from collections.abc import AsyncGenerator

from farmdesk.domain.entities import ChangeEvent

logger = logging.getLogger(__name__)


class RealtimeHub:
    """Fans committed row changes out to the owning user's SSE subscribers.

    Each connected client gets its own bounded asyncio.Queue. Publishing only
    touches the queues of the event's owner, so one user's changes are never
    delivered to another user's stream.
    """

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._queues: dict[str, list[asyncio.Queue[str | None]]] = defaultdict(list)

    async def subscribe(self, user_id: str) -> AsyncGenerator[str, None]:
        """Subscribe to a user's change events. Yields formatted SSE strings.

        The first frame is a ``ready`` event so clients know the subscription
        is live. The generator unsubscribes when the client disconnects.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=self._queue_size)
        self._queues[user_id].append(queue)
        logger.debug("Realtime subscriber added for user %s", user_id)
        try:
            yield _format_frame("ready", {"user_id": user_id})
            while True:
                frame = await queue.get()
                if frame is None:
                    break
                yield frame
        finally:
            self._discard(user_id, queue)

    async def publish(self, event: ChangeEvent) -> None:
        """Deliver one change event to every subscriber of its owner."""
        frame = _format_frame("change", event.to_dict())
        dead_queues: list[asyncio.Queue[str | None]] = []

        for queue in self._queues.get(event.user_id, []):
            try:
                queue.put_nowait(frame)
            except asyncio.QueueFull:
                dead_queues.append(queue)
                logger.warning("Realtime client queue full — disconnecting (user %s)", event.user_id)

        for queue in dead_queues:
            _close(queue)
            self._discard(event.user_id, queue)

    async def publish_all(self, events: list[ChangeEvent]) -> None:
        for event in events:
            await self.publish(event)

    async def shutdown(self) -> None:
        """Disconnect all connected clients."""
        for queues in self._queues.values():
            for queue in queues:
                _close(queue)
        self._queues.clear()

    def subscriber_count(self, user_id: str | None = None) -> int:
        if user_id is not None:
            return len(self._queues.get(user_id, []))
        return sum(len(queues) for queues in self._queues.values())

    def _discard(self, user_id: str, queue: asyncio.Queue[str | None]) -> None:
        queues = self._queues.get(user_id)
        if queues and queue in queues:
            queues.remove(queue)
            if not queues:
                del self._queues[user_id]


def _format_frame(event_type: str, data: dict) -> str:
    return f"event: {event_type}\ndata: {json.dumps(data)}\n\n"


def _close(queue: asyncio.Queue[str | None]) -> None:
    """Drop pending frames and enqueue the end-of-stream marker."""
    while not queue.empty():
        queue.get_nowait()
    queue.put_nowait(None)
