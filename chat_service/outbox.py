"""
Per-participant outbound channel.

The coordinator only ever calls send_nowait(), which never blocks. A writer
task per connection drains the queue onto the WebSocket, so a slow client
only backs up its own outbox. Calls from threads other than the one running
the outbox's event loop are handed to that loop with call_soon_threadsafe.
"""
import asyncio
import json
import logging
from typing import Any, Dict, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Outbox:
    def __init__(self, owner_id: str, max_size: int = 256):
        self.owner_id = owner_id
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_size)
        self._loop = _running_loop()
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def send_nowait(self, event: Dict[str, Any]) -> bool:
        """Queue an event for delivery. Returns False if it was dropped.

        Off the loop thread the event is scheduled onto the loop and True only
        means it was handed over; a full queue then drops it with a warning.
        """
        if self._closed:
            self.dropped += 1
            logger.debug(f"Outbox '{self.owner_id}' closed, dropping '{event.get('type')}'.")
            return False
        if self._loop is not None and _running_loop() is not self._loop:
            self._loop.call_soon_threadsafe(self._put, event)
            return True
        return self._put(event)

    def _put(self, event: Dict[str, Any]) -> bool:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Outbox '{self.owner_id}' full, dropping '{event.get('type')}'.")
            return False
        return True

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self._closed = True

    async def drain_to(self, websocket: WebSocket) -> None:
        """Write queued events to websocket until cancelled."""
        while True:
            event = await self._queue.get()
            try:
                await websocket.send_text(json.dumps(event))
            finally:
                self._queue.task_done()
