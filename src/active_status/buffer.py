"""
UpdateBuffer: lossy per-job update queue.

Each job's producer pushes update values into its own UpdateBuffer; a
forwarding task on the board drains it into the coordinator. The buffer
uses collections.deque with maxlen, so when the producer outpaces the
board the oldest pending updates are dropped and the most recent kept.
Producers never block.

Closing is tracked separately from the values, so a close is never lost
to overflow.
"""

import asyncio
from collections import deque
from typing import Any


class UpdateBuffer:
    """
    Fixed-size, drop-oldest buffer of pending job updates.

    Must be used from the event loop thread; JobHandle takes care of
    hopping threads for producers that run elsewhere.

    Example:
        buffer = UpdateBuffer(maxlen=2)
        for i in range(5):
            buffer.put(f"step {i}")
        buffer.close()
        await buffer.get()  # "step 3"
        await buffer.get()  # "step 4"
        await buffer.get()  # None (closed and drained)
    """

    def __init__(self, maxlen: int = 3) -> None:
        """
        Initialize buffer.

        Args:
            maxlen: Maximum number of pending updates (default 3)
        """
        self._buffer: deque[Any] = deque(maxlen=maxlen)
        self._ready = asyncio.Event()
        self._closed = False
        self._dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dropped(self) -> int:
        """Number of updates discarded because the buffer was full."""
        return self._dropped

    def put(self, value: Any) -> None:
        """
        Add an update. When the buffer is full the oldest update is dropped.

        Args:
            value: Update value (never None)
        """
        if len(self._buffer) == self._buffer.maxlen:
            self._dropped += 1
        self._buffer.append(value)
        self._ready.set()

    def close(self) -> None:
        """Mark the stream closed; pending updates are still delivered."""
        self._closed = True
        self._ready.set()

    async def get(self) -> Any:
        """
        Wait for the next update.

        Returns:
            The oldest pending update, or None once closed and drained
        """
        while not self._buffer:
            if self._closed:
                return None
            self._ready.clear()
            await self._ready.wait()
        return self._buffer.popleft()

    def __len__(self) -> int:
        """Return number of pending updates."""
        return len(self._buffer)
