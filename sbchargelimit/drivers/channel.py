"""Single-slot conduit from a notification callback to the waiting requester."""

from __future__ import annotations

import asyncio

from sbchargelimit.core.errors import ChannelClosedError, ResponseTimeoutError

_CLOSED = None


class ResponseChannel:
    """Capacity-1 channel.

    The sending side never blocks: a payload offered while the slot is full
    is rejected and the caller decides what to log. Closing wakes a pending
    receiver with `ChannelClosedError`.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue(maxsize=1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send_nowait(self, payload: bytes) -> bool:
        if self._closed:
            return False
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            return False
        return True

    def clear(self) -> None:
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _CLOSED:
                # keep the close marker for the next receiver
                self._queue.put_nowait(item)
                return

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._queue.full():
            self._queue.put_nowait(_CLOSED)

    async def receive(self, timeout_s: float) -> bytes:
        if self._closed and self._queue.empty():
            raise ChannelClosedError("Response channel closed")
        try:
            item = await asyncio.wait_for(self._queue.get(), timeout=timeout_s)
        except asyncio.TimeoutError as exc:
            raise ResponseTimeoutError(
                f"No response from device within {timeout_s:g}s"
            ) from exc
        if item is _CLOSED:
            raise ChannelClosedError("Response channel closed")
        return item
