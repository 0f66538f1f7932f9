"""
Closeable FIFO channel for asyncio tasks.

- many producers, many consumers
- `close()` means "no further items"; items already queued still drain
- consumers stop (`ChannelClosed` / end of `async for`) once closed AND empty
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Generic, TypeVar


T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Put on a closed channel, or get from a closed and drained one."""


class Channel(Generic[T]):
    def __init__(self, name: str = "channel") -> None:
        self._name = name
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize() - (1 if self._closed else 0)

    async def put(self, item: T) -> None:
        if self._closed:
            raise ChannelClosed(f"{self._name} is closed")
        await self._queue.put(item)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def get(self) -> T:
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker for the other consumers.
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed(f"{self._name} is closed")
        return item  # type: ignore[return-value]

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        while True:
            try:
                yield await self.get()
            except ChannelClosed:
                return
