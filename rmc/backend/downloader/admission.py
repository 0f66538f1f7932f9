"""
Admission control for concurrent downloads.

A single capacity gate shared by every feed bounds the number of transfers in
flight. Units are released on every outcome (success, skip or failure).
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class AdmissionController:
    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("admission capacity must be >= 1")
        self._capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)
        self._in_flight = 0
        self._peak = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def peak(self) -> int:
        """Highest number of units held at once so far."""
        return self._peak

    async def acquire(self) -> None:
        await self._semaphore.acquire()
        self._in_flight += 1
        self._peak = max(self._peak, self._in_flight)

    def release(self) -> None:
        if self._in_flight <= 0:
            raise RuntimeError("release() called without a matching acquire()")
        self._in_flight -= 1
        self._semaphore.release()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        await self.acquire()
        try:
            yield
        finally:
            self.release()
