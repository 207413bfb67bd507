"""
Process-local booking table.

Writes and cancels of a booking go through that booking's asyncio.Lock, so
a cancel (deadline check, upstream cancel, status change) is atomic with
respect to concurrent cancels of the same id. Plain reads return whatever
booking object is currently stored.

A lock only exists while someone holds or waits on it, so lookups of
arbitrary ids never accumulate state.
"""
import asyncio
import threading
from contextlib import asynccontextmanager
from typing import Dict, Optional

from takemeto75.models import Booking

class BookingLedger:
    def __init__(self):
        self._bookings: Dict[str, Booking] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}
        self._locks_guard = threading.Lock()

    def _acquire_lock(self, booking_id: str) -> asyncio.Lock:
        with self._locks_guard:
            lock = self._locks.get(booking_id)
            if lock is None:
                lock = self._locks[booking_id] = asyncio.Lock()
            self._holders[booking_id] = self._holders.get(booking_id, 0) + 1
            return lock

    def _release_lock(self, booking_id: str):
        with self._locks_guard:
            remaining = self._holders[booking_id] - 1
            if remaining:
                self._holders[booking_id] = remaining
            else:
                del self._holders[booking_id]
                del self._locks[booking_id]

    @asynccontextmanager
    async def hold(self, booking_id: str):
        """Hold the booking's lock. Use peek/store inside the block."""
        lock = self._acquire_lock(booking_id)
        try:
            async with lock:
                yield
        finally:
            self._release_lock(booking_id)

    def peek(self, booking_id: str) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def store(self, booking: Booking):
        self._bookings[booking.id] = booking

    async def add(self, booking: Booking):
        async with self.hold(booking.id):
            self.store(booking)

    async def get(self, booking_id: str) -> Optional[Booking]:
        return self.peek(booking_id)

    def lock_count(self) -> int:
        with self._locks_guard:
            return len(self._locks)

    def __len__(self) -> int:
        return len(self._bookings)

    def clear(self):
        self._bookings.clear()
