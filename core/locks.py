"""Per master/day mutual exclusion for booking writes."""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Dict, Tuple

from core.exceptions import SlotBusyError

logger = logging.getLogger(__name__)

Bucket = Tuple[str, date]


class BucketLocks:
    """
    One asyncio.Lock per (master_id, calendar day).

    A booking check and the write that follows it run while the bucket is
    held, so two requests for the same master and day are serialized. Waiting
    is bounded; a caller that can't get the bucket in time receives
    SlotBusyError instead of being retried behind its back.

    A bucket's lock lives only while somebody holds or waits for it.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._locks: Dict[Bucket, asyncio.Lock] = {}
        # Holders plus waiters per bucket
        self._users: Dict[Bucket, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _checkout(self, bucket: Bucket) -> asyncio.Lock:
        lock = self._locks.get(bucket)
        if lock is None:
            lock = self._locks[bucket] = asyncio.Lock()
        self._users[bucket] = self._users.get(bucket, 0) + 1
        return lock

    def _checkin(self, bucket: Bucket) -> None:
        self._users[bucket] -= 1
        if not self._users[bucket]:
            del self._users[bucket]
            del self._locks[bucket]

    def is_locked(self, master_id: str, day: date) -> bool:
        lock = self._locks.get((master_id, day))
        return bool(lock and lock.locked())

    @asynccontextmanager
    async def hold(self, *buckets: Bucket) -> AsyncIterator[None]:
        """Acquire every bucket, in sorted order to avoid lock-order deadlocks."""
        checked_out = []
        acquired = []
        try:
            for bucket in sorted(set(buckets)):
                lock = self._checkout(bucket)
                checked_out.append(bucket)
                try:
                    # acquire() runs in this task, so a timeout can't leave the lock taken
                    async with asyncio.timeout(self.timeout):
                        await lock.acquire()
                except TimeoutError:
                    logger.warning(
                        f"Bucket {bucket[0]}/{bucket[1]} busy for more than {self.timeout}s",
                        extra={"master_id": bucket[0], "bucket": bucket[1].isoformat()},
                    )
                    raise SlotBusyError(*bucket)
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for bucket in checked_out:
                self._checkin(bucket)
