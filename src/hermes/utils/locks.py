"""Per-key concurrency control.

Check-then-write sequences (transaction log appends, divine token cache
updates, allow-list mutations) interleave at every await on the event loop.
A KeyedLocks registry hands out one asyncio.Lock per key so that such a
sequence runs exclusively for a given transaction hash or token address.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable, Optional

logger = logging.getLogger(__name__)


class LockTimeoutError(Exception):
    """Raised when a lock cannot be acquired within the timeout period."""

    pass


class KeyedLocks:
    """Registry of asyncio locks keyed by an arbitrary hashable value.

    Locks are dropped from the registry once nobody holds or waits for them,
    so the registry does not grow with every transaction hash seen.

    Example:
        locks = KeyedLocks("txlog")
        async with locks.hold(tx_hash, operation="append"):
            if not log.exists(tx_hash, log.load()):
                log.append(record)
    """

    def __init__(self, name: str = "locks"):
        self.name = name
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}
        self._registry_lock = asyncio.Lock()

    async def _checkout(self, key: Hashable) -> asyncio.Lock:
        async with self._registry_lock:
            lock = self._locks.setdefault(key, asyncio.Lock())
            self._users[key] = self._users.get(key, 0) + 1
            return lock

    def _checkin(self, key: Hashable) -> None:
        remaining = self._users.get(key, 1) - 1
        if remaining > 0:
            self._users[key] = remaining
        else:
            self._users.pop(key, None)
            self._locks.pop(key, None)

    @asynccontextmanager
    async def hold(
        self,
        key: Hashable,
        timeout: Optional[float] = None,
        operation: str = "operation",
    ) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block.

        Args:
            key: Transaction hash, token address, ...
            timeout: Maximum time to wait for the lock (None = wait forever)
            operation: Description of the operation for logging
        """
        lock = await self._checkout(key)

        try:
            if timeout:
                await asyncio.wait_for(lock.acquire(), timeout=timeout)
            else:
                await lock.acquire()
        except asyncio.TimeoutError:
            self._checkin(key)
            logger.warning(f"[{self.name}] Lock timeout for {key} after {timeout}s: {operation}")
            raise LockTimeoutError(
                f"Could not acquire {self.name} lock for {key} within {timeout}s"
            )
        except BaseException:
            self._checkin(key)
            raise

        logger.debug(f"[{self.name}] Lock acquired for {key}: {operation}")
        try:
            yield
        finally:
            lock.release()
            self._checkin(key)
            logger.debug(f"[{self.name}] Lock released for {key}: {operation}")

    def is_held(self, key: Hashable) -> bool:
        """Check whether someone currently holds the lock for ``key``."""
        lock = self._locks.get(key)
        return bool(lock and lock.locked())

    def __len__(self) -> int:
        return len(self._locks)

    def clear(self) -> None:
        """Clear all locks (useful for testing)."""
        self._locks.clear()
        self._users.clear()
