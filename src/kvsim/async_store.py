"""
Async Store class implementation for the in-memory key-value store.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .async_transaction import AsyncTransaction
from .store import Store
from .values import Hash, Primitive


class AsyncStore:
    """
    An async key-value store.

    Exposes every ``Store`` command as a coroutine. No command waits on
    anything external, so each one runs to completion once awaited and
    commands never interleave halfway through a change.

    Example usage:
        store = AsyncStore([{"key": "total", "value": 1000}])
        await store.incr("total")

        tx = await store.multi()
        await tx.set("site", "https://example.com")
        await tx.incr("total")
        results = await store.exec()
    """

    def __init__(
        self,
        initial_entries: Optional[Iterable[Mapping[str, Any]]] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        """
        Initialize the async store.

        Args:
            initial_entries: Records with ``key``, ``value`` and optional
                ``expiry``, as for ``Store``.
            clock: Returns the current time in ms since epoch.
        """
        self._store = Store(initial_entries, clock=clock)

    @property
    def store(self) -> Store:
        """The synchronous store holding the data."""
        return self._store

    # String and number commands

    async def get(self, key: str) -> Optional[Primitive]:
        return self._store.get(key)

    async def set(self, key: str, value: Primitive, ttl: Optional[float] = None) -> str:
        return self._store.set(key, value, ttl)

    async def incr(self, key: str) -> int:
        return self._store.incr(key)

    async def decr(self, key: str) -> int:
        return self._store.decr(key)

    async def incrby(self, key: str, n: int) -> int:
        return self._store.incrby(key, n)

    async def decrby(self, key: str, n: int) -> int:
        return self._store.decrby(key, n)

    async def incrbyfloat(self, key: str, n: float) -> float:
        return self._store.incrbyfloat(key, n)

    async def strlen(self, key: str) -> int:
        return self._store.strlen(key)

    # Key commands

    async def exists(self, key: str) -> bool:
        return self._store.exists(key)

    async def delete(self, key: str) -> str:
        return self._store.delete(key)

    del_ = delete

    async def rename(self, src: str, dst: str) -> str:
        return self._store.rename(src, dst)

    async def expire(self, key: str, seconds: float) -> str:
        return self._store.expire(key, seconds)

    async def keys(self, pattern: Optional[str] = None) -> List[str]:
        return self._store.keys(pattern)

    # Hash commands

    async def hget(self, key: str, field: str) -> Optional[Primitive]:
        return self._store.hget(key, field)

    async def hgetall(self, key: str) -> Hash:
        return self._store.hgetall(key)

    async def hmget(self, key: str, fields: List[str]) -> Dict[str, Optional[Primitive]]:
        return self._store.hmget(key, fields)

    async def hset(self, key: str, field: str, value: Primitive) -> str:
        return self._store.hset(key, field, value)

    async def hmset(self, key: str, mapping: Mapping[str, Primitive]) -> str:
        return self._store.hmset(key, mapping)

    async def hincrby(self, key: str, field: str, n: int) -> int:
        return self._store.hincrby(key, field, n)

    async def hincrbyfloat(self, key: str, field: str, n: float) -> float:
        return self._store.hincrbyfloat(key, field, n)

    # List commands

    async def lpush(self, key: str, values: List[Primitive]) -> int:
        return self._store.lpush(key, values)

    async def rpush(self, key: str, values: List[Primitive]) -> int:
        return self._store.rpush(key, values)

    async def lrange(self, key: str, start: Optional[int] = None, stop: Optional[int] = None) -> List[Primitive]:
        return self._store.lrange(key, start, stop)

    async def lindex(self, key: str, index: int) -> Optional[Primitive]:
        return self._store.lindex(key, index)

    async def llen(self, key: str) -> int:
        return self._store.llen(key)

    async def lrem(self, key: str, value: Primitive) -> str:
        return self._store.lrem(key, value)

    async def lset(self, key: str, index: int, value: Primitive) -> str:
        return self._store.lset(key, index, value)

    async def ltrim(self, key: str, start: Optional[int] = None, stop: Optional[int] = None) -> str:
        return self._store.ltrim(key, start, stop)

    async def scan(self, cursor: int, pattern: Optional[str] = None, count: Optional[int] = None) -> List[Any]:
        return self._store.scan(cursor, pattern, count)

    # Transactions

    async def multi(self) -> AsyncTransaction:
        """
        Open a transaction.

        Raises:
            TransactionStateError: If a transaction is already open
        """
        return AsyncTransaction(self._store.multi())

    async def exec(self) -> List[Any]:
        """
        Execute the open transaction.

        Raises:
            TransactionStateError: If no transaction is open
            TransactionAbortedError: If a queued command failed. The store
                is left exactly as it was before exec.
        """
        return self._store.exec()

    async def discard(self) -> str:
        return self._store.discard()

    def has_active_transaction(self) -> bool:
        return self._store.has_active_transaction()

    # Inspection

    def entries(self) -> tuple:
        """Get copies of all entries (for testing purposes)."""
        return self._store.entries()

    async def reset(self) -> None:
        self._store.reset()
