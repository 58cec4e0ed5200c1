"""
Async transaction buffer for the key-value store.
"""

from typing import List, Optional

from .transaction import Transaction
from .values import Hash, Primitive


class AsyncTransaction:
    """
    Coroutine front end for a ``Transaction``.

    Each method queues a command on the wrapped transaction and resolves
    to ``"QUEUED"``. Nothing runs until ``AsyncStore.exec()`` is awaited.
    """

    def __init__(self, transaction: Transaction) -> None:
        self._transaction = transaction

    @property
    def id(self) -> str:
        return self._transaction.id

    def __len__(self) -> int:
        return len(self._transaction)

    async def get(self, key: str) -> str:
        return self._transaction.get(key)

    async def set(self, key: str, value: Primitive, ttl: Optional[float] = None) -> str:
        return self._transaction.set(key, value, ttl)

    async def incr(self, key: str) -> str:
        return self._transaction.incr(key)

    async def decr(self, key: str) -> str:
        return self._transaction.decr(key)

    async def incrby(self, key: str, n: int) -> str:
        return self._transaction.incrby(key, n)

    async def decrby(self, key: str, n: int) -> str:
        return self._transaction.decrby(key, n)

    async def incrbyfloat(self, key: str, n: float) -> str:
        return self._transaction.incrbyfloat(key, n)

    async def strlen(self, key: str) -> str:
        return self._transaction.strlen(key)

    async def exists(self, key: str) -> str:
        return self._transaction.exists(key)

    async def delete(self, key: str) -> str:
        return self._transaction.delete(key)

    del_ = delete

    async def rename(self, src: str, dst: str) -> str:
        return self._transaction.rename(src, dst)

    async def expire(self, key: str, seconds: float) -> str:
        return self._transaction.expire(key, seconds)

    async def keys(self, pattern: Optional[str] = None) -> str:
        return self._transaction.keys(pattern)

    async def hget(self, key: str, field: str) -> str:
        return self._transaction.hget(key, field)

    async def hgetall(self, key: str) -> str:
        return self._transaction.hgetall(key)

    async def hmget(self, key: str, fields: List[str]) -> str:
        return self._transaction.hmget(key, fields)

    async def hset(self, key: str, field: str, value: Primitive) -> str:
        return self._transaction.hset(key, field, value)

    async def hmset(self, key: str, mapping: Hash) -> str:
        return self._transaction.hmset(key, mapping)

    async def hincrby(self, key: str, field: str, n: int) -> str:
        return self._transaction.hincrby(key, field, n)

    async def hincrbyfloat(self, key: str, field: str, n: float) -> str:
        return self._transaction.hincrbyfloat(key, field, n)

    async def lpush(self, key: str, values: List[Primitive]) -> str:
        return self._transaction.lpush(key, values)

    async def rpush(self, key: str, values: List[Primitive]) -> str:
        return self._transaction.rpush(key, values)

    async def lrange(self, key: str, start: Optional[int] = None, stop: Optional[int] = None) -> str:
        return self._transaction.lrange(key, start, stop)

    async def lindex(self, key: str, index: int) -> str:
        return self._transaction.lindex(key, index)

    async def llen(self, key: str) -> str:
        return self._transaction.llen(key)

    async def lrem(self, key: str, value: Primitive) -> str:
        return self._transaction.lrem(key, value)

    async def lset(self, key: str, index: int, value: Primitive) -> str:
        return self._transaction.lset(key, index, value)

    async def ltrim(self, key: str, start: Optional[int] = None, stop: Optional[int] = None) -> str:
        return self._transaction.ltrim(key, start, stop)

    async def scan(self, cursor: int, pattern: Optional[str] = None, count: Optional[int] = None) -> str:
        return self._transaction.scan(cursor, pattern, count)
