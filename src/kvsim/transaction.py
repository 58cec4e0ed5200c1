"""
Transaction buffering for the key-value store.

A transaction records commands as plain values instead of running them.
When the store executes the transaction, the commands are dispatched in
the order they were queued. If any of them fails, the store is restored to
the snapshot taken before the first command ran.
"""

import copy
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple, TYPE_CHECKING

import structlog

from .exceptions import TransactionAbortedError, TransactionStateError
from .values import Hash, Primitive

if TYPE_CHECKING:
    from .store import Store

logger = structlog.get_logger(__name__)

QUEUED = "QUEUED"

# Store methods that may be queued and dispatched.
COMMANDS = frozenset({
    "get", "set", "incr", "decr", "incrby", "decrby", "incrbyfloat",
    "strlen", "exists", "delete", "rename", "expire", "keys",
    "hget", "hgetall", "hmget", "hset", "hmset", "hincrby", "hincrbyfloat",
    "lpush", "rpush", "lrange", "lindex", "llen", "lrem", "lset", "ltrim",
    "scan",
})


@dataclass(frozen=True)
class Command:
    """A queued command: the store method name and its arguments."""
    name: str
    args: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if self.name not in COMMANDS:
            raise ValueError(f"Unknown command: {self.name}")


class TransactionState(Enum):
    """Transaction state enumeration."""
    ACTIVE = "active"
    COMMITTED = "committed"
    ABORTED = "aborted"
    DISCARDED = "discarded"


class Transaction:
    """
    An ordered buffer of commands waiting for exec.

    Every queueing method returns ``"QUEUED"`` straight away. Arguments are
    copied when queued, so later changes to a caller's list or dict do not
    leak into the transaction.
    """

    def __init__(self) -> None:
        self.id = str(uuid.uuid4())
        self.state = TransactionState.ACTIVE
        self.commands: List[Command] = []

    def __len__(self) -> int:
        return len(self.commands)

    def enqueue(self, name: str, *args: Any) -> str:
        """Queue a command by name."""
        if self.state != TransactionState.ACTIVE:
            raise TransactionStateError(f"Cannot queue commands in state: {self.state.value}")
        self.commands.append(Command(name, copy.deepcopy(args)))
        return QUEUED

    def execute(self, store: "Store") -> List[Any]:
        """
        Run every queued command against ``store``.

        Returns:
            The result of each command, in queue order

        Raises:
            TransactionAbortedError: If any command fails. The store has
                been restored to its state from before the first command.
        """
        if self.state != TransactionState.ACTIVE:
            raise TransactionStateError(f"Cannot execute transaction in state: {self.state.value}")

        snapshot = store.snapshot()
        results = []
        for index, command in enumerate(self.commands):
            try:
                results.append(store.dispatch(command))
            except Exception as exc:
                store.restore(snapshot)
                self.state = TransactionState.ABORTED
                logger.info(
                    "transaction_rolled_back",
                    transaction_id=self.id,
                    index=index,
                    command=command.name,
                    error=type(exc).__name__,
                )
                raise TransactionAbortedError(
                    f"Transaction aborted at command {index} ({command.name}): {exc}",
                    index,
                    command.name,
                ) from exc

        self.state = TransactionState.COMMITTED
        logger.debug("transaction_committed", transaction_id=self.id, commands=len(self.commands))
        return results

    def discard(self) -> None:
        self.state = TransactionState.DISCARDED
        self.commands = []

    # Queueing methods, one per store command

    def get(self, key: str) -> str:
        return self.enqueue("get", key)

    def set(self, key: str, value: Primitive, ttl: Optional[float] = None) -> str:
        return self.enqueue("set", key, value, ttl)

    def incr(self, key: str) -> str:
        return self.enqueue("incr", key)

    def decr(self, key: str) -> str:
        return self.enqueue("decr", key)

    def incrby(self, key: str, n: int) -> str:
        return self.enqueue("incrby", key, n)

    def decrby(self, key: str, n: int) -> str:
        return self.enqueue("decrby", key, n)

    def incrbyfloat(self, key: str, n: float) -> str:
        return self.enqueue("incrbyfloat", key, n)

    def strlen(self, key: str) -> str:
        return self.enqueue("strlen", key)

    def exists(self, key: str) -> str:
        return self.enqueue("exists", key)

    def delete(self, key: str) -> str:
        return self.enqueue("delete", key)

    del_ = delete

    def rename(self, src: str, dst: str) -> str:
        return self.enqueue("rename", src, dst)

    def expire(self, key: str, seconds: float) -> str:
        return self.enqueue("expire", key, seconds)

    def keys(self, pattern: Optional[str] = None) -> str:
        return self.enqueue("keys", pattern)

    def hget(self, key: str, field: str) -> str:
        return self.enqueue("hget", key, field)

    def hgetall(self, key: str) -> str:
        return self.enqueue("hgetall", key)

    def hmget(self, key: str, fields: List[str]) -> str:
        return self.enqueue("hmget", key, fields)

    def hset(self, key: str, field: str, value: Primitive) -> str:
        return self.enqueue("hset", key, field, value)

    def hmset(self, key: str, mapping: Hash) -> str:
        return self.enqueue("hmset", key, mapping)

    def hincrby(self, key: str, field: str, n: int) -> str:
        return self.enqueue("hincrby", key, field, n)

    def hincrbyfloat(self, key: str, field: str, n: float) -> str:
        return self.enqueue("hincrbyfloat", key, field, n)

    def lpush(self, key: str, values: List[Primitive]) -> str:
        return self.enqueue("lpush", key, values)

    def rpush(self, key: str, values: List[Primitive]) -> str:
        return self.enqueue("rpush", key, values)

    def lrange(self, key: str, start: Optional[int] = None, stop: Optional[int] = None) -> str:
        return self.enqueue("lrange", key, start, stop)

    def lindex(self, key: str, index: int) -> str:
        return self.enqueue("lindex", key, index)

    def llen(self, key: str) -> str:
        return self.enqueue("llen", key)

    def lrem(self, key: str, value: Primitive) -> str:
        return self.enqueue("lrem", key, value)

    def lset(self, key: str, index: int, value: Primitive) -> str:
        return self.enqueue("lset", key, index, value)

    def ltrim(self, key: str, start: Optional[int] = None, stop: Optional[int] = None) -> str:
        return self.enqueue("ltrim", key, start, stop)

    def scan(self, cursor: int, pattern: Optional[str] = None, count: Optional[int] = None) -> str:
        return self.enqueue("scan", cursor, pattern, count)
