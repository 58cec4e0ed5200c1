"""
Main Store class implementation for the in-memory key-value store.
"""

import copy
import re
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import structlog

from .exceptions import (
    CursorNotFoundError,
    FieldNotANumberError,
    InvalidIndexError,
    KeyNotFoundError,
    NotANumberError,
    TransactionStateError,
)
from .transaction import Command, Transaction
from .values import (
    Entry,
    Hash,
    Primitive,
    Value,
    ValueType,
    as_float,
    as_integer,
    check_primitive,
    ensure_hash,
    ensure_list,
    ensure_primitive,
    is_primitive,
    stringify,
)

logger = structlog.get_logger(__name__)

OK = "OK"


def _now_ms() -> int:
    return int(time.time() * 1000)


def compile_pattern(pattern: Optional[str]) -> Optional[re.Pattern]:
    """
    Compile a key pattern for ``keys`` and ``scan``.

    ``None``, ``""`` and ``"*"`` match every key and compile to ``None``.
    Otherwise the pattern is a glob that may match anywhere in the key:
    ``*`` matches any run of characters, ``?`` one character, ``[...]`` a
    character class (``[!...]`` or ``[^...]`` negated) and ``\\`` escapes the
    next character. A class that cannot be compiled, such as ``[z-a]``, is
    matched as literal text.
    """
    if not pattern or pattern == "*":
        return None

    parts = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "\\" and i + 1 < len(pattern):
            i += 1
            parts.append(re.escape(pattern[i]))
        elif char == "[" and pattern.find("]", i + 2) != -1:
            end = pattern.find("]", i + 2)
            body = pattern[i + 1:end]
            negate = len(body) > 1 and body[0] in "!^"
            if negate:
                body = body[1:]
            escaped = "".join(c if c == "-" else re.escape(c) for c in body)
            char_class = "[" + ("^" if negate else "") + escaped + "]"
            try:
                re.compile(char_class)
            except re.error:
                # A malformed class such as a reversed range matches literally
                parts.append(re.escape(char))
            else:
                parts.append(char_class)
                i = end
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("".join(parts))


def _inclusive_range(items: List[Primitive], start: Optional[int], stop: Optional[int]) -> List[Primitive]:
    length = len(items)
    start = 0 if start is None else start
    stop = length - 1 if stop is None else stop
    if start < 0:
        start = max(length + start, 0)
    if stop < 0:
        stop = length + stop
    if stop < start:
        return []
    return items[start:stop + 1]


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time copy of everything a store can change."""
    entries: Dict[str, Entry]
    cursors: Dict[int, int]
    id_counter: int
    cursor_id_counter: int


class Store:
    """
    An in-memory key-value store with string, hash and list commands.

    Commands run immediately. To run several commands as a unit, open a
    transaction with ``multi()``, queue commands on it, then call ``exec()``.
    If a queued command fails the whole transaction is rolled back.

    Example usage:
        store = Store([{"key": "total", "value": 1000}])
        store.incr("total")          # 1001

        tx = store.multi()
        tx.set("site", "https://example.com")
        tx.incr("total")
        store.exec()                 # ["OK", 1002]
    """

    def __init__(
        self,
        initial_entries: Optional[Iterable[Mapping[str, Any]]] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            initial_entries: Records with ``key``, ``value`` and optional
                ``expiry`` (ms since epoch). ``reset()`` returns to these.
            clock: Returns the current time in ms since epoch. Defaults to
                the system clock.
        """
        self._initial_entries = copy.deepcopy(list(initial_entries or []))
        self._clock = clock or _now_ms
        self._load(self._initial_entries)
        logger.debug("store_created", entries=len(self._entries))

    def _load(self, records: List[Mapping[str, Any]]) -> None:
        self._entries: Dict[str, Entry] = {}
        self._cursors: Dict[int, int] = {}
        self._id_counter = 0
        self._cursor_id_counter = 1
        self._transaction: Optional[Transaction] = None

        for record in records:
            key = record["key"]
            if key in self._entries:
                raise ValueError(f"Duplicate key in initial entries: {key}")
            value = copy.deepcopy(record["value"])
            ValueType.of(value)
            self._add(key, value, record.get("expiry"))

    def _next_id(self) -> int:
        entry_id = self._id_counter
        self._id_counter += 1
        return entry_id

    def _add(self, key: str, value: Value, expiry: Optional[int] = None) -> Entry:
        entry = Entry(key=key, value=value, id=self._next_id(), expiry=expiry)
        self._entries[key] = entry
        return entry

    def _put(self, entry: Entry) -> None:
        # Replacing an existing key keeps its position in iteration order.
        self._entries[entry.key] = entry

    def _find(self, key: str) -> Optional[Entry]:
        return self._entries.get(key)

    def _require(self, key: str) -> Entry:
        entry = self._entries.get(key)
        if entry is None:
            raise KeyNotFoundError(f"The key {key} was not found.")
        return entry

    # String and number commands

    def get(self, key: str) -> Optional[Primitive]:
        """
        Get the value of a key.

        Returns:
            The value, or None if the key does not exist

        Raises:
            TypeMismatchError: If the key holds a hash or a list
        """
        entry = self._find(key)
        if entry is None:
            return None
        return ensure_primitive(entry)

    def set(self, key: str, value: Primitive, ttl: Optional[float] = None) -> str:
        """
        Set a key to a primitive value, replacing whatever it held.

        Args:
            key: The key to set
            value: A string or number
            ttl: Optional time to live in seconds. Without it the key
                never expires.
        """
        check_primitive(value)
        expiry = self._clock() + int(ttl * 1000) if ttl else None
        existing = self._find(key)
        if existing is None:
            self._add(key, value, expiry)
        else:
            self._put(replace(existing, value=value, expiry=expiry))
        return OK

    def incr(self, key: str) -> int:
        return self.incrby(key, 1)

    def decr(self, key: str) -> int:
        return self.incrby(key, -1)

    def decrby(self, key: str, n: int) -> int:
        return self.incrby(key, -n)

    def incrby(self, key: str, n: int) -> int:
        """
        Add an integer to the number stored at key.

        Raises:
            KeyNotFoundError: If the key does not exist
            NotANumberError: If the value is not an integer
        """
        entry = self._require(key)
        delta = as_integer(n)
        if delta is None:
            raise NotANumberError(f"The increment {n!r} is not an integer.")
        current = as_integer(entry.value) if entry.kind is ValueType.PRIMITIVE else None
        if current is None:
            raise NotANumberError(f"The key {key} does not hold a number.")
        new_value = current + delta
        self._put(replace(entry, value=new_value))
        return new_value

    def incrbyfloat(self, key: str, n: float) -> float:
        """Add a float to the number stored at key. Fails like ``incrby``."""
        entry = self._require(key)
        delta = as_float(n)
        if delta is None:
            raise NotANumberError(f"The increment {n!r} is not a number.")
        current = as_float(entry.value) if entry.kind is ValueType.PRIMITIVE else None
        if current is None:
            raise NotANumberError(f"The key {key} does not hold a number.")
        new_value = current + delta
        self._put(replace(entry, value=new_value))
        return new_value

    def strlen(self, key: str) -> int:
        entry = self._require(key)
        return len(stringify(ensure_primitive(entry)))

    # Key commands

    def exists(self, key: str) -> bool:
        return key in self._entries

    def delete(self, key: str) -> str:
        """Remove a key. Deleting a missing key is a no-op."""
        self._entries.pop(key, None)
        return OK

    del_ = delete

    def rename(self, src: str, dst: str) -> str:
        """
        Rename a key, keeping its value, expiry and scan position.

        An existing entry at ``dst`` is replaced.

        Raises:
            KeyNotFoundError: If ``src`` does not exist
        """
        self._require(src)
        if src == dst:
            return OK

        entries = {}
        for key, entry in self._entries.items():
            if key == dst:
                continue
            if key == src:
                entries[dst] = replace(entry, key=dst)
            else:
                entries[key] = entry
        self._entries = entries
        return OK

    def expire(self, key: str, seconds: float) -> str:
        entry = self._require(key)
        self._put(replace(entry, expiry=self._clock() + int(seconds * 1000)))
        return OK

    def keys(self, pattern: Optional[str] = None) -> List[str]:
        """Return the keys matching ``pattern``, oldest first."""
        matcher = compile_pattern(pattern)
        return [key for key in self._entries if matcher is None or matcher.search(key)]

    # Hash commands

    def hget(self, key: str, field: str) -> Optional[Primitive]:
        return ensure_hash(self._find(key)).get(field)

    def hgetall(self, key: str) -> Hash:
        return dict(ensure_hash(self._find(key)))

    def hmget(self, key: str, fields: List[str]) -> Dict[str, Optional[Primitive]]:
        values = ensure_hash(self._find(key))
        return {field: values.get(field) for field in fields}

    def hset(self, key: str, field: str, value: Primitive) -> str:
        return self.hmset(key, {field: value})

    def hmset(self, key: str, mapping: Mapping[str, Primitive]) -> str:
        """
        Set several hash fields, creating the hash if needed.

        Fields not named in ``mapping`` are left untouched.

        Raises:
            TypeMismatchError: If the key holds a primitive or a list
        """
        fields = dict(mapping)
        ValueType.of(fields)
        entry = self._find(key)
        if entry is None:
            self._add(key, fields)
        else:
            current = ensure_hash(entry)
            self._put(replace(entry, value={**current, **fields}))
        return OK

    def _hincr(self, key: str, field: str, delta: Any, parse: Callable[[Any], Any]) -> Primitive:
        entry = self._find(key)
        values = ensure_hash(entry)
        # Fields must hold a stored number; numeric strings are not coerced
        stored = values.get(field)
        current = None if stored is None or isinstance(stored, str) else parse(stored)
        if current is None:
            raise FieldNotANumberError(
                f"The field {field} of object with key {key} does not hold a number."
            )
        step = parse(delta)
        if step is None:
            raise NotANumberError(f"The increment {delta!r} is not a number.")
        new_value = current + step
        self._put(replace(entry, value={**values, field: new_value}))
        return new_value

    def hincrby(self, key: str, field: str, n: int) -> int:
        """
        Add an integer to a hash field.

        Raises:
            TypeMismatchError: If the key does not hold a hash
            FieldNotANumberError: If the field is missing or does not hold
                an integer. A string field fails even when it looks numeric.
        """
        return self._hincr(key, field, n, as_integer)

    def hincrbyfloat(self, key: str, field: str, n: float) -> float:
        return self._hincr(key, field, n, as_float)

    # List commands

    def _push(self, key: str, values: Any, prepend: bool) -> int:
        items = [values] if is_primitive(values) else list(values)
        for item in items:
            check_primitive(item)
        entry = self._find(key)
        if entry is None:
            self._add(key, items)
            return len(items)

        current = ensure_list(entry, key)
        new_list = items + current if prepend else current + items
        self._put(replace(entry, value=new_list))
        return len(new_list)

    def lpush(self, key: str, values: List[Primitive]) -> int:
        """
        Prepend values to a list, creating it if needed.

        The values are inserted as a block, keeping their given order.

        Returns:
            The length of the list after the push
        """
        return self._push(key, values, prepend=True)

    def rpush(self, key: str, values: List[Primitive]) -> int:
        """Append values to a list, creating it if needed."""
        return self._push(key, values, prepend=False)

    def lrange(self, key: str, start: Optional[int] = None, stop: Optional[int] = None) -> List[Primitive]:
        """
        Return the items between ``start`` and ``stop``, both inclusive.

        Negative indexes count from the end. Without bounds the whole list
        is returned.
        """
        items = ensure_list(self._find(key), key)
        return _inclusive_range(items, start, stop)

    def lindex(self, key: str, index: int) -> Optional[Primitive]:
        items = ensure_list(self._find(key), key)
        position = index + len(items) if index < 0 else index
        if 0 <= position < len(items):
            return items[position]
        return None

    def llen(self, key: str) -> int:
        return len(ensure_list(self._find(key), key))

    def lrem(self, key: str, value: Primitive) -> str:
        """Remove every item equal to ``value`` when compared as strings."""
        entry = self._find(key)
        items = ensure_list(entry, key)
        target = stringify(check_primitive(value))
        self._put(replace(entry, value=[item for item in items if stringify(item) != target]))
        return OK

    def lset(self, key: str, index: int, value: Primitive) -> str:
        """
        Replace the item at ``index``.

        Raises:
            TypeMismatchError: If the key does not hold a list
            InvalidIndexError: If the index is out of range
        """
        entry = self._find(key)
        items = ensure_list(entry, key)
        check_primitive(value)
        position = index + len(items) if index < 0 else index
        if not 0 <= position < len(items):
            raise InvalidIndexError(f"Invalid index {index}.")
        new_list = list(items)
        new_list[position] = value
        self._put(replace(entry, value=new_list))
        return OK

    def ltrim(self, key: str, start: Optional[int] = None, stop: Optional[int] = None) -> str:
        entry = self._find(key)
        items = ensure_list(entry, key)
        self._put(replace(entry, value=_inclusive_range(items, start, stop)))
        return OK

    # Scanning

    def scan(self, cursor: int, pattern: Optional[str] = None, count: Optional[int] = None) -> List[Any]:
        """
        Iterate over keys a page at a time.

        Args:
            cursor: 0 to start, or a cursor returned by a previous scan
            pattern: Key pattern, as for ``keys``
            count: Maximum number of matching keys to return. Defaults to
                the number of keys in the store.

        Returns:
            ``[next_cursor, keys]``. ``next_cursor`` is 0 once the end of
            the key space is reached, at which point the cursor passed in
            is released.

        Raises:
            CursorNotFoundError: If ``cursor`` is not 0 and not a live cursor
        """
        if count is None:
            count = len(self._entries)
        elif count < 1:
            raise ValueError(f"count must be a positive integer, got {count}")

        matcher = compile_pattern(pattern)
        if cursor == 0:
            candidates = list(self._entries.values())
        else:
            if cursor not in self._cursors:
                raise CursorNotFoundError(f"Cursor {cursor} was not found.")
            position = self._cursors[cursor]
            candidates = [entry for entry in self._entries.values() if entry.id > position]

        matches = []
        last = len(candidates) - 1
        for index, entry in enumerate(candidates):
            if matcher is None or matcher.search(entry.key):
                matches.append(entry.key)
            if index < last and len(matches) == count:
                return [self._add_cursor(entry.id), matches]

        if self._cursors.pop(cursor, None) is not None:
            logger.debug("cursor_released", cursor=cursor)
        return [0, matches]

    def _add_cursor(self, position: int) -> int:
        cursor_id = self._cursor_id_counter
        self._cursor_id_counter += 1
        self._cursors[cursor_id] = position
        logger.debug("cursor_created", cursor=cursor_id, position=position)
        return cursor_id

    # Transactions

    def multi(self) -> Transaction:
        """
        Open a transaction.

        Returns:
            The transaction to queue commands on

        Raises:
            TransactionStateError: If a transaction is already open
        """
        if self._transaction is not None:
            raise TransactionStateError("A transaction is already open. Call exec() or discard() first.")
        self._transaction = Transaction()
        logger.debug("transaction_opened", transaction_id=self._transaction.id)
        return self._transaction

    def exec(self) -> List[Any]:
        """
        Execute the open transaction.

        The transaction is closed whether or not it succeeds.

        Returns:
            The result of each queued command, in order

        Raises:
            TransactionStateError: If no transaction is open
            TransactionAbortedError: If a queued command failed. The store
                is left exactly as it was before exec.
        """
        if self._transaction is None:
            raise TransactionStateError("No open transaction to exec. Call multi() first.")
        transaction, self._transaction = self._transaction, None
        return transaction.execute(self)

    def discard(self) -> str:
        """Drop the open transaction without running any of its commands."""
        if self._transaction is None:
            raise TransactionStateError("No open transaction to discard.")
        self._transaction.discard()
        logger.debug("transaction_discarded", transaction_id=self._transaction.id)
        self._transaction = None
        return OK

    def has_active_transaction(self) -> bool:
        return self._transaction is not None

    def dispatch(self, command: Command) -> Any:
        """Run a queued command against this store."""
        return getattr(self, command.name)(*command.args)

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            entries=copy.deepcopy(self._entries),
            cursors=dict(self._cursors),
            id_counter=self._id_counter,
            cursor_id_counter=self._cursor_id_counter,
        )

    def restore(self, snapshot: StoreSnapshot) -> None:
        """Put entries, cursors and counters back to ``snapshot``."""
        self._entries = copy.deepcopy(snapshot.entries)
        self._cursors = dict(snapshot.cursors)
        self._id_counter = snapshot.id_counter
        self._cursor_id_counter = snapshot.cursor_id_counter

    # Inspection

    def entries(self) -> tuple:
        """
        Get copies of all entries, oldest first (for testing purposes).

        Returns:
            A tuple of frozen entries that cannot affect the store
        """
        return tuple(copy.deepcopy(list(self._entries.values())))

    def reset(self) -> None:
        """Discard all changes and return to the initial entries."""
        self._load(self._initial_entries)
        logger.info("store_reset", entries=len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
