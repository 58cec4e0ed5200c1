"""
Value model for the key-value store.

Every stored value is one of three kinds:

- primitive: a ``str``, ``int`` or ``float``
- hash: a ``dict`` mapping field names to primitives
- list: a ``list`` of primitives

Commands never inspect raw Python types directly. They go through the
guards in this module, which raise ``TypeMismatchError`` when an entry
holds the wrong kind of value.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .exceptions import TypeMismatchError

Primitive = Union[str, int, float]
Hash = Dict[str, Primitive]
Value = Union[Primitive, Hash, List[Primitive]]


def is_primitive(value: Any) -> bool:
    # bool is an int subclass but is not a valid stored value
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


class ValueType(Enum):
    """The kind of value held by an entry."""
    PRIMITIVE = "primitive"
    HASH = "hash"
    LIST = "list"

    @classmethod
    def of(cls, value: Any) -> "ValueType":
        """Classify a value, rejecting anything the store cannot hold."""
        if is_primitive(value):
            return cls.PRIMITIVE
        if isinstance(value, dict):
            for name, item in value.items():
                if not isinstance(name, str):
                    raise TypeMismatchError(f"Hash field names must be strings, got {name!r}.")
                check_primitive(item)
            return cls.HASH
        if isinstance(value, list):
            for item in value:
                check_primitive(item)
            return cls.LIST
        raise TypeMismatchError(f"Unsupported value of type {type(value).__name__}.")


@dataclass(frozen=True)
class Entry:
    """
    A stored key and its value.

    Entries are immutable: commands build a replacement entry rather than
    changing one in place. ``id`` orders entries for scanning and is kept
    for the lifetime of the key, including across renames. ``kind`` is
    worked out once, when the entry is built.
    """
    key: str
    value: Value
    id: int
    expiry: Optional[int] = None
    kind: ValueType = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ValueType.of(self.value))


def check_primitive(value: Any) -> Primitive:
    if not is_primitive(value):
        raise TypeMismatchError(
            f"Expected a primitive but received {type(value).__name__}."
        )
    return value


def ensure_primitive(entry: Entry) -> Primitive:
    """Return the entry's value, or raise if it is not a primitive."""
    if entry.kind is not ValueType.PRIMITIVE:
        raise TypeMismatchError(
            f"The value with key {entry.key} is a {entry.kind.value}, not a string or number."
        )
    return entry.value


def ensure_hash(entry: Optional[Entry]) -> Hash:
    """
    Return the entry's hash.

    A missing entry reads as an empty hash, so read-only hash commands
    behave as if the key held ``{}``.
    """
    if entry is None:
        return {}
    if entry.kind is not ValueType.HASH:
        raise TypeMismatchError(f"The value with key {entry.key} is not a hash.")
    return entry.value


def ensure_list(entry: Optional[Entry], key: str) -> List[Primitive]:
    """Return the entry's list, or raise if it is missing or not a list."""
    if entry is None or entry.kind is not ValueType.LIST:
        raise TypeMismatchError(f"The value with key {key} is not a list.")
    return entry.value


def as_integer(value: Any) -> Optional[int]:
    """Interpret a primitive as an integer, or return None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def as_float(value: Any) -> Optional[float]:
    """Interpret a primitive as a finite float, or return None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def stringify(value: Primitive) -> str:
    """String form of a primitive. Integral floats drop their fraction."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
