"""
In-memory key-value store

A Python implementation of an in-process key-value store with string, hash
and list commands, cursor-based scanning, and multi/exec transactions with
rollback.
"""

from .store import Store, OK
from .async_store import AsyncStore
from .transaction import Transaction, Command, QUEUED
from .async_transaction import AsyncTransaction
from .registry import Registry
from .values import Entry, ValueType
from .config import settings, configure_logging
from .exceptions import (
    StoreError,
    KeyNotFoundError,
    TypeMismatchError,
    NotANumberError,
    FieldNotANumberError,
    InvalidIndexError,
    CursorNotFoundError,
    UnknownStoreError,
    TransactionError,
    TransactionStateError,
    TransactionAbortedError,
)

__version__ = "0.1.0"
__all__ = [
    "Store",
    "AsyncStore",
    "Transaction",
    "AsyncTransaction",
    "Command",
    "Registry",
    "Entry",
    "ValueType",
    "OK",
    "QUEUED",
    "settings",
    "configure_logging",
    "StoreError",
    "KeyNotFoundError",
    "TypeMismatchError",
    "NotANumberError",
    "FieldNotANumberError",
    "InvalidIndexError",
    "CursorNotFoundError",
    "UnknownStoreError",
    "TransactionError",
    "TransactionStateError",
    "TransactionAbortedError",
]
