"""
Custom exceptions for the in-memory key-value store.
"""


class StoreError(Exception):
    """Base exception for all store-related errors."""
    pass


class KeyNotFoundError(StoreError):
    """Exception raised when a command requires a key that is not in the store."""
    pass


class TypeMismatchError(StoreError):
    """Exception raised when a key holds a different kind of value than the command expects."""
    pass


class NotANumberError(StoreError):
    """Exception raised when a numeric command targets a non-numeric value."""
    pass


class FieldNotANumberError(NotANumberError):
    """Exception raised when a numeric hash command targets a non-numeric field."""
    pass


class InvalidIndexError(StoreError):
    """Exception raised when a list index is out of range."""
    pass


class CursorNotFoundError(StoreError):
    """Exception raised when scanning from a cursor that does not exist."""
    pass


class UnknownStoreError(StoreError):
    """Exception raised when a registry has no store with the requested name."""
    pass


class TransactionError(StoreError):
    """Exception raised for transaction-related errors."""
    pass


class TransactionStateError(TransactionError):
    """Exception raised when multi/exec/discard is called in the wrong state."""
    pass


class TransactionAbortedError(TransactionError):
    """
    Exception raised when a queued command fails during exec.

    The store has already been restored to its state before exec when this
    is raised. The failing command's error is available as ``__cause__``.
    """

    def __init__(self, message: str, index: int, command: str) -> None:
        super().__init__(message)
        self.index = index
        self.command = command
