"""
Registry for named store instances.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

import structlog

from .async_store import AsyncStore
from .exceptions import UnknownStoreError
from .store import Store

logger = structlog.get_logger(__name__)

AnyStore = Union[Store, AsyncStore]


class Registry:
    """
    Maps database names to store instances.

    Create one registry per test or run; registries share nothing.

    Example usage:
        registry = Registry()
        registry.create("testdb", [{"key": "total", "value": 1000}])
        store = registry.lookup("testdb")
    """

    def __init__(self) -> None:
        self._stores: Dict[str, AnyStore] = {}

    def create(
        self,
        name: str,
        initial_entries: Optional[Iterable[Mapping[str, Any]]] = None,
        store_class: Type[AnyStore] = Store,
        **kwargs: Any,
    ) -> AnyStore:
        """
        Create a store and register it under ``name``.

        An existing store with the same name is replaced.

        Args:
            name: Database name
            initial_entries: Initial records for the store
            store_class: ``Store`` or ``AsyncStore``
            **kwargs: Passed on to the store (e.g. ``clock``)
        """
        store = store_class(initial_entries, **kwargs)
        self._stores[name] = store
        logger.info("store_registered", name=name, store_class=store_class.__name__)
        return store

    def lookup(self, name: str) -> AnyStore:
        """
        Get the store registered under ``name``.

        Raises:
            UnknownStoreError: If no store has that name
        """
        try:
            return self._stores[name]
        except KeyError:
            raise UnknownStoreError(f"No store named '{name}'")

    def drop(self, name: str) -> None:
        """Remove a store. Dropping an unknown name is a no-op."""
        if self._stores.pop(name, None) is not None:
            logger.info("store_dropped", name=name)

    def reset(self, name: str) -> None:
        """Return a store to its initial entries."""
        store = self.lookup(name)
        # AsyncStore.reset is a coroutine; reset the store underneath instead
        if isinstance(store, AsyncStore):
            store.store.reset()
        else:
            store.reset()

    def names(self) -> List[str]:
        return list(self._stores)

    def __contains__(self, name: str) -> bool:
        return name in self._stores
