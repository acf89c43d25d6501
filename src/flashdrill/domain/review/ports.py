"""
Ports (interfaces) for review state and card catalogs.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Card


class StateStore(ABC):
    """
    Port for a string key-value store holding serialized review state.

    Implementations:
        - JsonFileStateStore: One JSON document on disk.
        - InMemoryStateStore: Process-local dict, for tests and throwaway sessions.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Return the stored value for key, or None if absent.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store value under key, replacing any previous value.

        May raise OSError; callers decide whether a failed write is fatal.
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Delete key if present.
        """
        pass


class CatalogRepository(ABC):
    """
    Port for loading the list of reviewable cards.

    Implementations:
        - YamlCatalogRepository: Reads a YAML or JSON file.
    """

    @abstractmethod
    def load_cards(self) -> list[Card]:
        """
        Load every card in the catalog.

        Returns:
            Cards with unique ids, in catalog order.

        Raises:
            CatalogError: If the catalog cannot be read or is invalid.
        """
        pass
