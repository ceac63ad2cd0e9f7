"""Abstract interface (port) for the persistent key-value store."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Port for string-blob persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the blob stored under ``key``, or None if nothing was stored.

        Raises:
            StorageError: If the backend is unavailable or unreadable.
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Replace the blob stored under ``key``.

        The write must be complete when the call returns.

        Raises:
            StorageError: If the backend cannot be written.
        """
        ...
