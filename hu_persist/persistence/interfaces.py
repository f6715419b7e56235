"""
hu-persist Persistence Interfaces.

Abstract base classes for storage media and backend adapters.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..envelope import EntryEnvelope


class StorageMedium(ABC):
    """String-only key-value store (the shape of a session/local storage)."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the raw string for a key, or None if missing."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a raw string. May raise if the medium refuses the write."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete a key. No error if it does not exist."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete every key."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List stored keys."""
        pass


class BackendAdapter(ABC):
    """Raw envelope access for one storage type."""

    @abstractmethod
    def read(self, key: str) -> Optional[EntryEnvelope]:
        """Read an envelope, or None if the key is missing."""
        pass

    @abstractmethod
    def write(self, key: str, envelope: EntryEnvelope) -> None:
        """Write (replace) the envelope for a key."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the envelope for a key. No error if missing."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete every envelope in this adapter's medium."""
        pass
