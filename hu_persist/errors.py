"""
hu-persist error taxonomy.

Configuration errors are raised before any state change. Storage errors come
from encoding, decoding, or a medium refusing a write.
"""
from __future__ import annotations

from typing import Any, Iterable


class PersistenceError(Exception):
    """Base class for all hu-persist errors."""


class PersistenceConfigError(PersistenceError, ValueError):
    """Invalid configuration or options passed to a persistence operation."""


class UnknownStorageTypeError(PersistenceConfigError):
    """Raised when a storage type selector is not recognized."""

    def __init__(self, storage_type: Any, valid: Iterable[str] = ()):
        self.storage_type = storage_type
        valid_list = sorted(valid)
        msg = f"Unknown storage type {storage_type!r}"
        if valid_list:
            msg += f". Valid: {valid_list}"
        super().__init__(msg)


class StorageError(PersistenceError):
    """A backend failed to read or write an entry."""


class StorageDecodeError(StorageError):
    """Raw medium data could not be decoded into an entry envelope."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Cannot decode entry for key '{key}': {reason}")


class StorageEncodeError(StorageError):
    """A value could not be encoded (or copied) for storage."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Cannot encode entry for key '{key}': {reason}")


class StorageQuotaExceededError(StorageError):
    """A medium rejected a write because its quota would be exceeded."""

    def __init__(self, key: str, quota: int, required: int):
        self.key = key
        self.quota = quota
        self.required = required
        super().__init__(
            f"Writing key '{key}' needs {required} units, quota is {quota}"
        )


__all__ = [
    "PersistenceError",
    "PersistenceConfigError",
    "UnknownStorageTypeError",
    "StorageError",
    "StorageDecodeError",
    "StorageEncodeError",
    "StorageQuotaExceededError",
]
