"""
hu-persist - unified key-value persistence.

Provides one get/set/remove/remove_all contract over four storage types:
- memory: plain in-process map
- immutable_memory: in-process map with copy isolation
- session: process-scoped string store
- local: durable file store

Entries can carry an absolute expiry, a sliding timeout, or be one-use.
Expiry is enforced lazily on read.
"""

__version__ = "0.1.0"

from .envelope import ABSENT, EntryEnvelope
from .errors import (
    PersistenceError,
    PersistenceConfigError,
    UnknownStorageTypeError,
    StorageError,
    StorageDecodeError,
    StorageEncodeError,
    StorageQuotaExceededError,
)
from .lifetime import ReadDecision, evaluate_read, is_live
from .persistence import (
    StorageMedium,
    BackendAdapter,
    InMemoryMedium,
    FileMedium,
    MemoryAdapter,
    EncodedAdapter,
    get_session_medium,
    get_persist_home,
)
from .service import PersistenceService
from .types import PersistenceOptions, StorageType

__all__ = [
    "__version__",
    # Facade
    "PersistenceService",
    "PersistenceOptions",
    "StorageType",
    "ABSENT",
    # Envelope / lifetime
    "EntryEnvelope",
    "ReadDecision",
    "evaluate_read",
    "is_live",
    # Media / adapters
    "StorageMedium",
    "BackendAdapter",
    "InMemoryMedium",
    "FileMedium",
    "MemoryAdapter",
    "EncodedAdapter",
    "get_session_medium",
    "get_persist_home",
    # Errors
    "PersistenceError",
    "PersistenceConfigError",
    "UnknownStorageTypeError",
    "StorageError",
    "StorageDecodeError",
    "StorageEncodeError",
    "StorageQuotaExceededError",
]
