"""
hu-persist Persistence - storage media and backend adapters.
"""
from .interfaces import StorageMedium, BackendAdapter
from .mediums import InMemoryMedium, FileMedium, get_session_medium, get_persist_home
from .adapters import MemoryAdapter, EncodedAdapter

__all__ = [
    # Interfaces
    "StorageMedium",
    "BackendAdapter",
    # Media
    "InMemoryMedium",
    "FileMedium",
    # Adapters
    "MemoryAdapter",
    "EncodedAdapter",
    # Utils
    "get_session_medium",
    "get_persist_home",
]
