"""
Persistence Service - one get/set/remove/remove_all contract over every
storage type.

Usage:
    from hu_persist import PersistenceService, StorageType

    store = PersistenceService()
    store.set("token", "abc", one_use=True)
    store.set("profile", {"name": "x"}, {"type": StorageType.LOCAL, "timeout": 900})
    store.get("profile", StorageType.LOCAL)
"""
from __future__ import annotations

import copy
import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

from .envelope import ABSENT, EntryEnvelope
from .errors import StorageEncodeError
from .lifetime import evaluate_read, touch
from .persistence.adapters import EncodedAdapter, MemoryAdapter
from .persistence.interfaces import BackendAdapter, StorageMedium
from .persistence.mediums import FileMedium, get_session_medium
from .types import PersistenceOptions, StorageType, resolve_storage_type

logger = logging.getLogger(__name__)


def _deep_copy(key: str, value: Any) -> Any:
    try:
        return copy.deepcopy(value)
    except (TypeError, copy.Error, RecursionError) as e:
        raise StorageEncodeError(key, f"value cannot be copied: {e}") from e


class PersistenceService:
    """
    Facade routing each key to the adapter of its storage type.

    Every storage type is an independent keyspace guarded by its own lock;
    a ``get`` reads, evaluates liveness and writes back (or deletes) inside
    that lock. Expiry is lazy: dead entries are dropped when read.
    """

    def __init__(
        self,
        session_medium: Optional[StorageMedium] = None,
        local_medium: Optional[StorageMedium] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            session_medium: Medium for SESSION (default: process-wide session medium)
            local_medium: Medium for LOCAL (default: FileMedium under HU_PERSIST_HOME/local)
            clock: Returns the current time in seconds
        """
        if session_medium is None:
            session_medium = get_session_medium()
        if local_medium is None:
            local_medium = FileMedium()
        self._clock = clock
        self._adapters: Dict[StorageType, BackendAdapter] = {
            StorageType.MEMORY: MemoryAdapter(),
            StorageType.IMMUTABLE_MEMORY: MemoryAdapter(),
            StorageType.SESSION: EncodedAdapter(session_medium),
            StorageType.LOCAL: EncodedAdapter(local_medium),
        }
        self._locks: Dict[StorageType, threading.RLock] = {
            t: threading.RLock() for t in StorageType
        }

    @classmethod
    def from_config(
        cls,
        path: str | Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> "PersistenceService":
        """Build a service from the ``persistence`` section of a YAML config."""
        from .config import build_local_medium, build_session_medium, get_persistence_settings

        settings = get_persistence_settings(path)
        return cls(
            session_medium=build_session_medium(settings),
            local_medium=build_local_medium(settings),
            clock=clock,
        )

    def adapter(self, storage_type: Any = StorageType.MEMORY) -> BackendAdapter:
        """Return the adapter backing a storage type."""
        return self._adapters[resolve_storage_type(storage_type)]

    # ── operations ────────────────────────────────────────────────────────

    def set(self, key: str, value: Any = ABSENT, options: Any = None, **kwargs: Any) -> None:
        """
        Store ``value`` under ``key``.

        ``options`` is a PersistenceOptions or a mapping with ``type``,
        ``expire_after``, ``timeout`` and ``one_use``; keyword arguments
        override it. Storing ABSENT removes the key.
        """
        opts = PersistenceOptions.coerce(options, **kwargs)
        if value is ABSENT:
            self.remove(key, opts.type)
            return

        if opts.type is StorageType.IMMUTABLE_MEMORY:
            value = _deep_copy(key, value)

        with self._locks[opts.type]:
            envelope = EntryEnvelope.create(
                value,
                now=self._clock(),
                expire_after=opts.expire_after,
                sliding_timeout=opts.timeout,
                one_use=opts.one_use,
            )
            self._adapters[opts.type].write(key, envelope)
        logger.debug(f"Stored '{key}' in {opts.type.value}")

    def get(self, key: str, type: Any = StorageType.MEMORY, default: Any = ABSENT) -> Any:
        """
        Return the live value for ``key``, or ``default`` if missing or dead.

        Sliding entries have their window reset; one-use entries are removed.
        IMMUTABLE_MEMORY returns a deep copy.
        """
        storage_type = resolve_storage_type(type)
        adapter = self._adapters[storage_type]

        with self._locks[storage_type]:
            envelope = adapter.read(key)
            if envelope is None:
                return default

            now = self._clock()
            decision = evaluate_read(envelope, now)
            if not decision.live:
                adapter.remove(key)
                logger.debug(f"Evicted '{key}' from {storage_type.value} ({decision.reason})")
                return default

            value = envelope.value
            if decision.delete_after_read:
                adapter.remove(key)
                logger.debug(f"Consumed one-use '{key}' from {storage_type.value}")
            elif decision.touch:
                adapter.write(key, touch(envelope, now))

        if storage_type is StorageType.IMMUTABLE_MEMORY:
            value = _deep_copy(key, value)
        return value

    def remove(self, key: str, type: Any = StorageType.MEMORY) -> None:
        """Delete ``key`` regardless of liveness."""
        storage_type = resolve_storage_type(type)
        with self._locks[storage_type]:
            self._adapters[storage_type].remove(key)

    def remove_all(self, type: Any = None) -> None:
        """Clear one storage type, or all of them when ``type`` is None."""
        targets: Iterable[StorageType]
        if type is None:
            targets = list(StorageType)
        else:
            targets = [resolve_storage_type(type)]

        for storage_type in targets:
            with self._locks[storage_type]:
                self._adapters[storage_type].clear()
            logger.info(f"Cleared {storage_type.value} storage")


__all__ = ["PersistenceService"]
