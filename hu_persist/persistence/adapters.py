"""
hu-persist Backend Adapters.

One adapter instance per storage type. MemoryAdapter keeps envelope objects
by reference; EncodedAdapter translates envelopes to and from a string-only
StorageMedium.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from ..envelope import EntryEnvelope, decode_envelope, encode_envelope
from ..errors import StorageDecodeError
from .interfaces import BackendAdapter, StorageMedium

logger = logging.getLogger(__name__)


class MemoryAdapter(BackendAdapter):
    """In-process mapping of envelopes. Identity-preserving on read and write."""

    def __init__(self):
        self._entries: Dict[str, EntryEnvelope] = {}

    def read(self, key: str) -> Optional[EntryEnvelope]:
        return self._entries.get(key)

    def write(self, key: str, envelope: EntryEnvelope) -> None:
        self._entries[key] = envelope

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> List[str]:
        return sorted(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class EncodedAdapter(BackendAdapter):
    """
    Envelope access over a string-only medium.

    Keeps the envelope object from the last read/write of each key together
    with the raw string it corresponds to. While the medium still holds that
    exact string, reads hand back the same object, so callers mutating a
    returned value see the change on the next read. Any external rewrite of
    the medium invalidates the cached object.
    """

    def __init__(self, medium: StorageMedium):
        self.medium = medium
        self._cache: Dict[str, Tuple[str, EntryEnvelope]] = {}

    def read(self, key: str) -> Optional[EntryEnvelope]:
        try:
            raw = self.medium.get_item(key)
            if raw is None:
                self._cache.pop(key, None)
                return None

            cached = self._cache.get(key)
            if cached is not None and cached[0] == raw:
                return cached[1]

            envelope = decode_envelope(key, raw)
        except StorageDecodeError as e:
            self._cache.pop(key, None)
            logger.warning(f"Undecodable entry in {type(self.medium).__name__}: {e}")
            raise
        self._cache[key] = (raw, envelope)
        return envelope

    def write(self, key: str, envelope: EntryEnvelope) -> None:
        raw = encode_envelope(key, envelope)
        self.medium.set_item(key, raw)
        self._cache[key] = (raw, envelope)

    def remove(self, key: str) -> None:
        self._cache.pop(key, None)
        self.medium.remove_item(key)

    def clear(self) -> None:
        self._cache.clear()
        self.medium.clear()

    def keys(self) -> List[str]:
        return self.medium.keys()
