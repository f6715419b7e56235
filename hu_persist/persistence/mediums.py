"""
hu-persist Storage Media.

Default string-only media: a process-scoped in-memory store for the session
scope and a filesystem store for the durable (local) scope.
"""
from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from ..errors import StorageDecodeError, StorageQuotaExceededError
from .interfaces import StorageMedium

logger = logging.getLogger(__name__)


def get_persist_home() -> Path:
    """
    Get hu-persist home directory.

    Uses HU_PERSIST_HOME env var or defaults to ~/.hu_persist
    """
    home = os.environ.get("HU_PERSIST_HOME")
    if home:
        return Path(home).expanduser()
    return Path.home() / ".hu_persist"


class InMemoryMedium(StorageMedium):
    """
    Process-scoped string store.

    Lives as long as the process; used as the session medium. Quota is
    counted in characters of key + value, like browser web storage.
    """

    def __init__(self, quota: Optional[int] = None):
        self.quota = quota
        self._items: Dict[str, str] = {}
        self._lock = threading.RLock()

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            if self.quota is not None:
                used = self.used()
                old = self._items.get(key)
                if old is not None:
                    used -= len(key) + len(old)
                required = used + len(key) + len(value)
                if required > self.quota:
                    raise StorageQuotaExceededError(key, self.quota, required)
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def keys(self) -> List[str]:
        return sorted(self._items)

    def used(self) -> int:
        """Characters currently stored (keys + values)."""
        return sum(len(k) + len(v) for k, v in self._items.items())

    def __len__(self) -> int:
        return len(self._items)


_SESSION_MEDIUM: Optional[InMemoryMedium] = None
_SESSION_LOCK = threading.Lock()


def get_session_medium(quota: Optional[int] = None) -> InMemoryMedium:
    """
    Return the process-wide session medium shared by every service.

    ``quota`` only applies when the medium is first created; later callers
    cannot change it for the rest of the process.
    """
    global _SESSION_MEDIUM
    with _SESSION_LOCK:
        if _SESSION_MEDIUM is None:
            _SESSION_MEDIUM = InMemoryMedium(quota=quota)
            logger.info("Session medium initialized (process scope)")
        elif quota is not None and quota != _SESSION_MEDIUM.quota:
            logger.warning(
                f"Session medium already exists with quota={_SESSION_MEDIUM.quota}; "
                f"ignoring quota={quota}"
            )
        return _SESSION_MEDIUM


class FileMedium(StorageMedium):
    """
    Filesystem-based durable storage.

    Stores each item as {base_dir}/{quoted_key}.json. Keys are
    percent-encoded so distinct keys never share a file. Keys whose encoded
    name would be too long for the filesystem are stored as
    {base_dir}/={sha256}.json, with the original key in ={sha256}.key.
    """

    SUFFIX = ".json"
    KEY_SUFFIX = ".key"
    # '=' is always percent-encoded by quote(), so hashed names cannot clash
    HASHED_PREFIX = "="
    MAX_NAME_LENGTH = 200

    def __init__(self, base_dir: Optional[Path] = None, quota_bytes: Optional[int] = None):
        """
        Initialize the store.

        Args:
            base_dir: Base directory (default: HU_PERSIST_HOME/local)
            quota_bytes: Optional cap on total bytes written under base_dir
        """
        if base_dir is None:
            base_dir = get_persist_home() / "local"
        self.base_dir = Path(base_dir).expanduser()
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.quota_bytes = quota_bytes
        self._lock = threading.RLock()

    def _get_stem(self, key: str) -> str:
        """File name (without suffix) for a key."""
        quoted = quote(key, safe="")
        if len(quoted) <= self.MAX_NAME_LENGTH:
            return quoted
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return f"{self.HASHED_PREFIX}{digest}"

    def _get_path(self, key: str) -> Path:
        """Get the path for a key."""
        return self.base_dir / f"{self._get_stem(key)}{self.SUFFIX}"

    def _key_path(self, stem: str) -> Path:
        return self.base_dir / f"{stem}{self.KEY_SUFFIX}"

    def _write_atomic(self, path: Path, data: bytes) -> None:
        """Write via a temp file in base_dir, then replace the target."""
        fd, tmp = tempfile.mkstemp(dir=self.base_dir, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_item(self, key: str) -> Optional[str]:
        path = self._get_path(key)
        if not path.exists():
            return None
        with open(path, "rb") as f:
            data = f.read()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StorageDecodeError(key, f"{path.name} is not valid UTF-8 ({e.reason})") from e

    def set_item(self, key: str, value: str) -> None:
        stem = self._get_stem(key)
        path = self.base_dir / f"{stem}{self.SUFFIX}"
        data = value.encode("utf-8")
        with self._lock:
            if self.quota_bytes is not None:
                used = self.used()
                if path.exists():
                    used -= path.stat().st_size
                required = used + len(data)
                if required > self.quota_bytes:
                    raise StorageQuotaExceededError(key, self.quota_bytes, required)
            if stem.startswith(self.HASHED_PREFIX):
                self._write_atomic(self._key_path(stem), key.encode("utf-8"))
            self._write_atomic(path, data)

    def remove_item(self, key: str) -> None:
        stem = self._get_stem(key)
        with self._lock:
            for path in (self.base_dir / f"{stem}{self.SUFFIX}", self._key_path(stem)):
                if path.exists():
                    path.unlink()

    def clear(self) -> None:
        with self._lock:
            removed = 0
            for path in self.base_dir.glob(f"*{self.SUFFIX}"):
                path.unlink()
                removed += 1
            for path in self.base_dir.glob(f"{self.HASHED_PREFIX}*{self.KEY_SUFFIX}"):
                path.unlink()
        logger.info(f"Cleared {removed} item(s) from {self.base_dir}")

    def keys(self) -> List[str]:
        """List all stored keys."""
        keys = []
        for path in self.base_dir.glob(f"*{self.SUFFIX}"):
            stem = path.name[: -len(self.SUFFIX)]
            if stem.startswith(self.HASHED_PREFIX):
                key_path = self._key_path(stem)
                if not key_path.exists():
                    continue
                keys.append(key_path.read_bytes().decode("utf-8"))
            else:
                keys.append(unquote(stem))
        return sorted(keys)

    def used(self) -> int:
        """Bytes currently stored under base_dir."""
        return sum(p.stat().st_size for p in self.base_dir.glob(f"*{self.SUFFIX}"))
