"""
Storage types and per-entry options.

| Type             | Medium                 | Read semantics       |
|------------------|------------------------|----------------------|
| memory           | in-process mapping     | by reference         |
| immutable_memory | in-process mapping     | deep copy on get/set |
| session          | process-scoped strings | by reference (cache) |
| local            | files on disk          | by reference (cache) |
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from .errors import PersistenceConfigError, UnknownStorageTypeError

Duration = Union[int, float, timedelta]


class StorageType(str, Enum):
    """Selector for the medium (and copy semantics) backing a key."""
    MEMORY = "memory"
    IMMUTABLE_MEMORY = "immutable_memory"
    SESSION = "session"
    LOCAL = "local"


STORAGE_TYPES = frozenset(t.value for t in StorageType)


def resolve_storage_type(value: Any) -> StorageType:
    """Coerce a member or its string value to StorageType. Fails fast otherwise."""
    if isinstance(value, StorageType):
        return value
    if isinstance(value, str):
        try:
            return StorageType(value.lower())
        except ValueError:
            pass
    raise UnknownStorageTypeError(value, STORAGE_TYPES)


def to_seconds(value: Optional[Duration], name: str) -> Optional[float]:
    """Normalize a duration to float seconds (None passes through)."""
    if value is None:
        return None
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PersistenceConfigError(
            f"'{name}' must be a number of seconds or a timedelta, got {type(value).__name__}"
        )
    else:
        seconds = float(value)
    if seconds < 0:
        raise PersistenceConfigError(f"'{name}' must not be negative (got {seconds})")
    return seconds


# camelCase spellings accepted in option mappings
_OPTION_ALIASES = {
    "expireAfter": "expire_after",
    "oneUse": "one_use",
    "storage_type": "type",
}


@dataclass
class PersistenceOptions:
    """
    Options for a single ``set`` call.

    Parameters:
        type: storage type (default MEMORY)
        expire_after: absolute lifetime from creation, seconds or timedelta
        timeout: sliding lifetime from the last live read
        one_use: delete the entry right after its first live read
    """
    type: StorageType = StorageType.MEMORY
    expire_after: Optional[Duration] = None
    timeout: Optional[Duration] = None
    one_use: bool = False

    def __post_init__(self):
        self.type = resolve_storage_type(self.type)
        self.expire_after = to_seconds(self.expire_after, "expire_after")
        self.timeout = to_seconds(self.timeout, "timeout")
        self.one_use = bool(self.one_use)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "expire_after": self.expire_after,
            "timeout": self.timeout,
            "one_use": self.one_use,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "PersistenceOptions":
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for raw_key, val in d.items():
            key = _OPTION_ALIASES.get(raw_key, raw_key)
            if key not in known:
                raise PersistenceConfigError(f"Unknown persistence option '{raw_key}'")
            kwargs[key] = val
        return cls(**kwargs)

    @classmethod
    def coerce(cls, options: Any = None, **overrides: Any) -> "PersistenceOptions":
        """Build options from None, a mapping, or an instance, plus keyword overrides."""
        if options is None:
            base: Dict[str, Any] = {}
        elif isinstance(options, PersistenceOptions):
            base = {f.name: getattr(options, f.name) for f in fields(cls)}
        elif isinstance(options, Mapping):
            base = dict(options)
        else:
            raise PersistenceConfigError(
                f"options must be a mapping or PersistenceOptions, got {type(options).__name__}"
            )
        base.update(overrides)
        return cls.from_dict(base)


__all__ = [
    "StorageType",
    "STORAGE_TYPES",
    "PersistenceOptions",
    "Duration",
    "resolve_storage_type",
    "to_seconds",
]
