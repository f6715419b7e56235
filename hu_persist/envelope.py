"""
Entry Envelope - the unit every backend actually stores.

Wraps the caller's value with its lifetime metadata. In-process backends keep
the EntryEnvelope object itself; string-only media store the JSON encoding
produced by ``encode_envelope`` (validated on the way back in with pydantic).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import StorageDecodeError, StorageEncodeError


class _Absent:
    """Marker for "no value" (distinct from None)."""

    _instance: Optional["_Absent"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return "ABSENT"


ABSENT: Any = _Absent()


@dataclass
class EntryEnvelope:
    """A stored value plus its expiry / one-use metadata (timestamps in seconds)."""
    value: Any
    created_at: float
    last_accessed_at: float
    expire_after: Optional[float] = None
    sliding_timeout: Optional[float] = None
    one_use: bool = False

    @classmethod
    def create(
        cls,
        value: Any,
        now: float,
        expire_after: Optional[float] = None,
        sliding_timeout: Optional[float] = None,
        one_use: bool = False,
    ) -> "EntryEnvelope":
        if value is ABSENT:
            raise ValueError("ABSENT cannot be stored; remove the key instead")
        return cls(
            value=value,
            created_at=now,
            last_accessed_at=now,
            expire_after=expire_after,
            sliding_timeout=sliding_timeout,
            one_use=one_use,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "created_at": self.created_at,
            "last_accessed_at": self.last_accessed_at,
            "expire_after": self.expire_after,
            "sliding_timeout": self.sliding_timeout,
            "one_use": self.one_use,
        }


# =============================================================================
# WIRE FORMAT
# =============================================================================

class EnvelopeRecord(BaseModel):
    """JSON shape of an envelope inside a string-only medium."""
    model_config = ConfigDict(extra="forbid")

    value: Any
    created_at: float
    last_accessed_at: float
    expire_after: Optional[float] = None
    sliding_timeout: Optional[float] = None
    one_use: bool = False


def _json_native_problem(value: Any, path: str = "value") -> Optional[str]:
    """Describe the first part of ``value`` JSON would not round-trip, or None."""
    kind = type(value)
    if value is None or kind in (str, int, bool):
        return None
    if kind is float:
        return None if math.isfinite(value) else f"{path} is {value!r}"
    if kind is list:
        for i, item in enumerate(value):
            problem = _json_native_problem(item, f"{path}[{i}]")
            if problem:
                return problem
        return None
    if kind is dict:
        for k, item in value.items():
            if type(k) is not str:
                return f"{path} has non-string key {k!r}"
            problem = _json_native_problem(item, f"{path}[{k!r}]")
            if problem:
                return problem
        return None
    return f"{path} has non-JSON type {kind.__name__}"


def encode_envelope(key: str, envelope: EntryEnvelope) -> str:
    """Serialize an envelope to its JSON string form. Raises StorageEncodeError."""
    try:
        problem = _json_native_problem(envelope.value)
    except RecursionError as e:
        raise StorageEncodeError(key, "value is too deeply nested or self-referencing") from e
    if problem:
        raise StorageEncodeError(key, problem)
    try:
        return EnvelopeRecord(**envelope.to_dict()).model_dump_json()
    except (PydanticSerializationError, ValidationError, TypeError, ValueError) as e:
        raise StorageEncodeError(key, str(e)) from e


def decode_envelope(key: str, raw: str) -> EntryEnvelope:
    """Parse a JSON string back into an envelope. Raises StorageDecodeError."""
    try:
        record = EnvelopeRecord.model_validate_json(raw)
    except ValidationError as e:
        raise StorageDecodeError(key, f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}") from e
    return EntryEnvelope(**record.model_dump())


__all__ = [
    "ABSENT",
    "EntryEnvelope",
    "EnvelopeRecord",
    "encode_envelope",
    "decode_envelope",
]
