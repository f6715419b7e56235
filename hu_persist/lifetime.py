"""
Lifetime Policy Engine - decide what a read does to an envelope.

Rules:
    - absolute expiry: dead once ``now - created_at >= expire_after``
    - sliding expiry: dead once ``now - last_accessed_at >= sliding_timeout``
    - either condition kills the entry (most restrictive wins)
    - a live read of a sliding entry resets ``last_accessed_at``
    - a live read of a one-use entry deletes it

Evaluation is pure; the caller applies the decision. Nothing here runs on a
timer, so dead entries stay in their medium until the next touch.

Usage:
    decision = evaluate_read(envelope, now)
    if not decision.live:
        adapter.remove(key)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .envelope import EntryEnvelope


@dataclass(frozen=True)
class ReadDecision:
    """Outcome of evaluating one read against an envelope."""
    live: bool
    touch: bool = False
    delete_after_read: bool = False
    reason: Optional[str] = None


_DEAD_EXPIRED = ReadDecision(False, reason="expired")
_DEAD_IDLE = ReadDecision(False, reason="idle timeout")


def is_expired(envelope: EntryEnvelope, now: float) -> bool:
    """True if the absolute lifetime has elapsed."""
    return (
        envelope.expire_after is not None
        and now - envelope.created_at >= envelope.expire_after
    )


def is_idle(envelope: EntryEnvelope, now: float) -> bool:
    """True if the sliding window has elapsed since the last live read."""
    return (
        envelope.sliding_timeout is not None
        and now - envelope.last_accessed_at >= envelope.sliding_timeout
    )


def is_live(envelope: EntryEnvelope, now: float) -> bool:
    return not (is_expired(envelope, now) or is_idle(envelope, now))


def evaluate_read(envelope: EntryEnvelope, now: float) -> ReadDecision:
    """Classify a read at ``now`` as live/dead and list its side effects."""
    if is_expired(envelope, now):
        return _DEAD_EXPIRED
    if is_idle(envelope, now):
        return _DEAD_IDLE

    if envelope.one_use:
        # deletion supersedes the sliding touch
        return ReadDecision(True, delete_after_read=True, reason="one use")
    if envelope.sliding_timeout is not None:
        return ReadDecision(True, touch=True)
    return ReadDecision(True)


def touch(envelope: EntryEnvelope, now: float) -> EntryEnvelope:
    """Reset the sliding window."""
    envelope.last_accessed_at = now
    return envelope


__all__ = [
    "ReadDecision",
    "evaluate_read",
    "is_expired",
    "is_idle",
    "is_live",
    "touch",
]
