"""
Binding Policy Resolution

This module computes the effective expiration and usage limit of a binding
from the values carried by a bind request and the global defaults.

Rules:
- Local policy is a total override: global values are used only when the
  request carries neither a positive TTL nor an explicit expiration date
- Within one level, the later of (bound_at + TTL) and the explicit date wins
- An unset expiration is None, never a reserved timestamp
- All timestamps are naive UTC (SQLite drops tzinfo on read)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from shortlink.core.exceptions import InvalidPolicyError
from shortlink.core.setting import Settings


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a timestamp to naive UTC. Naive input is assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class BindingPolicy:
    """
    Global configuration surface consumed by the binding services.

    Passed explicitly to every service so that policy logic never reads
    process-global state.
    """
    alphabet: str
    length: int
    ttl: int = 0
    expire_on: Optional[datetime] = None
    max_requests: int = 0
    expired_redirect_url: str = ""
    exhausted_redirect_url: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> "BindingPolicy":
        return cls(
            alphabet=settings.SHORT_ID_ALPHABET,
            length=settings.SHORT_ID_LENGTH,
            ttl=settings.SHORT_ID_TTL,
            expire_on=as_utc(settings.SHORT_ID_EXPIRE_ON),
            max_requests=settings.SHORT_ID_MAX_REQUESTS,
            expired_redirect_url=settings.EXPIRED_REDIRECT_URL,
            exhausted_redirect_url=settings.EXHAUSTED_REDIRECT_URL,
        )


def calculate_expiration(
    bound_at: datetime,
    ttl: Optional[int],
    expire_on: Optional[datetime]
) -> Optional[datetime]:
    """
    Return the later of ``bound_at + ttl`` and ``expire_on``.

    A non-positive TTL and a missing date are both unset; returns None when
    both are unset.

    Raises:
        InvalidPolicyError: If bound_at + ttl is past the last representable date
    """
    expire = None
    if ttl and ttl > 0:
        try:
            expire = bound_at + timedelta(seconds=ttl)
        except OverflowError:
            raise InvalidPolicyError("ttl", ttl, f"expiration out of range from {bound_at.isoformat()}")
    expire_on = as_utc(expire_on)
    if expire_on is not None and (expire is None or expire_on > expire):
        expire = expire_on
    return expire


def resolve_expiration(
    bound_at: datetime,
    local_ttl: Optional[int],
    local_expire_on: Optional[datetime],
    global_ttl: Optional[int],
    global_expire_on: Optional[datetime]
) -> Optional[datetime]:
    """
    Compute the effective expiration of a binding.

    Args:
        bound_at: When the binding is created
        local_ttl: TTL in seconds from the request
        local_expire_on: Explicit expiration from the request
        global_ttl: Default TTL in seconds
        global_expire_on: Default explicit expiration

    Returns:
        Effective expiration as naive UTC, or None if the binding never
        expires by time
    """
    expire = calculate_expiration(bound_at, local_ttl, local_expire_on)
    if expire is None:
        expire = calculate_expiration(bound_at, global_ttl, global_expire_on)
    return expire


def resolve_max_access(local_max: Optional[int], global_max: Optional[int]) -> int:
    """Local max-access if non-zero, else global, else 0 (unlimited)."""
    return local_max or global_max or 0
