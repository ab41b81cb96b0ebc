"""Promotion ("top") window - encoding, decoding and activity checks.

A window is stored as JSON text in the listing's ``top`` column:

    {"activated_at": "2024-01-01T00:00:00Z", "expires_at": "2024-01-08T00:00:00Z", "duration_days": 7}

Expiry is evaluated lazily at read time; nothing sweeps lapsed windows.
"""

import logging
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)


class InvalidDurationError(ValueError):
    """Promotion duration must be a positive number of days."""

    pass


def _as_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PromotionWindow(BaseModel):
    """Time-bounded paid boost for a listing."""

    model_config = ConfigDict(frozen=True)

    activated_at: datetime | None = None
    expires_at: datetime | None = None
    duration_days: int = 0

    @field_validator("activated_at", "expires_at")
    @classmethod
    def _normalize_timestamp(cls, value: datetime | None) -> datetime | None:
        # Legacy rows carry the zero time ("0001-01-01T00:00:00Z") for unset values
        if value is None or value.year <= 1:
            return None
        try:
            return _as_utc(value)
        except OverflowError:
            raise ValueError("timestamp out of range after UTC conversion")

    def is_active(self, now: datetime | None = None) -> bool:
        return is_active(self, now)


def encode(activated_at: datetime, duration_days: int) -> PromotionWindow:
    """Build a window starting at ``activated_at`` lasting ``duration_days`` UTC days."""
    if isinstance(duration_days, bool) or not isinstance(duration_days, int) or duration_days <= 0:
        raise InvalidDurationError(f"Invalid top duration: {duration_days!r}")
    start = _as_utc(activated_at)
    try:
        expires_at = start + timedelta(days=duration_days)
    except OverflowError:
        raise InvalidDurationError(f"Top duration out of range: {duration_days!r}")
    return PromotionWindow(
        activated_at=start,
        expires_at=expires_at,
        duration_days=duration_days,
    )


def serialize(window: PromotionWindow) -> str:
    """Text stored in the listing's promotion column."""
    return window.model_dump_json()


def _parse_rfc3339(raw: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            return None
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def decode(raw: str | None) -> PromotionWindow | None:
    """
    Parse stored promotion text.

    Falls back to a bare RFC 3339 timestamp (legacy format), read as both
    activation and expiry, which yields an already-expired window.
    Returns None for empty or unparseable input; callers treat None as
    "no active promotion".
    """
    raw = (raw or "").strip()
    if not raw:
        return None

    try:
        return PromotionWindow.model_validate_json(raw)
    except ValidationError:
        pass

    legacy = _parse_rfc3339(raw)
    if legacy is not None:
        return PromotionWindow(activated_at=legacy, expires_at=legacy)

    logger.warning(
        "Ignoring unparseable promotion payload",
        extra={"payload_length": len(raw)},
    )
    return None


def is_active(window: PromotionWindow | None, now: datetime | None = None) -> bool:
    """True while ``activated_at <= now < expires_at``."""
    if window is None or window.activated_at is None or window.expires_at is None:
        return False
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return window.activated_at <= current < window.expires_at
