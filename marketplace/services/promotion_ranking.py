"""Promotion-aware ordering of listing result sets.

Two modes:
- rank_by_promotion: full reorder for "my listings" and status-filtered views.
- lift_promoted: only moves active promotions ahead, keeping the query's own
  order (price, rating, distance...) everywhere else.

Both rely on ``sorted`` being stable.
"""

from datetime import datetime, timezone
from operator import attrgetter
from typing import Callable, Iterable, NamedTuple, TypeVar

from marketplace.services import promotion_window

T = TypeVar("T")


class PromotionState(NamedTuple):
    active: bool
    activated_at: datetime | None


def promotion_state(raw: str | None, now: datetime) -> PromotionState:
    window = promotion_window.decode(raw)
    if window is None:
        return PromotionState(active=False, activated_at=None)
    return PromotionState(active=window.is_active(now), activated_at=window.activated_at)


def _timestamp(value: datetime | None) -> float:
    if value is None:
        return float("-inf")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def rank_by_promotion(
    items: Iterable[T],
    *,
    get_top: Callable[[T], str | None] = attrgetter("top"),
    get_created_at: Callable[[T], datetime | None] = attrgetter("created_at"),
    now: datetime | None = None,
) -> list[T]:
    """
    Active promotions first (most recently activated, then newest), then the
    rest newest first.
    """
    current = now or datetime.now(timezone.utc)

    def sort_key(item: T) -> tuple[int, float, float]:
        state = promotion_state(get_top(item), current)
        created = -_timestamp(get_created_at(item))
        if state.active:
            return (0, -_timestamp(state.activated_at), created)
        return (1, 0.0, created)

    return sorted(items, key=sort_key)


def lift_promoted(
    items: Iterable[T],
    *,
    get_top: Callable[[T], str | None] = attrgetter("top"),
    now: datetime | None = None,
) -> list[T]:
    """Move active promotions ahead; equal items keep their input order."""
    current = now or datetime.now(timezone.utc)
    return sorted(items, key=lambda item: not promotion_state(get_top(item), current).active)
