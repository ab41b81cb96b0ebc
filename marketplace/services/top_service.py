"""Top assignment - applies a paid promotion window to a listing."""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from marketplace.core.structured_logging import build_log_context
from marketplace.db.enums import ListingType
from marketplace.services import listing_store, promotion_window
from marketplace.services.listing_registry import ListingRef
from marketplace.services.promotion_window import PromotionWindow

logger = logging.getLogger(__name__)


def activate_top(
    db: Session,
    listing_type: ListingType | str,
    listing_id: int,
    duration_days: int,
    now: datetime | None = None,
) -> PromotionWindow:
    """
    Start a fresh promotion window on a listing.

    Overwrites any previous window; durations never accumulate.

    Raises:
        InvalidListingTypeError, InvalidDurationError, ListingNotFoundError
    """
    ref = ListingRef.of(listing_type, listing_id)
    window = promotion_window.encode(now or datetime.now(timezone.utc), duration_days)

    try:
        listing_store.set_promotion_field(db, ref, promotion_window.serialize(window))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Top activated for %d days",
        duration_days,
        extra=build_log_context(listing_type=ref.type.value, listing_id=ref.id),
    )
    return window


def get_owner_id(db: Session, listing_type: ListingType | str, listing_id: int) -> int:
    """Owner of a listing, for authorization checks before a boost."""
    return listing_store.get_owner_id(db, ListingRef.of(listing_type, listing_id))


def get_top(
    db: Session,
    listing_type: ListingType | str,
    listing_id: int,
) -> PromotionWindow | None:
    """Current stored window (possibly lapsed) for a listing."""
    raw = listing_store.get_promotion_field(db, ListingRef.of(listing_type, listing_id))
    return promotion_window.decode(raw)
