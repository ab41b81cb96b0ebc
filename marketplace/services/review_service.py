"""Review collaborator - ratings left on listings."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.structured_logging import build_log_context
from marketplace.db.models import ListingReview
from marketplace.services import listing_store
from marketplace.services.listing_registry import ListingRef

logger = logging.getLogger(__name__)


class ReviewServiceError(Exception):
    """Base exception for review errors."""

    pass


class AlreadyReviewedError(ReviewServiceError):
    """User already reviewed this listing."""

    pass


class InvalidRatingError(ReviewServiceError):
    """Rating outside 1..5."""

    pass


def _listing_filter(ref: ListingRef):
    return (
        ListingReview.listing_type == ref.type.value,
        ListingReview.listing_id == ref.id,
    )


def create_review(
    db: Session,
    ref: ListingRef,
    user_id: int,
    rating: int,
    review: str | None = None,
) -> ListingReview:
    """Leave a review; one per user per listing."""
    if rating < 1 or rating > 5:
        raise InvalidRatingError(f"Rating must be between 1 and 5, got {rating}")
    listing_store.require_listing(db, ref)

    existing = db.execute(
        select(ListingReview.id).where(*_listing_filter(ref), ListingReview.user_id == user_id)
    ).first()
    if existing:
        raise AlreadyReviewedError(f"User {user_id} already reviewed {ref.type.value} {ref.id}")

    row = ListingReview(
        listing_type=ref.type.value,
        listing_id=ref.id,
        user_id=user_id,
        rating=rating,
        review=review,
    )
    try:
        db.add(row)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyReviewedError(f"User {user_id} already reviewed {ref.type.value} {ref.id}")
    db.refresh(row)

    logger.info(
        "Review created (rating %d)",
        rating,
        extra=build_log_context(user_id=user_id, listing_type=ref.type.value, listing_id=ref.id),
    )
    return row


def get_review_count(db: Session, ref: ListingRef) -> int:
    return db.execute(
        select(func.count(ListingReview.id)).where(*_listing_filter(ref))
    ).scalar_one()


def get_average_rating(db: Session, ref: ListingRef) -> float:
    """Average rating, 0.0 when the listing has no reviews."""
    value = db.execute(
        select(func.avg(ListingReview.rating)).where(*_listing_filter(ref))
    ).scalar_one()
    return round(float(value), 2) if value is not None else 0.0


def get_rating_summaries(
    db: Session,
    listing_type: str,
    listing_ids: list[int],
) -> dict[int, tuple[int, float]]:
    """Batch (count, average) per listing id for result pages."""
    if not listing_ids:
        return {}
    rows = db.execute(
        select(
            ListingReview.listing_id,
            func.count(ListingReview.id),
            func.avg(ListingReview.rating),
        )
        .where(
            ListingReview.listing_type == listing_type,
            ListingReview.listing_id.in_(listing_ids),
        )
        .group_by(ListingReview.listing_id)
    ).all()
    return {
        listing_id: (count, round(float(avg), 2) if avg is not None else 0.0)
        for listing_id, count, avg in rows
    }
