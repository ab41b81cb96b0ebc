"""Listing queries that apply promotion ranking.

Field-level listing CRUD lives with the listing collaborator; create_listing
exists for seeding and tests.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.db.enums import ListingStatus, ListingType
from marketplace.db.models import ListingMixin
from marketplace.services import promotion_ranking, promotion_window, review_service
from marketplace.services.listing_registry import resolve

SEARCH_SORTS = ("newest", "price_asc", "price_desc")


@dataclass
class ListingView:
    listing: ListingMixin
    top_active: bool
    top_expires_at: datetime | None
    review_count: int = 0
    average_rating: float = 0.0


def create_listing(
    db: Session,
    listing_type: ListingType | str,
    user_id: int,
    title: str,
    price: Decimal | None = None,
    status: ListingStatus = ListingStatus.ACTIVE,
    created_at: datetime | None = None,
) -> ListingMixin:
    descriptor = resolve(listing_type)
    listing = descriptor.model(
        user_id=user_id,
        title=title,
        price=price,
        status=status.value,
    )
    if created_at is not None:
        listing.created_at = created_at
    db.add(listing)
    db.commit()
    db.refresh(listing)
    return listing


def _to_views(
    db: Session,
    listing_type: ListingType,
    listings: list[ListingMixin],
    now: datetime,
) -> list[ListingView]:
    summaries = review_service.get_rating_summaries(
        db, listing_type.value, [listing.id for listing in listings]
    )
    views = []
    for listing in listings:
        window = promotion_window.decode(listing.top)
        count, average = summaries.get(listing.id, (0, 0.0))
        views.append(
            ListingView(
                listing=listing,
                top_active=promotion_window.is_active(window, now),
                top_expires_at=window.expires_at if window else None,
                review_count=count,
                average_rating=average,
            )
        )
    return views


def list_user_listings(
    db: Session,
    listing_type: ListingType | str,
    user_id: int,
    status: ListingStatus | None = None,
    now: datetime | None = None,
) -> list[ListingView]:
    """A user's own listings: active promotions first, then newest."""
    descriptor = resolve(listing_type)
    model = descriptor.model
    query = select(model).where(descriptor.column(descriptor.owner_column) == user_id)
    if status is not None:
        query = query.where(descriptor.column(descriptor.status_column) == status.value)

    current = now or datetime.now(timezone.utc)
    listings = list(db.execute(query).scalars().all())
    ranked = promotion_ranking.rank_by_promotion(listings, now=current)
    return _to_views(db, descriptor.listing_type, ranked, current)


def search_listings(
    db: Session,
    listing_type: ListingType | str,
    status: ListingStatus | None = ListingStatus.ACTIVE,
    sort: str = "newest",
    limit: int = 20,
    offset: int = 0,
    now: datetime | None = None,
) -> list[ListingView]:
    """
    One page of listings in the requested order, with active promotions
    lifted to the top of the page.
    """
    if sort not in SEARCH_SORTS:
        raise ValueError(f"Unsupported sort: {sort}")

    descriptor = resolve(listing_type)
    model = descriptor.model
    query = select(model)
    if status is not None:
        query = query.where(descriptor.column(descriptor.status_column) == status.value)

    if sort == "price_asc":
        query = query.order_by(model.price.asc(), model.id.asc())
    elif sort == "price_desc":
        query = query.order_by(model.price.desc(), model.id.asc())
    else:
        query = query.order_by(model.created_at.desc(), model.id.desc())

    current = now or datetime.now(timezone.utc)
    listings = list(db.execute(query.offset(offset).limit(limit)).scalars().all())
    lifted = promotion_ranking.lift_promoted(listings, now=current)
    return _to_views(db, descriptor.listing_type, lifted, current)
