"""Listing result pages with promotion ranking applied."""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from marketplace.core.deps import get_current_user_id, get_db
from marketplace.db.enums import ListingStatus
from marketplace.schemas.listing import ListingListResponse, ListingRead
from marketplace.services import listing_service
from marketplace.services.listing_registry import InvalidListingTypeError
from marketplace.services.listing_service import ListingView

router = APIRouter(prefix="/listings", tags=["listings"])


def _to_read(view: ListingView) -> ListingRead:
    listing = view.listing
    return ListingRead(
        id=listing.id,
        user_id=listing.user_id,
        title=listing.title,
        price=listing.price,
        status=listing.status,
        created_at=listing.created_at,
        top_active=view.top_active,
        top_expires_at=view.top_expires_at,
        review_count=view.review_count,
        average_rating=view.average_rating,
    )


@router.get("/{listing_type}/mine", response_model=ListingListResponse)
def my_listings(
    listing_type: str,
    status_filter: ListingStatus | None = Query(None, alias="status"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Your listings, active promotions first then newest."""
    try:
        views = listing_service.list_user_listings(db, listing_type, user_id, status=status_filter)
    except InvalidListingTypeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ListingListResponse(items=[_to_read(view) for view in views])


@router.get("/{listing_type}", response_model=ListingListResponse)
def search_listings(
    listing_type: str,
    status_filter: ListingStatus = Query(ListingStatus.ACTIVE, alias="status"),
    sort: Literal["newest", "price_asc", "price_desc"] = "newest",
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """One page of listings in the requested order, active promotions lifted first."""
    try:
        views = listing_service.search_listings(
            db, listing_type, status=status_filter, sort=sort, limit=limit, offset=offset
        )
    except InvalidListingTypeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ListingListResponse(
        items=[_to_read(view) for view in views],
        limit=limit,
        offset=offset,
    )
