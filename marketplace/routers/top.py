"""Promotion (top) endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from marketplace.core.deps import get_current_user_id, get_db, get_listing_ref
from marketplace.schemas.top import TopActivateRequest, TopRead
from marketplace.services import promotion_window, top_service
from marketplace.services.listing_registry import InvalidListingTypeError, ListingRef
from marketplace.services.listing_store import ListingNotFoundError
from marketplace.services.promotion_window import InvalidDurationError

router = APIRouter(prefix="/top", tags=["top"])


@router.post("/activate", response_model=TopRead)
def activate_top(
    data: TopActivateRequest,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """
    Boost your own listing for ``duration_days`` days.

    A new activation replaces any previous window.
    """
    try:
        owner_id = top_service.get_owner_id(db, data.listing_type, data.listing_id)
        if owner_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the listing owner can activate top",
            )
        window = top_service.activate_top(
            db, data.listing_type, data.listing_id, data.duration_days
        )
    except (InvalidListingTypeError, InvalidDurationError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ListingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return TopRead(
        listing_type=data.listing_type,
        listing_id=data.listing_id,
        activated_at=window.activated_at,
        expires_at=window.expires_at,
        duration_days=window.duration_days,
        is_active=window.is_active(),
    )


@router.get("/{listing_type}/{listing_id}", response_model=TopRead)
def get_top(
    ref: ListingRef = Depends(get_listing_ref),
    db: Session = Depends(get_db),
):
    """Stored promotion window for a listing (inactive when none or lapsed)."""
    try:
        window = top_service.get_top(db, ref.type, ref.id)
    except ListingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    if window is None:
        return TopRead(listing_type=ref.type.value, listing_id=ref.id)
    return TopRead(
        listing_type=ref.type.value,
        listing_id=ref.id,
        activated_at=window.activated_at,
        expires_at=window.expires_at,
        duration_days=window.duration_days,
        is_active=promotion_window.is_active(window),
    )
