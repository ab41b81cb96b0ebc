"""Engagement endpoints: confirm, cancel and complete a performer on a listing."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from marketplace.core.deps import get_current_user_id, get_db, get_listing_ref
from marketplace.schemas.confirmation import ConfirmationRead, ConfirmRequest, PerformerIdsRead
from marketplace.services import confirmation_service, listing_store
from marketplace.services.confirmation_service import (
    ConfirmationConflictError,
    ConfirmationNotFoundError,
)
from marketplace.services.listing_registry import ListingRef
from marketplace.services.listing_store import ListingNotFoundError

router = APIRouter(prefix="/listings/{listing_type}/{listing_id}", tags=["confirmations"])


@router.post("/confirm", response_model=ConfirmationRead)
def confirm(
    data: ConfirmRequest | None = None,
    ref: ListingRef = Depends(get_listing_ref),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """
    Lock in the performer of your conversation on this listing.

    Rival responses are deleted; confirming twice is a no-op.
    """
    counterpart_id = data.counterpart_id if data else None
    try:
        return confirmation_service.confirm(db, ref, user_id, counterpart_id=counterpart_id)
    except (ConfirmationNotFoundError, ListingNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConfirmationConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/cancel", response_model=ConfirmationRead)
def cancel(
    ref: ListingRef = Depends(get_listing_ref),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Cancel the confirmed engagement; the listing reopens."""
    try:
        return confirmation_service.cancel(db, ref, user_id)
    except (ConfirmationNotFoundError, ListingNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/complete", response_model=ConfirmationRead)
def complete(
    ref: ListingRef = Depends(get_listing_ref),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Mark the confirmed engagement done."""
    try:
        return confirmation_service.complete(db, ref, user_id)
    except (ConfirmationNotFoundError, ListingNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/performers", response_model=PerformerIdsRead)
def list_performers(
    ref: ListingRef = Depends(get_listing_ref),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Every performer ever involved with the listing (notification fan-out)."""
    if listing_store.get_listing(db, ref) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    return PerformerIdsRead(
        performer_ids=sorted(confirmation_service.list_performer_ids(db, ref))
    )
