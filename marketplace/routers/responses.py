"""Listing response endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from marketplace.core.deps import get_current_user_id, get_db, get_listing_ref
from marketplace.schemas.response import ResponseCreate, ResponseRead, RespondResult
from marketplace.services import engagement_service, listing_store, response_service
from marketplace.services.engagement_service import OwnListingResponseError
from marketplace.services.listing_registry import ListingRef
from marketplace.services.listing_store import ListingNotFoundError
from marketplace.services.response_service import (
    AlreadyRespondedError,
    ResponseForbiddenError,
    ResponseNotFoundError,
)

router = APIRouter(tags=["responses"])


@router.post(
    "/listings/{listing_type}/{listing_id}/responses",
    response_model=RespondResult,
    status_code=status.HTTP_201_CREATED,
)
def create_response(
    data: ResponseCreate,
    ref: ListingRef = Depends(get_listing_ref),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """
    Respond to a listing.

    Also opens the chat with the owner and a pending confirmation.
    """
    try:
        result = engagement_service.respond_to_listing(
            db, ref, user_id, data.price, data.description
        )
    except ListingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AlreadyRespondedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except OwnListingResponseError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return RespondResult(
        response=ResponseRead.model_validate(result.response),
        confirmation_id=result.confirmation.id,
        chat_id=result.chat_id,
    )


@router.get(
    "/listings/{listing_type}/{listing_id}/responses",
    response_model=list[ResponseRead],
)
def list_responses(
    ref: ListingRef = Depends(get_listing_ref),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Responses on a listing, first responder first."""
    if listing_store.get_listing(db, ref) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    return response_service.list_responses(db, ref)


@router.delete("/responses/{response_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_response(
    response_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Withdraw your own response."""
    try:
        engagement_service.withdraw_response(db, response_id, user_id)
    except ResponseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ResponseForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return None
