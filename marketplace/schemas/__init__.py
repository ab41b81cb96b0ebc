"""Pydantic schemas for API request/response models."""

from marketplace.schemas.response import ResponseCreate, ResponseRead, RespondResult
from marketplace.schemas.confirmation import ConfirmRequest, ConfirmationRead, PerformerIdsRead
from marketplace.schemas.top import TopActivateRequest, TopRead
from marketplace.schemas.listing import ListingListResponse, ListingRead

__all__ = [
    # Response
    "ResponseCreate",
    "ResponseRead",
    "RespondResult",
    # Confirmation
    "ConfirmRequest",
    "ConfirmationRead",
    "PerformerIdsRead",
    # Top
    "TopActivateRequest",
    "TopRead",
    # Listing
    "ListingRead",
    "ListingListResponse",
]
