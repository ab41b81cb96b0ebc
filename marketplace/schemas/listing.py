"""Pydantic schemas for listing result pages."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from marketplace.db.enums import ListingStatus


class ListingRead(BaseModel):
    """Listing row with promotion state and rating summary."""
    id: int
    user_id: int
    title: str
    price: Decimal | None
    status: ListingStatus
    created_at: datetime
    top_active: bool = False
    top_expires_at: datetime | None = None
    review_count: int = 0
    average_rating: float = 0.0


class ListingListResponse(BaseModel):
    items: list[ListingRead]
    limit: int | None = None
    offset: int | None = None
