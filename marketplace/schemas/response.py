"""Pydantic schemas for listing responses."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ResponseCreate(BaseModel):
    """Request to respond to a listing."""
    price: Decimal | None = Field(None, ge=0)
    description: str = Field("", max_length=5000)


class ResponseRead(BaseModel):
    """A single response to a listing."""
    id: int
    listing_type: str
    listing_id: int
    user_id: int
    price: Decimal | None
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}


class RespondResult(BaseModel):
    """Response plus the candidate conversation opened for it."""
    response: ResponseRead
    confirmation_id: int
    chat_id: int
