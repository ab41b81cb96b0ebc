"""Pydantic schemas for confirmations."""

from datetime import datetime

from pydantic import BaseModel

from marketplace.db.enums import ConfirmationStatus


class ConfirmRequest(BaseModel):
    """
    Confirm the acting user's conversation on a listing.

    counterpart_id selects the conversation when the acting user has several.
    """
    counterpart_id: int | None = None


class ConfirmationRead(BaseModel):
    id: int
    listing_type: str
    listing_id: int
    chat_id: int | None
    client_id: int
    performer_id: int
    confirmed: bool
    status: ConfirmationStatus
    created_at: datetime
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class PerformerIdsRead(BaseModel):
    performer_ids: list[int]
