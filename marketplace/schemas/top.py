"""Pydantic schemas for promotion (top) endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class TopActivateRequest(BaseModel):
    """Request to boost a listing."""
    listing_type: str
    listing_id: int
    duration_days: int = Field(..., description="Whole UTC days, must be positive")


class TopRead(BaseModel):
    """Stored promotion window for a listing."""
    listing_type: str
    listing_id: int
    activated_at: datetime | None = None
    expires_at: datetime | None = None
    duration_days: int = 0
    is_active: bool = False
