"""SQLAlchemy ORM models for listings, responses, confirmations and collaborators."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean, Index, Integer, Numeric, String, Text, UniqueConstraint, func, text
)
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.db.base import Base
from marketplace.db.enums import DEFAULT_CONFIRMATION_STATUS, DEFAULT_LISTING_STATUS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Listings (one table per listing type, shared layout)
# =============================================================================

class ListingMixin:
    """
    Column layout shared by every listing table.

    Field-level CRUD belongs to the listing collaborator; the engagement core
    only writes ``status`` and ``top``.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    # active → in_progress → done, see ListingStatus
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_LISTING_STATUS
    )

    # Serialized promotion window ("top"), see services.promotion_window
    top: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


class ServiceListing(ListingMixin, Base):
    __tablename__ = "service"


class AdListing(ListingMixin, Base):
    __tablename__ = "ad"


class RentListing(ListingMixin, Base):
    __tablename__ = "rent"


class RentAdListing(ListingMixin, Base):
    __tablename__ = "rent_ad"


class WorkListing(ListingMixin, Base):
    __tablename__ = "work"


class WorkAdListing(ListingMixin, Base):
    __tablename__ = "work_ad"


# =============================================================================
# Engagement
# =============================================================================

class ListingResponse(Base):
    """
    A candidate's bid of interest in a listing.

    At most one response per user per listing; the unique constraint backs up
    the pre-insert check in response_service.
    """

    __tablename__ = "listing_responses"
    __table_args__ = (
        UniqueConstraint(
            "listing_type",
            "listing_id",
            "user_id",
            name="uq_response_listing_user",
        ),
        Index("ix_listing_responses_listing", "listing_type", "listing_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_type: Mapped[str] = mapped_column(String(20), nullable=False)
    listing_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)

    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(nullable=True)


class ListingConfirmation(Base):
    """
    Exclusivity lock between a client and one performer on a listing.

    Several unconfirmed rows (parallel candidate conversations) may exist per
    listing. Only one confirmed row is allowed per listing.
    """

    __tablename__ = "listing_confirmations"
    __table_args__ = (
        # Only one confirmed row allowed per listing
        Index(
            "uq_one_confirmed_per_listing",
            "listing_type",
            "listing_id",
            unique=True,
            postgresql_where=text("confirmed"),
            sqlite_where=text("confirmed"),
        ),
        Index("ix_listing_confirmations_listing", "listing_type", "listing_id"),
        Index("ix_listing_confirmations_performer", "performer_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_type: Mapped[str] = mapped_column(String(20), nullable=False)
    listing_id: Mapped[int] = mapped_column(Integer, nullable=False)
    chat_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    client_id: Mapped[int] = mapped_column(Integer, nullable=False)
    performer_id: Mapped[int] = mapped_column(Integer, nullable=False)

    confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Status workflow: active → in_progress → done, or → archived
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_CONFIRMATION_STATUS
    )

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(nullable=True)


# =============================================================================
# Collaborators
# =============================================================================

class Chat(Base):
    """Conversation channel between two users (stored as an ordered pair)."""

    __tablename__ = "chats"
    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_chat_user_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_low_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_high_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)


class ListingReview(Base):
    """One review per user per listing."""

    __tablename__ = "listing_reviews"
    __table_args__ = (
        UniqueConstraint(
            "listing_type",
            "listing_id",
            "user_id",
            name="uq_review_listing_user",
        ),
        Index("ix_listing_reviews_listing", "listing_type", "listing_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_type: Mapped[str] = mapped_column(String(20), nullable=False)
    listing_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
