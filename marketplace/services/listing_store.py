"""Listing store - generic reads/writes on any listing table.

These helpers never commit. Status writes only happen inside the unit of work
of the confirmation/response change that causes them.
"""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from marketplace.db.enums import ListingStatus
from marketplace.db.models import ListingMixin
from marketplace.services.listing_registry import ListingRef, resolve


class ListingNotFoundError(LookupError):
    """Listing row does not exist."""

    pass


def get_listing(db: Session, ref: ListingRef, for_update: bool = False) -> ListingMixin | None:
    """Load the listing row for a ref."""
    descriptor = resolve(ref.type)
    query = select(descriptor.model).where(descriptor.column(descriptor.id_column) == ref.id)
    if for_update:
        query = query.with_for_update()
    return db.execute(query).scalar_one_or_none()


def require_listing(db: Session, ref: ListingRef, for_update: bool = False) -> ListingMixin:
    listing = get_listing(db, ref, for_update=for_update)
    if listing is None:
        raise ListingNotFoundError(f"{ref.type.value} {ref.id} not found")
    return listing


def _scalar_column(db: Session, ref: ListingRef, column_name: str):
    descriptor = resolve(ref.type)
    row = db.execute(
        select(descriptor.column(column_name)).where(
            descriptor.column(descriptor.id_column) == ref.id
        )
    ).first()
    if row is None:
        raise ListingNotFoundError(f"{ref.type.value} {ref.id} not found")
    return row[0]


def _update_columns(db: Session, ref: ListingRef, values: dict) -> None:
    descriptor = resolve(ref.type)
    values = {**values, "updated_at": datetime.now(timezone.utc)}
    result = db.execute(
        update(descriptor.model)
        .where(descriptor.column(descriptor.id_column) == ref.id)
        .values(**values)
    )
    if result.rowcount == 0:
        raise ListingNotFoundError(f"{ref.type.value} {ref.id} not found")


def get_status(db: Session, ref: ListingRef) -> str:
    return _scalar_column(db, ref, resolve(ref.type).status_column)


def set_status(db: Session, ref: ListingRef, status: ListingStatus) -> None:
    _update_columns(db, ref, {resolve(ref.type).status_column: status.value})


def get_owner_id(db: Session, ref: ListingRef) -> int:
    return _scalar_column(db, ref, resolve(ref.type).owner_column)


def get_promotion_field(db: Session, ref: ListingRef) -> str | None:
    return _scalar_column(db, ref, resolve(ref.type).promotion_column)


def set_promotion_field(db: Session, ref: ListingRef, raw: str | None) -> None:
    _update_columns(db, ref, {resolve(ref.type).promotion_column: raw})
