"""Response ledger - one "I am interested" submission per user per listing."""

import logging
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.structured_logging import build_log_context
from marketplace.db.models import ListingResponse
from marketplace.services import listing_store
from marketplace.services.listing_registry import ListingRef

logger = logging.getLogger(__name__)


class ResponseServiceError(Exception):
    """Base exception for response ledger errors."""

    pass


class AlreadyRespondedError(ResponseServiceError):
    """User already has a response on this listing."""

    pass


class ResponseNotFoundError(ResponseServiceError):
    """Response not found."""

    pass


class ResponseForbiddenError(ResponseServiceError):
    """Only the author may delete a response."""

    pass


def _listing_filter(ref: ListingRef):
    return (
        ListingResponse.listing_type == ref.type.value,
        ListingResponse.listing_id == ref.id,
    )


def count_user_responses(db: Session, ref: ListingRef, user_id: int) -> int:
    return db.execute(
        select(func.count(ListingResponse.id)).where(
            *_listing_filter(ref), ListingResponse.user_id == user_id
        )
    ).scalar_one()


def get_response(db: Session, response_id: int) -> ListingResponse | None:
    return db.get(ListingResponse, response_id)


def get_user_response(db: Session, ref: ListingRef, user_id: int) -> ListingResponse | None:
    return db.execute(
        select(ListingResponse).where(*_listing_filter(ref), ListingResponse.user_id == user_id)
    ).scalar_one_or_none()


def add_response(
    db: Session,
    ref: ListingRef,
    user_id: int,
    price: Decimal | None,
    description: str,
) -> ListingResponse:
    """
    Insert a response without committing.

    The existence check is check-then-act; the unique constraint on
    (listing_type, listing_id, user_id) catches the concurrent case at flush
    or commit time, and callers map that IntegrityError to AlreadyRespondedError.
    """
    if count_user_responses(db, ref, user_id) > 0:
        raise AlreadyRespondedError(
            f"User {user_id} already responded to {ref.type.value} {ref.id}"
        )

    response = ListingResponse(
        listing_type=ref.type.value,
        listing_id=ref.id,
        user_id=user_id,
        price=price,
        description=description or "",
    )
    db.add(response)
    db.flush()
    return response


def submit_response(
    db: Session,
    ref: ListingRef,
    user_id: int,
    price: Decimal | None,
    description: str,
) -> ListingResponse:
    """Record a user's response to a listing."""
    listing_store.require_listing(db, ref)
    try:
        response = add_response(db, ref, user_id, price, description)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyRespondedError(
            f"User {user_id} already responded to {ref.type.value} {ref.id}"
        )
    db.refresh(response)

    logger.info(
        "Response submitted",
        extra=build_log_context(user_id=user_id, listing_type=ref.type.value, listing_id=ref.id),
    )
    return response


def list_responses(db: Session, ref: ListingRef) -> list[ListingResponse]:
    """Responses for a listing, first responder first."""
    return list(
        db.execute(
            select(ListingResponse)
            .where(*_listing_filter(ref))
            .order_by(ListingResponse.created_at.asc(), ListingResponse.id.asc())
        ).scalars().all()
    )


def remove_response(db: Session, response_id: int, user_id: int | None = None) -> ListingResponse:
    """
    Delete a response without committing.

    When ``user_id`` is given, only the author may delete.
    """
    response = get_response(db, response_id)
    if response is None:
        raise ResponseNotFoundError(f"Response {response_id} not found")
    if user_id is not None and response.user_id != user_id:
        raise ResponseForbiddenError("Only the author can delete this response")
    db.delete(response)
    db.flush()
    return response


def delete_response(db: Session, response_id: int, user_id: int | None = None) -> None:
    """User-initiated deletion; a missing response is an error here."""
    response = remove_response(db, response_id, user_id)
    context = build_log_context(
        user_id=response.user_id,
        listing_type=response.listing_type,
        listing_id=response.listing_id,
    )
    db.commit()

    logger.info("Response deleted", extra=context)


def delete_rival_responses(db: Session, ref: ListingRef, keep_user_id: int) -> int:
    """
    Delete every response on the listing not authored by ``keep_user_id``.

    Part of the confirm cascade: never commits and never fails on zero rows.
    """
    result = db.execute(
        delete(ListingResponse)
        .where(*_listing_filter(ref), ListingResponse.user_id != keep_user_id)
    )
    return result.rowcount or 0
