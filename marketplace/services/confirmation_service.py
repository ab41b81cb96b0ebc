"""Confirmation state machine - locks exactly one performer onto a listing.

    (none) → active → in_progress → done
               │           │
               └───────────┴──→ archived   (cancel)

Every public mutating function is one unit of work: it commits on success and
rolls back everything on failure, including the listing status write and the
response cascade.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.structured_logging import build_log_context
from marketplace.db.enums import ConfirmationStatus, ListingParty
from marketplace.db.models import ListingConfirmation
from marketplace.services import listing_store, response_service
from marketplace.services.listing_registry import ListingRef, ListingTypeDescriptor, resolve

logger = logging.getLogger(__name__)

OPEN_STATUSES = [ConfirmationStatus.ACTIVE.value, ConfirmationStatus.IN_PROGRESS.value]


class ConfirmationServiceError(Exception):
    """Base exception for confirmation errors."""

    pass


class ConfirmationNotFoundError(ConfirmationServiceError):
    """No confirmation matches the listing/user."""

    pass


class ConfirmationConflictError(ConfirmationServiceError):
    """Another performer is already confirmed on the listing."""

    pass


def _listing_filter(ref: ListingRef):
    return (
        ListingConfirmation.listing_type == ref.type.value,
        ListingConfirmation.listing_id == ref.id,
    )


def _party_filter(user_id: int):
    return or_(
        ListingConfirmation.performer_id == user_id,
        ListingConfirmation.client_id == user_id,
    )


def _respondent_id(descriptor: ListingTypeDescriptor, confirmation: ListingConfirmation) -> int:
    if descriptor.responder_role == ListingParty.PERFORMER:
        return confirmation.performer_id
    return confirmation.client_id


def _log_context(ref: ListingRef, user_id: int | None = None) -> dict:
    return build_log_context(user_id=user_id, listing_type=ref.type.value, listing_id=ref.id)


# =============================================================================
# Queries
# =============================================================================


def get_confirmation(db: Session, confirmation_id: int) -> ListingConfirmation | None:
    return db.get(ListingConfirmation, confirmation_id)


def list_confirmations(db: Session, ref: ListingRef) -> list[ListingConfirmation]:
    """All confirmation rows for a listing, oldest first."""
    return list(
        db.execute(
            select(ListingConfirmation)
            .where(*_listing_filter(ref))
            .order_by(ListingConfirmation.created_at.asc(), ListingConfirmation.id.asc())
        ).scalars().all()
    )


def get_confirmed(
    db: Session,
    ref: ListingRef,
    for_update: bool = False,
) -> ListingConfirmation | None:
    """The confirmed row for a listing, if any."""
    query = select(ListingConfirmation).where(
        *_listing_filter(ref),
        ListingConfirmation.confirmed.is_(True),
    )
    if for_update:
        query = query.with_for_update()
    return db.execute(query).scalar_one_or_none()


def list_performer_ids(db: Session, ref: ListingRef) -> set[int]:
    """Distinct performers across every confirmation row of a listing."""
    rows = db.execute(
        select(ListingConfirmation.performer_id).where(*_listing_filter(ref)).distinct()
    ).scalars().all()
    return set(rows)


# =============================================================================
# Transitions
# =============================================================================


def add_confirmation(
    db: Session,
    ref: ListingRef,
    chat_id: int | None,
    client_id: int,
    performer_id: int,
) -> ListingConfirmation:
    """Insert an unconfirmed row without committing."""
    confirmation = ListingConfirmation(
        listing_type=ref.type.value,
        listing_id=ref.id,
        chat_id=chat_id,
        client_id=client_id,
        performer_id=performer_id,
        confirmed=False,
        status=ConfirmationStatus.ACTIVE.value,
    )
    db.add(confirmation)
    db.flush()
    return confirmation


def open_confirmation(
    db: Session,
    ref: ListingRef,
    chat_id: int | None,
    client_id: int,
    performer_id: int,
) -> ListingConfirmation:
    """
    Start a candidate conversation on a listing.

    No exclusivity check: several unconfirmed rows may coexist.
    """
    confirmation = add_confirmation(db, ref, chat_id, client_id, performer_id)
    db.commit()
    db.refresh(confirmation)

    logger.info("Confirmation opened", extra=_log_context(ref, client_id))
    return confirmation


def confirm(
    db: Session,
    ref: ListingRef,
    acting_user_id: int,
    counterpart_id: int | None = None,
) -> ListingConfirmation:
    """
    Lock in the performer of the acting user's conversation.

    Either party may confirm. ``counterpart_id`` picks the conversation when
    the acting user has several; otherwise the oldest open one is used.

    In one transaction:
    1. mark the row confirmed / in_progress
    2. delete every rival response (all but the confirmed respondent's)
    3. apply the listing type's confirm status to the listing

    Confirming an already confirmed row is a no-op.

    Raises:
        ConfirmationNotFoundError: no open row for the acting user
        ConfirmationConflictError: another row is already confirmed
    """
    descriptor = resolve(ref.type)

    query = select(ListingConfirmation).where(
        *_listing_filter(ref),
        ListingConfirmation.status.in_(OPEN_STATUSES),
    )
    if counterpart_id is not None:
        query = query.where(
            or_(
                and_(
                    ListingConfirmation.performer_id == acting_user_id,
                    ListingConfirmation.client_id == counterpart_id,
                ),
                and_(
                    ListingConfirmation.client_id == acting_user_id,
                    ListingConfirmation.performer_id == counterpart_id,
                ),
            )
        )
    else:
        query = query.where(_party_filter(acting_user_id))
    query = query.order_by(
        ListingConfirmation.confirmed.desc(),
        ListingConfirmation.created_at.asc(),
        ListingConfirmation.id.asc(),
    ).with_for_update()

    confirmation = db.execute(query).scalars().first()
    if confirmation is None:
        raise ConfirmationNotFoundError(
            f"No confirmation for user {acting_user_id} on {ref.type.value} {ref.id}"
        )

    if confirmation.confirmed:
        return confirmation

    current = get_confirmed(db, ref)
    if current is not None:
        raise ConfirmationConflictError(
            f"{ref.type.value} {ref.id} already has a confirmed performer"
        )

    confirmation.confirmed = True
    confirmation.status = ConfirmationStatus.IN_PROGRESS.value
    confirmation.updated_at = datetime.now(timezone.utc)

    try:
        # Flush first: the cascade filters on the now-confirmed respondent
        db.flush()
        removed = response_service.delete_rival_responses(
            db, ref, keep_user_id=_respondent_id(descriptor, confirmation)
        )
        if descriptor.status_on_confirm is not None:
            listing_store.set_status(db, ref, descriptor.status_on_confirm)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent confirm detected", extra=_log_context(ref, acting_user_id))
        raise ConfirmationConflictError(
            f"{ref.type.value} {ref.id} already has a confirmed performer"
        )
    except Exception:
        db.rollback()
        raise

    db.refresh(confirmation)
    logger.info(
        "Confirmation confirmed (%d rival responses removed)",
        removed,
        extra=_log_context(ref, acting_user_id),
    )
    return confirmation


def cancel(db: Session, ref: ListingRef, acting_user_id: int) -> ListingConfirmation:
    """
    Cancel the confirmed engagement on a listing.

    The row is archived and the listing reopens. Rival responses removed at
    confirm time are not restored.

    Raises:
        ConfirmationNotFoundError: no in-progress confirmed row the user is party to
    """
    descriptor = resolve(ref.type)

    confirmation = db.execute(
        select(ListingConfirmation)
        .where(
            *_listing_filter(ref),
            ListingConfirmation.confirmed.is_(True),
            ListingConfirmation.status == ConfirmationStatus.IN_PROGRESS.value,
            _party_filter(acting_user_id),
        )
        .with_for_update()
    ).scalar_one_or_none()
    if confirmation is None:
        raise ConfirmationNotFoundError(
            f"No confirmed engagement for user {acting_user_id} on {ref.type.value} {ref.id}"
        )

    confirmation.confirmed = False
    confirmation.status = ConfirmationStatus.ARCHIVED.value
    confirmation.updated_at = datetime.now(timezone.utc)

    try:
        db.flush()
        listing_store.set_status(db, ref, descriptor.status_on_cancel)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(confirmation)
    logger.info("Confirmation cancelled", extra=_log_context(ref, acting_user_id))
    return confirmation


def complete(
    db: Session,
    ref: ListingRef,
    acting_user_id: int | None = None,
) -> ListingConfirmation:
    """
    Mark the confirmed engagement done and apply the listing's done status.

    Completing an already done engagement is a no-op.

    Raises:
        ConfirmationNotFoundError: no confirmed row (or acting user not a party)
    """
    descriptor = resolve(ref.type)

    confirmation = get_confirmed(db, ref, for_update=True)
    if confirmation is None or (
        acting_user_id is not None
        and acting_user_id not in (confirmation.client_id, confirmation.performer_id)
    ):
        raise ConfirmationNotFoundError(f"No confirmed engagement on {ref.type.value} {ref.id}")

    if confirmation.status == ConfirmationStatus.DONE.value:
        return confirmation

    confirmation.status = ConfirmationStatus.DONE.value
    confirmation.updated_at = datetime.now(timezone.utc)

    try:
        db.flush()
        listing_store.set_status(db, ref, descriptor.status_on_complete)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(confirmation)
    logger.info("Confirmation completed", extra=_log_context(ref, acting_user_id))
    return confirmation


def remove_pending(
    db: Session,
    ref: ListingRef,
    *,
    performer_id: int | None = None,
    client_id: int | None = None,
) -> int:
    """Delete unconfirmed rows matching the given parties, without committing."""
    if performer_id is None and client_id is None:
        raise ValueError("performer_id or client_id is required")

    query = delete(ListingConfirmation).where(
        *_listing_filter(ref),
        ListingConfirmation.confirmed.is_(False),
    )
    if performer_id is not None:
        query = query.where(ListingConfirmation.performer_id == performer_id)
    if client_id is not None:
        query = query.where(ListingConfirmation.client_id == client_id)
    return db.execute(query).rowcount or 0


def delete_pending_by_performer(db: Session, ref: ListingRef, performer_id: int) -> bool:
    """
    Let a performer withdraw from a conversation before being locked in.

    Missing rows are not an error. Returns whether anything was deleted.
    """
    removed = remove_pending(db, ref, performer_id=performer_id)
    db.commit()
    if removed:
        logger.info("Pending confirmation withdrawn", extra=_log_context(ref, performer_id))
    return removed > 0
