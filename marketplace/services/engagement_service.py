"""Engagement flows that span the response ledger, chats and confirmations."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.structured_logging import build_log_context
from marketplace.db.enums import ListingParty
from marketplace.db.models import ListingConfirmation, ListingResponse
from marketplace.services import chat_service, confirmation_service, listing_store, response_service
from marketplace.services.listing_registry import ListingRef, resolve
from marketplace.services.response_service import AlreadyRespondedError, ResponseServiceError

logger = logging.getLogger(__name__)


class OwnListingResponseError(ResponseServiceError):
    """Owners cannot respond to their own listing."""

    pass


@dataclass
class RespondResult:
    response: ListingResponse
    confirmation: ListingConfirmation
    chat_id: int


def respond_to_listing(
    db: Session,
    ref: ListingRef,
    user_id: int,
    price: Decimal | None,
    description: str,
) -> RespondResult:
    """
    Submit a response and open the candidate conversation in one transaction.

    The listing owner and the respondent get a chat, and an unconfirmed
    confirmation row is created with client/performer assigned by the
    listing type's owner role.
    """
    descriptor = resolve(ref.type)
    listing = listing_store.require_listing(db, ref)
    owner_id = getattr(listing, descriptor.owner_column)
    if owner_id == user_id:
        raise OwnListingResponseError("Cannot respond to your own listing")

    if descriptor.owner_role == ListingParty.PERFORMER:
        client_id, performer_id = user_id, owner_id
    else:
        client_id, performer_id = owner_id, user_id

    try:
        response = response_service.add_response(db, ref, user_id, price, description)
        chat_id = chat_service.create_chat(db, owner_id, user_id)
        confirmation = confirmation_service.add_confirmation(
            db, ref, chat_id, client_id=client_id, performer_id=performer_id
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyRespondedError(
            f"User {user_id} already responded to {ref.type.value} {ref.id}"
        )
    except Exception:
        db.rollback()
        raise

    db.refresh(response)
    db.refresh(confirmation)
    logger.info(
        "Responded to listing",
        extra=build_log_context(user_id=user_id, listing_type=ref.type.value, listing_id=ref.id),
    )
    return RespondResult(response=response, confirmation=confirmation, chat_id=chat_id)


def withdraw_response(db: Session, response_id: int, user_id: int) -> None:
    """
    Author withdraws a response; their unconfirmed conversation goes with it.

    A confirmed engagement is left alone (cancel it instead).
    """
    try:
        response = response_service.remove_response(db, response_id, user_id)
        ref = ListingRef.of(response.listing_type, response.listing_id)
        if resolve(ref.type).responder_role == ListingParty.PERFORMER:
            confirmation_service.remove_pending(db, ref, performer_id=user_id)
        else:
            confirmation_service.remove_pending(db, ref, client_id=user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Response withdrawn",
        extra=build_log_context(user_id=user_id, listing_type=ref.type.value, listing_id=ref.id),
    )
