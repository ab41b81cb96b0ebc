from decimal import Decimal

import pytest

from marketplace.db.enums import ConfirmationStatus, ListingType
from marketplace.services import (
    chat_service,
    confirmation_service,
    engagement_service,
    response_service,
)
from marketplace.services.engagement_service import OwnListingResponseError
from marketplace.services.listing_registry import ListingRef
from marketplace.services.listing_store import ListingNotFoundError
from marketplace.services.response_service import (
    AlreadyRespondedError,
    ResponseForbiddenError,
    ResponseNotFoundError,
)

OWNER = 10
ALICE = 20
BOB = 30


def test_respond_opens_chat_and_pending_confirmation(db, make_listing):
    listing = make_listing(ListingType.RENT, user_id=OWNER)
    ref = ListingRef.of("rent", listing.id)

    result = engagement_service.respond_to_listing(db, ref, ALICE, Decimal("80"), "Available")

    assert result.response.user_id == ALICE
    assert result.response.price == Decimal("80")
    assert result.confirmation.client_id == OWNER
    assert result.confirmation.performer_id == ALICE
    assert result.confirmation.confirmed is False
    assert result.confirmation.status == ConfirmationStatus.ACTIVE.value
    assert result.confirmation.chat_id == result.chat_id

    chat = chat_service.get_chat(db, result.chat_id)
    assert (chat.user_low_id, chat.user_high_id) == (OWNER, ALICE)


def test_respond_to_performer_owned_listing(db, make_listing):
    listing = make_listing(ListingType.WORK, user_id=OWNER)
    ref = ListingRef.of("work", listing.id)

    result = engagement_service.respond_to_listing(db, ref, ALICE, None, "")

    assert result.confirmation.client_id == ALICE
    assert result.confirmation.performer_id == OWNER


def test_chat_is_reused_for_the_same_pair(db, make_listing):
    first = make_listing(ListingType.AD, user_id=OWNER)
    second = make_listing(ListingType.RENT_AD, user_id=OWNER)

    a = engagement_service.respond_to_listing(db, ListingRef.of("ad", first.id), ALICE, None, "")
    b = engagement_service.respond_to_listing(db, ListingRef.of("rent_ad", second.id), ALICE, None, "")

    assert a.chat_id == b.chat_id


def test_respond_twice_leaves_single_rows(db, make_listing):
    listing = make_listing(ListingType.AD, user_id=OWNER)
    ref = ListingRef.of("ad", listing.id)
    engagement_service.respond_to_listing(db, ref, ALICE, None, "")

    with pytest.raises(AlreadyRespondedError):
        engagement_service.respond_to_listing(db, ref, ALICE, None, "again")

    assert len(response_service.list_responses(db, ref)) == 1
    assert len(confirmation_service.list_confirmations(db, ref)) == 1


def test_owner_cannot_respond(db, make_listing):
    listing = make_listing(ListingType.AD, user_id=OWNER)

    with pytest.raises(OwnListingResponseError):
        engagement_service.respond_to_listing(db, ListingRef.of("ad", listing.id), OWNER, None, "")


def test_respond_to_missing_listing(db):
    with pytest.raises(ListingNotFoundError):
        engagement_service.respond_to_listing(db, ListingRef.of("ad", 404), ALICE, None, "")


def test_withdraw_removes_response_and_pending_confirmation(db, make_listing):
    listing = make_listing(ListingType.AD, user_id=OWNER)
    ref = ListingRef.of("ad", listing.id)
    alice = engagement_service.respond_to_listing(db, ref, ALICE, None, "")
    engagement_service.respond_to_listing(db, ref, BOB, None, "")

    engagement_service.withdraw_response(db, alice.response.id, ALICE)

    assert [r.user_id for r in response_service.list_responses(db, ref)] == [BOB]
    assert [c.performer_id for c in confirmation_service.list_confirmations(db, ref)] == [BOB]


def test_withdraw_on_performer_owned_listing(db, make_listing):
    listing = make_listing(ListingType.SERVICE, user_id=OWNER)
    ref = ListingRef.of("service", listing.id)
    alice = engagement_service.respond_to_listing(db, ref, ALICE, None, "")
    engagement_service.respond_to_listing(db, ref, BOB, None, "")

    engagement_service.withdraw_response(db, alice.response.id, ALICE)

    assert [c.client_id for c in confirmation_service.list_confirmations(db, ref)] == [BOB]


def test_withdraw_keeps_confirmed_engagement(db, make_listing):
    listing = make_listing(ListingType.AD, user_id=OWNER)
    ref = ListingRef.of("ad", listing.id)
    alice = engagement_service.respond_to_listing(db, ref, ALICE, None, "")
    confirmation_service.confirm(db, ref, ALICE)

    engagement_service.withdraw_response(db, alice.response.id, ALICE)

    assert response_service.list_responses(db, ref) == []
    assert confirmation_service.get_confirmed(db, ref).performer_id == ALICE


def test_withdraw_errors(db, make_listing):
    listing = make_listing(ListingType.AD, user_id=OWNER)
    ref = ListingRef.of("ad", listing.id)
    alice = engagement_service.respond_to_listing(db, ref, ALICE, None, "")

    with pytest.raises(ResponseForbiddenError):
        engagement_service.withdraw_response(db, alice.response.id, BOB)
    with pytest.raises(ResponseNotFoundError):
        engagement_service.withdraw_response(db, 9999, ALICE)

    assert len(response_service.list_responses(db, ref)) == 1
    assert len(confirmation_service.list_confirmations(db, ref)) == 1
