"""Router tests for responses and the confirm/cancel/complete flow."""

import pytest

from marketplace.db.enums import ListingStatus, ListingType
from marketplace.services import listing_store
from marketplace.services.listing_registry import ListingRef

OWNER = 10
ALICE = 20
BOB = 30


def _user(user_id: int) -> dict[str, str]:
    return {"X-User-ID": str(user_id)}


@pytest.mark.asyncio
async def test_respond_list_confirm_cancel(client, db, make_listing):
    listing = make_listing(ListingType.AD, user_id=OWNER)
    base = f"/listings/ad/{listing.id}"

    res = await client.post(f"{base}/responses", json={"price": "100", "description": "Alice"}, headers=_user(ALICE))
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["response"]["user_id"] == ALICE
    assert body["chat_id"] > 0

    res = await client.post(f"{base}/responses", json={"price": "120"}, headers=_user(BOB))
    assert res.status_code == 201, res.text

    res = await client.get(f"{base}/responses", headers=_user(OWNER))
    assert res.status_code == 200
    assert [r["user_id"] for r in res.json()] == [ALICE, BOB]

    res = await client.post(f"{base}/confirm", json={"counterpart_id": ALICE}, headers=_user(OWNER))
    assert res.status_code == 200, res.text
    assert res.json()["performer_id"] == ALICE
    assert res.json()["status"] == "in_progress"

    res = await client.get(f"{base}/responses", headers=_user(OWNER))
    assert [r["user_id"] for r in res.json()] == [ALICE]
    assert listing_store.get_status(db, ListingRef.of("ad", listing.id)) == ListingStatus.IN_PROGRESS.value

    res = await client.post(f"{base}/confirm", headers=_user(BOB))
    assert res.status_code == 409

    res = await client.post(f"{base}/cancel", headers=_user(ALICE))
    assert res.status_code == 200, res.text
    assert res.json()["status"] == "archived"
    assert res.json()["confirmed"] is False

    res = await client.get(f"{base}/performers", headers=_user(OWNER))
    assert res.json() == {"performer_ids": [ALICE, BOB]}


@pytest.mark.asyncio
async def test_complete_flow(client, make_listing):
    listing = make_listing(ListingType.SERVICE, user_id=OWNER)
    base = f"/listings/service/{listing.id}"
    await client.post(f"{base}/responses", json={}, headers=_user(ALICE))

    res = await client.post(f"{base}/complete", headers=_user(OWNER))
    assert res.status_code == 404

    res = await client.post(f"{base}/confirm", headers=_user(ALICE))
    assert res.status_code == 200, res.text

    res = await client.post(f"{base}/complete", headers=_user(ALICE))
    assert res.status_code == 200
    assert res.json()["status"] == "done"


@pytest.mark.asyncio
async def test_response_errors(client, make_listing):
    listing = make_listing(ListingType.RENT, user_id=OWNER)
    base = f"/listings/rent/{listing.id}"

    res = await client.post(f"{base}/responses", json={}, headers=_user(ALICE))
    assert res.status_code == 201
    response_id = res.json()["response"]["id"]

    res = await client.post(f"{base}/responses", json={}, headers=_user(ALICE))
    assert res.status_code == 409

    res = await client.post(f"{base}/responses", json={}, headers=_user(OWNER))
    assert res.status_code == 400

    res = await client.post("/listings/rent/9999/responses", json={}, headers=_user(ALICE))
    assert res.status_code == 404

    res = await client.post(f"/listings/boat/{listing.id}/responses", json={}, headers=_user(ALICE))
    assert res.status_code == 400

    res = await client.post(f"{base}/responses", json={})
    assert res.status_code == 401

    res = await client.delete(f"/responses/{response_id}", headers=_user(BOB))
    assert res.status_code == 403

    res = await client.delete(f"/responses/{response_id}", headers=_user(ALICE))
    assert res.status_code == 204

    res = await client.delete(f"/responses/{response_id}", headers=_user(ALICE))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_confirm_without_conversation(client, make_listing):
    listing = make_listing(ListingType.WORK_AD, user_id=OWNER)

    res = await client.post(f"/listings/work_ad/{listing.id}/confirm", headers=_user(ALICE))
    assert res.status_code == 404

    res = await client.post(f"/listings/work_ad/{listing.id}/cancel", headers=_user(ALICE))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_invalid_user_header(client, make_listing):
    listing = make_listing(ListingType.AD, user_id=OWNER)

    res = await client.get(f"/listings/ad/{listing.id}/responses", headers={"X-User-ID": "abc"})
    assert res.status_code == 401

    res = await client.get(f"/listings/ad/{listing.id}/responses", headers={"X-User-ID": "0"})
    assert res.status_code == 401
