"""Notification Routes — the recipient's inbox over HTTP.

Invariants:
    - Listing is scoped to X-User-Id and reports the inbox-wide unread count
    - Marking read / deleting someone else's notification is 403, unknown is 404
    - mark-all-read flips only the actor's unread rows
"""

from uuid import uuid4


def _as(user_id):
    return {"X-User-Id": str(user_id)}


async def _request_swap(client, cast):
    res = await client.post(
        "/api/v1/swaps",
        json={
            "book_id": str(cast.wanted_book),
            "offered_book_id": str(cast.offered_book),
        },
        headers=_as(cast.requester),
    )
    assert res.status_code == 201, res.text
    return res.json()["id"]


async def _inbox(client, user_id, **params):
    res = await client.get(
        "/api/v1/notifications", params=params, headers=_as(user_id),
    )
    assert res.status_code == 200, res.text
    return res.json()


async def test_inbox_requires_user_header(client):
    res = await client.get("/api/v1/notifications")
    assert res.status_code == 401


async def test_owner_inbox_lists_swap_request(client, cast):
    swap_id = await _request_swap(client, cast)
    inbox = await _inbox(client, cast.owner)
    assert inbox["unread_count"] == 1
    assert inbox["pagination"] == {"limit": 20, "offset": 0, "has_more": False}
    [item] = inbox["notifications"]
    assert item["type"] == "SWAP_REQUEST"
    assert item["swap_request_id"] == swap_id
    assert item["actor_id"] == str(cast.requester)
    assert item["is_read"] is False


async def test_inbox_is_scoped_to_recipient(client, cast):
    await _request_swap(client, cast)
    inbox = await _inbox(client, cast.requester)
    assert inbox["notifications"] == []
    assert inbox["unread_count"] == 0


async def test_mark_read(client, cast):
    await _request_swap(client, cast)
    [item] = (await _inbox(client, cast.owner))["notifications"]

    res = await client.put(
        f"/api/v1/notifications/{item['id']}", headers=_as(cast.owner),
    )
    assert res.status_code == 200
    assert res.json()["is_read"] is True
    assert (await _inbox(client, cast.owner))["unread_count"] == 0

    # Idempotent
    res = await client.put(
        f"/api/v1/notifications/{item['id']}", headers=_as(cast.owner),
    )
    assert res.status_code == 200


async def test_mark_read_of_someone_elses_notification_forbidden(client, cast):
    await _request_swap(client, cast)
    [item] = (await _inbox(client, cast.owner))["notifications"]
    res = await client.put(
        f"/api/v1/notifications/{item['id']}", headers=_as(cast.requester),
    )
    assert res.status_code == 403
    assert (await _inbox(client, cast.owner))["unread_count"] == 1


async def test_mark_read_unknown_is_404(client, cast):
    res = await client.put(
        f"/api/v1/notifications/{uuid4()}", headers=_as(cast.owner),
    )
    assert res.status_code == 404


async def test_mark_all_read(client, cast):
    swap_id = await _request_swap(client, cast)
    await client.post(
        f"/api/v1/swaps/{swap_id}/cancel", headers=_as(cast.requester),
    )
    assert (await _inbox(client, cast.owner))["unread_count"] == 2

    res = await client.post(
        "/api/v1/notifications/mark-all-read", headers=_as(cast.owner),
    )
    assert res.json() == {"updated": 2}
    inbox = await _inbox(client, cast.owner)
    assert inbox["unread_count"] == 0
    assert all(n["is_read"] for n in inbox["notifications"])


async def test_pagination(client, cast):
    swap_id = await _request_swap(client, cast)
    await client.post(
        f"/api/v1/swaps/{swap_id}/cancel", headers=_as(cast.requester),
    )
    page = await _inbox(client, cast.owner, limit=1)
    assert len(page["notifications"]) == 1
    assert page["pagination"]["has_more"] is True
    assert page["unread_count"] == 2

    rest = await _inbox(client, cast.owner, limit=1, offset=1)
    assert len(rest["notifications"]) == 1
    assert rest["notifications"][0]["id"] != page["notifications"][0]["id"]


async def test_limit_out_of_range_is_400(client, cast):
    res = await client.get(
        "/api/v1/notifications", params={"limit": 0}, headers=_as(cast.owner),
    )
    assert res.status_code == 400
    res = await client.get(
        "/api/v1/notifications", params={"limit": 101}, headers=_as(cast.owner),
    )
    assert res.status_code == 400


async def test_delete_notification(client, cast):
    await _request_swap(client, cast)
    [item] = (await _inbox(client, cast.owner))["notifications"]

    res = await client.delete(
        f"/api/v1/notifications/{item['id']}", headers=_as(cast.requester),
    )
    assert res.status_code == 403

    res = await client.delete(
        f"/api/v1/notifications/{item['id']}", headers=_as(cast.owner),
    )
    assert res.status_code == 204
    assert (await _inbox(client, cast.owner))["notifications"] == []
