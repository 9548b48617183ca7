"""
Tests for the /booking endpoints against a real (SQLite) database.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from hotel_booking.api.routes import booking as booking_routes
from hotel_booking.models import Booking, TicketStatus


async def booking_count(db_session) -> int:
    result = await db_session.execute(select(func.count(Booking.id)))
    return result.scalar_one()


async def make_guest(make_user, make_ticket, make_auth_headers, **ticket):
    user = await make_user()
    await make_ticket(user, **ticket)
    return user, await make_auth_headers(user)


# GET /booking


@pytest.mark.asyncio
async def test_get_booking_without_booking(client: AsyncClient, auth_headers):
    response = await client.get("/booking", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_booking_returns_booking_with_room(
    client: AsyncClient, auth_headers, guest, make_room, make_booking
):
    room = await make_room(3)
    booking = await make_booking(guest, room)

    response = await client.get("/booking", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "id": booking.id,
        "Room": {
            "id": room.id,
            "name": room.name,
            "capacity": 3,
            "hotelId": room.hotel_id,
        },
    }


@pytest.mark.asyncio
async def test_get_booking_is_repeatable(client: AsyncClient, auth_headers, guest, make_room, make_booking):
    await make_booking(guest, await make_room(1))

    first = await client.get("/booking", headers=auth_headers)
    second = await client.get("/booking", headers=auth_headers)

    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()


@pytest.mark.asyncio
async def test_get_booking_only_sees_own_booking(
    client: AsyncClient, auth_headers, make_user, make_room, make_booking
):
    other = await make_user()
    await make_booking(other, await make_room(2))

    response = await client.get("/booking", headers=auth_headers)
    assert response.status_code == 404


# POST /booking


@pytest.mark.asyncio
async def test_create_booking(client: AsyncClient, auth_headers, guest, make_room, db_session):
    room = await make_room(2)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)

    assert response.status_code == 200
    booking_id = response.json()["id"]
    booking = await db_session.get(Booking, booking_id)
    assert booking.user_id == guest.id
    assert booking.room_id == room.id
    assert await booking_count(db_session) == 1


@pytest.mark.asyncio
async def test_create_booking_accepts_bare_room_id(client: AsyncClient, auth_headers, make_room, db_session):
    room = await make_room(1)

    response = await client.post("/booking", json=room.id, headers=auth_headers)

    assert response.status_code == 200
    assert await booking_count(db_session) == 1


@pytest.mark.asyncio
async def test_create_then_get(client: AsyncClient, auth_headers, make_room):
    room = await make_room(2)
    created = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)

    response = await client.get("/booking", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["id"] == created.json()["id"]
    assert response.json()["Room"]["id"] == room.id


@pytest.mark.asyncio
async def test_create_booking_without_enrollment(
    client: AsyncClient, make_user, make_auth_headers, make_room, db_session
):
    headers = await make_auth_headers(await make_user())
    room = await make_room(2)

    response = await client.post("/booking", json={"roomId": room.id}, headers=headers)

    assert response.status_code == 403
    assert await booking_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "ticket",
    [
        {"status": TicketStatus.RESERVED},
        {"is_remote": True},
        {"includes_hotel": False},
    ],
    ids=["unpaid", "remote", "no-hotel"],
)
async def test_create_booking_with_ineligible_ticket(
    client: AsyncClient, make_user, make_ticket, make_auth_headers, make_room, db_session, ticket
):
    _, headers = await make_guest(make_user, make_ticket, make_auth_headers, **ticket)
    room = await make_room(2)

    response = await client.post("/booking", json={"roomId": room.id}, headers=headers)

    assert response.status_code == 403
    assert await booking_count(db_session) == 0


@pytest.mark.asyncio
async def test_create_booking_room_full(
    client: AsyncClient, auth_headers, make_user, make_room, make_booking, db_session
):
    room = await make_room(1)
    await make_booking(await make_user(), room)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)

    assert response.status_code == 403
    assert await booking_count(db_session) == 1


@pytest.mark.asyncio
async def test_create_booking_twice(client: AsyncClient, auth_headers, make_room, db_session):
    room = await make_room(3)

    first = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    second = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)

    assert first.status_code == 200
    assert second.status_code == 403
    assert await booking_count(db_session) == 1


@pytest.mark.asyncio
async def test_create_booking_unknown_room(client: AsyncClient, auth_headers, db_session):
    response = await client.post("/booking", json={"roomId": 9999}, headers=auth_headers)

    assert response.status_code == 404
    assert await booking_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [{}, {"roomId": 0}, {"roomId": -1}, {"roomId": "1"}, {"roomId": None}, {"roomId": True}],
    ids=["missing", "zero", "negative", "string", "null", "bool"],
)
async def test_create_booking_unusable_room_id(client: AsyncClient, auth_headers, make_room, db_session, body):
    await make_room(2)

    response = await client.post("/booking", json=body, headers=auth_headers)

    assert response.status_code == 403
    assert await booking_count(db_session) == 0


@pytest.mark.asyncio
async def test_create_booking_without_body(client: AsyncClient, auth_headers):
    response = await client.post("/booking", headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_error_body_does_not_leak_reason(client: AsyncClient, auth_headers, make_user, make_room, make_booking):
    room = await make_room(1)
    await make_booking(await make_user(), room)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)

    assert response.status_code == 403
    assert "full" not in response.text.lower()


# PUT /booking/{bookingId}


@pytest.mark.asyncio
async def test_replace_booking(client: AsyncClient, auth_headers, guest, make_room, make_booking, db_session):
    old_room = await make_room(1)
    new_room = await make_room(1)
    booking = await make_booking(guest, old_room)

    response = await client.put(
        f"/booking/{booking.id}", json={"roomId": new_room.id}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json() == {"id": booking.id}
    await db_session.refresh(booking)
    assert booking.room_id == new_room.id
    assert await booking_count(db_session) == 1


@pytest.mark.asyncio
async def test_replace_then_get_shows_new_room(client: AsyncClient, auth_headers, guest, make_room, make_booking):
    booking = await make_booking(guest, await make_room(1))
    new_room = await make_room(2)

    await client.put(f"/booking/{booking.id}", json={"roomId": new_room.id}, headers=auth_headers)
    response = await client.get("/booking", headers=auth_headers)

    assert response.json()["Room"]["id"] == new_room.id


@pytest.mark.asyncio
async def test_replace_booking_without_booking(client: AsyncClient, auth_headers, make_room):
    room = await make_room(1)

    response = await client.put("/booking/1", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_replace_booking_of_another_user(
    client: AsyncClient, auth_headers, guest, make_user, make_room, make_booking, db_session
):
    room = await make_room(3)
    target = await make_room(3)
    await make_booking(guest, room)
    other_booking = await make_booking(await make_user(), room)

    response = await client.put(
        f"/booking/{other_booking.id}", json={"roomId": target.id}, headers=auth_headers
    )

    assert response.status_code == 403
    await db_session.refresh(other_booking)
    assert other_booking.room_id == room.id


@pytest.mark.asyncio
@pytest.mark.parametrize("booking_id", ["0", "-4"])
async def test_replace_booking_non_positive_id(
    client: AsyncClient, auth_headers, guest, make_room, make_booking, booking_id
):
    room = await make_room(2)
    await make_booking(guest, room)

    response = await client.put(f"/booking/{booking_id}", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_replace_booking_malformed_id(client: AsyncClient, auth_headers, guest, make_room, make_booking):
    room = await make_room(2)
    await make_booking(guest, room)

    response = await client.put("/booking/abc", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body", [{"roomId": 9999}, {"roomId": 0}, {}], ids=["unknown", "zero", "missing"]
)
async def test_replace_booking_unusable_room(
    client: AsyncClient, auth_headers, guest, make_room, make_booking, db_session, body
):
    room = await make_room(2)
    booking = await make_booking(guest, room)

    response = await client.put(f"/booking/{booking.id}", json=body, headers=auth_headers)

    assert response.status_code == 404
    await db_session.refresh(booking)
    assert booking.room_id == room.id


@pytest.mark.asyncio
async def test_replace_booking_into_full_room(
    client: AsyncClient, auth_headers, guest, make_user, make_room, make_booking, db_session
):
    room = await make_room(2)
    full = await make_room(1)
    booking = await make_booking(guest, room)
    await make_booking(await make_user(), full)

    response = await client.put(f"/booking/{booking.id}", json={"roomId": full.id}, headers=auth_headers)

    assert response.status_code == 403
    await db_session.refresh(booking)
    assert booking.room_id == room.id


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient, auth_headers):
    response = await client.get("/booking", headers={**auth_headers, "X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")


@pytest.mark.asyncio
@pytest.mark.parametrize("booking_id", ["%20{id}", "+{id}", "{id}_0", "{id}.0", "0x{id}"])
async def test_replace_booking_id_must_be_plain_digits(
    client: AsyncClient, auth_headers, guest, make_room, make_booking, db_session, booking_id
):
    room = await make_room(2)
    target = await make_room(2)
    booking = await make_booking(guest, room)

    response = await client.put(
        f"/booking/{booking_id.format(id=booking.id)}", json={"roomId": target.id}, headers=auth_headers
    )

    assert response.status_code == 400
    await db_session.refresh(booking)
    assert booking.room_id == room.id


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["POST", "PUT"])
async def test_write_commits_before_invalidating_and_responding(
    client: AsyncClient, auth_headers, guest, make_room, make_booking, db_session, monkeypatch, method
):
    """The test session is never committed by the dependency, so any commit comes from the route."""
    room = await make_room(2)
    target = await make_room(2)
    if method == "PUT":
        booking = await make_booking(guest, room)
        url = f"/booking/{booking.id}"
    else:
        url = "/booking"

    events = []
    commit = db_session.commit

    async def recording_commit():
        events.append("commit")
        await commit()

    async def recording_invalidate(user_id):
        events.append("invalidate")

    monkeypatch.setattr(db_session, "commit", recording_commit)
    monkeypatch.setattr(booking_routes, "invalidate_booking_cache", recording_invalidate)

    response = await client.request(method, url, json={"roomId": target.id}, headers=auth_headers)

    assert response.status_code == 200
    assert events == ["commit", "invalidate"]


@pytest.mark.asyncio
async def test_rejected_write_does_not_commit(
    client: AsyncClient, auth_headers, make_user, make_room, make_booking, db_session, monkeypatch
):
    room = await make_room(1)
    await make_booking(await make_user(), room)

    commits = []

    async def recording_commit():
        commits.append("commit")

    monkeypatch.setattr(db_session, "commit", recording_commit)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)

    assert response.status_code == 403
    assert commits == []


@pytest.mark.asyncio
@pytest.mark.parametrize("method,url", [("POST", "/booking"), ("PUT", "/booking/1")])
async def test_body_that_is_not_json_is_unprocessable(client: AsyncClient, auth_headers, method, url):
    response = await client.request(
        method,
        url,
        content=b"not json at all",
        headers={**auth_headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 422
