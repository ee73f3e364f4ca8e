"""
Tests for the guest request workflow, including concurrent acceptance.
"""

import asyncio

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from campus_events.core.exceptions import NotFoundError, RequestStateError
from campus_events.models import EventRequest, RequestStatus, event_guests
from campus_events.services.request_service import accept_request, reject_request

from conftest import create_event, create_request, create_user


@pytest.mark.asyncio
async def test_create_request(client: AsyncClient, guest, host, test_event):
    """New requests start pending, with no capacity check."""
    response = await client.post("/api/v1/requests/", json={
        "guest_id": guest.id,
        "event_id": test_event.id,
        "host_id": host.id,
    })
    assert response.status_code == 201
    data = response.json()
    assert data["request_status"] == "pending"
    assert data["guest_id"] == guest.id
    assert data["event_id"] == test_event.id
    assert data["host_id"] == host.id


@pytest.mark.asyncio
async def test_create_request_for_full_event(client: AsyncClient, guest, host, full_event):
    """Capacity is enforced at acceptance, not at creation."""
    response = await client.post("/api/v1/requests/", json={
        "guest_id": guest.id,
        "event_id": full_event.id,
        "host_id": host.id,
    })
    assert response.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["guest_id", "event_id", "host_id"])
async def test_create_request_missing_reference(client: AsyncClient, guest, host, test_event, missing):
    """Each referenced record must exist."""
    payload = {"guest_id": guest.id, "event_id": test_event.id, "host_id": host.id}
    payload[missing] = 99999
    response = await client.post("/api/v1/requests/", json=payload)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_accept_request(client: AsyncClient, db_session, guest, test_event):
    """Acceptance increments guest_count by one and joins the guest to the event."""
    request = await create_request(db_session, guest, test_event)

    response = await client.post(f"/api/v1/requests/{request.id}/accept")
    assert response.status_code == 200
    data = response.json()
    assert data["accepted"] is True
    assert data["request_status"] == "accepted"

    event_response = await client.get(f"/api/v1/events/{test_event.id}")
    assert event_response.json()["guest_count"] == 1

    profile = (await client.get(f"/api/v1/users/{guest.id}")).json()
    assert [e["id"] for e in profile["guest_events"]] == [test_event.id]


@pytest.mark.asyncio
async def test_accept_request_full_event(client: AsyncClient, db_session, guest, full_event):
    """A full event refuses the request without touching guest_count."""
    request = await create_request(db_session, guest, full_event)

    response = await client.post(f"/api/v1/requests/{request.id}/accept")
    assert response.status_code == 200
    data = response.json()
    assert data["accepted"] is False
    assert data["request_status"] == "rejected"

    event_response = await client.get(f"/api/v1/events/{full_event.id}")
    assert event_response.json()["guest_count"] == 3

    requests = (await client.get(f"/api/v1/events/{full_event.id}/requests")).json()
    assert requests[0]["request_status"] == "rejected"


@pytest.mark.asyncio
async def test_accept_until_full(db_session, host, location, guest, other_guest):
    """The second of two acceptances on a one-slot event is refused."""
    event = await create_event(db_session, host, location, max_guest_count=1)
    first = await create_request(db_session, guest, event)
    second = await create_request(db_session, other_guest, event)

    assert await accept_request(db_session, first.id) is True
    assert await accept_request(db_session, second.id) is False
    await db_session.commit()

    await db_session.refresh(event)
    assert event.guest_count == event.max_guest_count == 1


@pytest.mark.asyncio
async def test_accept_twice(client: AsyncClient, db_session, guest, test_event):
    """A decided request cannot be accepted again."""
    request = await create_request(db_session, guest, test_event)
    await client.post(f"/api/v1/requests/{request.id}/accept")

    response = await client.post(f"/api/v1/requests/{request.id}/accept")
    assert response.status_code == 409

    event_response = await client.get(f"/api/v1/events/{test_event.id}")
    assert event_response.json()["guest_count"] == 1


@pytest.mark.asyncio
async def test_accept_nonexistent_request(client: AsyncClient):
    response = await client.post("/api/v1/requests/99999/accept")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reject_request(client: AsyncClient, db_session, guest, test_event):
    request = await create_request(db_session, guest, test_event)

    response = await client.post(f"/api/v1/requests/{request.id}/reject")
    assert response.status_code == 200
    assert response.json()["request_status"] == "rejected"

    # Rejecting again is a no-op
    response = await client.post(f"/api/v1/requests/{request.id}/reject")
    assert response.status_code == 200
    assert response.json()["request_status"] == "rejected"


@pytest.mark.asyncio
async def test_reject_accepted_request(db_session, guest, test_event):
    """Acceptance is final."""
    request = await create_request(db_session, guest, test_event)
    assert await accept_request(db_session, request.id) is True

    with pytest.raises(RequestStateError):
        await reject_request(db_session, request.id)


@pytest.mark.asyncio
async def test_reject_nonexistent_request(db_session):
    with pytest.raises(NotFoundError):
        await reject_request(db_session, 99999)


@pytest.mark.asyncio
async def test_concurrent_accept_last_slot(session_factory, db_session, host, location):
    """
    Two acceptances racing for the last slot, each in its own session:
    exactly one wins, the other is refused, and the event ends exactly full.
    """
    event = await create_event(db_session, host, location, max_guest_count=3, guest_count=2)
    first_guest = await create_user(db_session, "first@campus.edu", "First")
    second_guest = await create_user(db_session, "second@campus.edu", "Second")
    first = await create_request(db_session, first_guest, event)
    second = await create_request(db_session, second_guest, event)

    async def accept_in_own_session(request_id: int) -> bool:
        async with session_factory() as session:
            accepted = await accept_request(session, request_id)
            await session.commit()
            return accepted

    results = await asyncio.gather(
        accept_in_own_session(first.id),
        accept_in_own_session(second.id),
    )
    assert sorted(results) == [False, True]

    async with session_factory() as session:
        statuses = (
            await session.execute(
                select(EventRequest.request_status).where(EventRequest.event_id == event.id)
            )
        ).scalars().all()
        assert sorted(s.value for s in statuses) == ["accepted", "rejected"]

        joined = (
            await session.execute(select(event_guests).where(event_guests.c.event_id == event.id))
        ).all()
        assert len(joined) == 1

    await db_session.refresh(event)
    assert event.guest_count == event.max_guest_count


@pytest.mark.asyncio
async def test_host_requests_only_pending(client: AsyncClient, db_session, host, guest, other_guest, test_event):
    """The host inbox lists requests still waiting on a decision."""
    waiting = await create_request(db_session, guest, test_event)
    decided = await create_request(db_session, other_guest, test_event)
    await client.post(f"/api/v1/requests/{decided.id}/reject")

    response = await client.get(f"/api/v1/users/{host.id}/host-requests")
    assert response.status_code == 200
    data = response.json()
    assert [r["id"] for r in data] == [waiting.id]
    assert data[0]["guest"]["id"] == guest.id
    assert data[0]["event"]["location"]["building"]["name"] == "Engineering Hall"


@pytest.mark.asyncio
async def test_guest_requests_all_states(client: AsyncClient, db_session, host, guest, location):
    first_event = await create_event(db_session, host, location, title="First")
    second_event = await create_event(db_session, host, location, title="Second")
    accepted = await create_request(db_session, guest, first_event)
    pending = await create_request(db_session, guest, second_event)
    await client.post(f"/api/v1/requests/{accepted.id}/accept")

    response = await client.get(f"/api/v1/users/{guest.id}/guest-requests")
    assert response.status_code == 200
    data = response.json()
    assert [(r["id"], r["request_status"]) for r in data] == [
        (accepted.id, "accepted"),
        (pending.id, "pending"),
    ]
    assert data[0]["host"]["id"] == host.id


@pytest.mark.asyncio
async def test_event_requests_not_found(client: AsyncClient):
    response = await client.get("/api/v1/events/99999/requests")
    assert response.status_code == 404
