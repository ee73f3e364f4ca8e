"""
Guest request workflow with concurrency-safe capacity control.

CONCURRENCY STRATEGY: Optimistic Locking with Retry
====================================================

Problem:
  Two hosts' clicks (or one host double-clicking) accept two requests for
  an event with one free slot. Both read guest_count=max-1, both write
  guest_count=max. One guest too many.

Solution:
  The increment is a single conditional UPDATE against the event row:

    UPDATE events SET guest_count = guest_count + 1, version = version + 1
    WHERE id = :event_id AND version = :seen_version
      AND guest_count < max_guest_count

  If no row matches, some other transaction changed the event since we
  read it. The transaction is rolled back and the whole read-check-write
  sequence runs again, so a retry can legitimately end in a capacity
  refusal. The request status change and the guest_events row are written
  in the same transaction as the increment.

  The CHECK constraint guest_count <= max_guest_count is the final
  safety net.
"""

import time

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.config import get_settings
from campus_events.core.exceptions import (
    ConcurrencyConflictError,
    NotFoundError,
    RequestStateError,
)
from campus_events.core.logging import get_logger
from campus_events.core.metrics import accept_latency, accept_retries, record_request_decision
from campus_events.models.building import Location
from campus_events.models.event import Event
from campus_events.models.request import EventRequest, RequestStatus
from campus_events.models.user import User

logger = get_logger(__name__)
settings = get_settings()


async def _load_request_for_decision(db: AsyncSession, request_id: int) -> EventRequest:
    result = await db.execute(
        select(EventRequest)
        .where(EventRequest.id == request_id)
        .options(
            selectinload(EventRequest.event),
            selectinload(EventRequest.guest).selectinload(User.guest_events),
        )
        .execution_options(populate_existing=True)
    )
    request = result.scalar_one_or_none()
    if not request:
        raise NotFoundError("Request", request_id)
    return request


async def accept_request(db: AsyncSession, request_id: int) -> bool:
    """
    Accept a pending request if its event has a free slot.

    Returns False (after marking the request rejected) when the event is
    full. Retries up to ACCEPT_MAX_RETRY_ATTEMPTS on version conflicts.
    """
    start = time.perf_counter()
    max_attempts = settings.ACCEPT_MAX_RETRY_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        # Step 1: Read current request and event state
        request = await _load_request_for_decision(db, request_id)

        if request.request_status != RequestStatus.PENDING:
            raise RequestStateError(
                f"Request {request_id} is already {request.request_status.value}"
            )

        event = request.event

        if event.guest_count + 1 > event.max_guest_count:
            request.request_status = RequestStatus.REJECTED
            await db.flush()
            record_request_decision("refused_capacity")
            logger.info(
                "request_refused_capacity",
                request_id=request_id,
                event_id=event.id,
                guest_count=event.guest_count,
                max_guest_count=event.max_guest_count,
            )
            return False

        # Step 2: Optimistic lock - increment only if nothing changed since the read
        current_version = event.version
        update_result = await db.execute(
            update(Event)
            .where(
                Event.id == event.id,
                Event.version == current_version,
                Event.guest_count < Event.max_guest_count,
            )
            .values(
                guest_count=Event.guest_count + 1,
                version=Event.version + 1,
            )
            .execution_options(synchronize_session=False)
        )

        if update_result.rowcount == 0:
            accept_retries.inc()
            logger.info(
                "request_accept_retry",
                request_id=request_id,
                event_id=event.id,
                attempt=attempt,
                reason="version_conflict",
            )
            await db.rollback()
            if attempt == max_attempts:
                raise ConcurrencyConflictError(
                    "Request acceptance failed due to high demand. Please try again."
                )
            continue

        # Step 3: Record the decision and the guest's membership
        request.request_status = RequestStatus.ACCEPTED
        request.guest.guest_events.append(event)
        await db.flush()
        await db.refresh(event, attribute_names=["guest_count", "version"])

        accept_latency.observe(time.perf_counter() - start)
        record_request_decision("accepted")
        logger.info(
            "request_accepted",
            request_id=request_id,
            event_id=event.id,
            guest_id=request.guest_id,
            guest_count=event.guest_count,
            attempt=attempt,
        )
        return True

    # Should not reach here, but just in case
    raise ConcurrencyConflictError()


async def reject_request(db: AsyncSession, request_id: int) -> EventRequest:
    """Reject a request. Rejecting twice is a no-op; accepted requests stay accepted."""
    result = await db.execute(select(EventRequest).where(EventRequest.id == request_id))
    request = result.scalar_one_or_none()

    if not request:
        raise NotFoundError("Request", request_id)

    if request.request_status == RequestStatus.ACCEPTED:
        raise RequestStateError(f"Request {request_id} is already accepted")

    if request.request_status == RequestStatus.PENDING:
        request.request_status = RequestStatus.REJECTED
        await db.flush()
        record_request_decision("rejected")
        logger.info("request_rejected", request_id=request_id, event_id=request.event_id)

    return request


async def _require(db: AsyncSession, model, entity: str, entity_id: int):
    instance = await db.get(model, entity_id)
    if instance is None:
        raise NotFoundError(entity, entity_id)
    return instance


async def create_request(
    db: AsyncSession,
    guest_id: int,
    event_id: int,
    host_id: int,
) -> EventRequest:
    """Create a pending request. Capacity is only checked on acceptance."""
    await _require(db, User, "Guest", guest_id)
    await _require(db, Event, "Event", event_id)
    await _require(db, User, "Host", host_id)

    request = EventRequest(
        guest_id=guest_id,
        event_id=event_id,
        host_id=host_id,
        request_status=RequestStatus.PENDING,
    )
    db.add(request)
    await db.flush()
    await db.refresh(request)

    logger.info(
        "request_created",
        request_id=request.id,
        guest_id=guest_id,
        event_id=event_id,
        host_id=host_id,
    )
    return request


def _event_options(relationship):
    """Loader options for the event behind `relationship`, as EventResponse needs it."""
    return (
        selectinload(relationship).selectinload(Event.host),
        selectinload(relationship).selectinload(Event.location).selectinload(Location.building),
    )


async def get_user_host_requests(db: AsyncSession, user_id: int) -> list[EventRequest]:
    """Pending requests waiting on this user as host."""
    result = await db.execute(
        select(EventRequest)
        .where(
            EventRequest.host_id == user_id,
            EventRequest.request_status == RequestStatus.PENDING,
        )
        .options(*_event_options(EventRequest.event), selectinload(EventRequest.guest))
        .order_by(EventRequest.id)
    )
    return list(result.scalars().all())


async def get_user_guest_requests(db: AsyncSession, user_id: int) -> list[EventRequest]:
    """Every request this user made, in any state."""
    result = await db.execute(
        select(EventRequest)
        .where(EventRequest.guest_id == user_id)
        .options(*_event_options(EventRequest.event), selectinload(EventRequest.host))
        .order_by(EventRequest.id)
    )
    return list(result.scalars().all())


async def get_event_requests(db: AsyncSession, event_id: int) -> list[EventRequest]:
    await _require(db, Event, "Event", event_id)
    result = await db.execute(
        select(EventRequest)
        .where(EventRequest.event_id == event_id)
        .options(selectinload(EventRequest.host), selectinload(EventRequest.guest))
        .order_by(EventRequest.id)
    )
    return list(result.scalars().all())
