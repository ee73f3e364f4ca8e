"""
Event service handling creation, lookup and cancellation.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.exceptions import EventStateError, NotFoundError
from campus_events.core.logging import get_logger
from campus_events.models.building import Location
from campus_events.models.event import Event, EventStatus
from campus_events.models.user import User
from campus_events.schemas.event import EventCreate

logger = get_logger(__name__)


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    """Create an open event at an existing location for an existing host."""
    if await db.get(Location, event_data.location_id) is None:
        raise NotFoundError("Location", event_data.location_id)
    if await db.get(User, event_data.host_id) is None:
        raise NotFoundError("Host", event_data.host_id)

    event = Event(
        title=event_data.title,
        description=event_data.description,
        start_time=event_data.start_time,
        end_time=event_data.end_time,
        max_guest_count=event_data.max_guest_count,
        guest_count=event_data.guest_count,
        event_status=EventStatus.OPEN,
        host_id=event_data.host_id,
        location_id=event_data.location_id,
    )
    db.add(event)
    await db.flush()

    logger.info(
        "event_created",
        event_id=event.id,
        title=event.title,
        max_guest_count=event.max_guest_count,
    )
    return await get_event_details(db, event.id)


async def get_event_details(db: AsyncSession, event_id: int) -> Event:
    """Get a single event with host, location and building."""
    result = await db.execute(
        select(Event)
        .where(Event.id == event_id)
        .options(
            selectinload(Event.host),
            selectinload(Event.location).selectinload(Location.building),
        )
        .execution_options(populate_existing=True)
    )
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError("Event", event_id)
    return event


async def cancel_event(db: AsyncSession, event_id: int) -> Event:
    """
    Cancel an open event.

    The status check and the write are one conditional UPDATE, so an event
    closed by a concurrent sweep stays closed. The cached active listing is
    not touched; it drops the event when it next expires or is invalidated.
    """
    result = await db.execute(
        update(Event)
        .where(Event.id == event_id, Event.event_status == EventStatus.OPEN)
        .values(event_status=EventStatus.CANCELLED, version=Event.version + 1)
        .execution_options(synchronize_session=False)
    )
    event = await db.get(Event, event_id, populate_existing=True)

    if event is None:
        raise NotFoundError("Event", event_id)
    if result.rowcount == 0:
        raise EventStateError(f"Event {event_id} is already {event.event_status.value}")

    logger.info("event_cancelled", event_id=event_id)
    return event
