"""
Event lifecycle sweeper.

Closes open events that are full or have ended. The candidates come from
the active events listing, so a sweep may work from a snapshot up to one
cache TTL old. The batched UPDATE only touches rows that are still open,
which keeps a stale snapshot from overwriting a cancellation.
"""

from datetime import datetime, timezone

from pydantic import TypeAdapter
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.logging import get_logger
from campus_events.core.metrics import record_sweep
from campus_events.models.event import Event, EventStatus
from campus_events.services.active_events_service import active_events, invalidate_active_events

logger = get_logger(__name__)

_datetime_adapter = TypeAdapter(datetime)


def _as_utc(value) -> datetime:
    moment = _datetime_adapter.validate_python(value)
    if moment.tzinfo is None:
        # Stores without timezone support hand back naive UTC
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def is_inactive(event: dict, now: datetime) -> bool:
    return event["guest_count"] >= event["max_guest_count"] or _as_utc(event["end_time"]) < now


async def auto_update_events(db: AsyncSession, trigger: str = "manual") -> list[int]:
    """Close full or ended events. Returns the ids marked inactive, sorted."""
    now = datetime.now(timezone.utc)
    events = await active_events(db)

    inactive_ids = sorted(event["id"] for event in events if is_inactive(event, now))

    closed = 0
    if inactive_ids:
        result = await db.execute(
            update(Event)
            .where(Event.id.in_(inactive_ids), Event.event_status == EventStatus.OPEN)
            .values(event_status=EventStatus.CLOSED)
            .execution_options(synchronize_session=False)
        )
        closed = result.rowcount
        await invalidate_active_events()

    record_sweep(trigger, closed)
    logger.info(
        "events_swept",
        trigger=trigger,
        candidates=len(events),
        inactive=len(inactive_ids),
        closed=closed,
    )
    return inactive_ids
