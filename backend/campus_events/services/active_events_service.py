"""
Active events listing: compute, paginate, memoize.

The open events are read once, grouped into pages of EVENTS_PER_PAGE and
stored in the cache as a single JSON document under "activeEvents". The
flattened list, a single page and the page count are all projections of
that document. The page count has its own key, "activeEventsPages", with
the same TTL but no invalidation of its own.

What callers get back is plain JSON-compatible data (lists of dicts), the
same on a cache miss as on a hit.
"""

import json
from itertools import chain
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.config import get_settings
from campus_events.core.logging import get_logger
from campus_events.core.metrics import record_cache_operation
from campus_events.models.building import Location
from campus_events.models.event import Event, EventStatus
from campus_events.models.request import EventRequest
from campus_events.schemas.event import ActiveEventResponse
from campus_events.services.cache_service import cache_get, cache_set, cache_delete

logger = get_logger(__name__)
settings = get_settings()

ACTIVE_EVENTS_KEY = "activeEvents"
ACTIVE_EVENTS_PAGES_KEY = "activeEventsPages"


def paginate(items: list, size: int) -> list[list]:
    """Group items into consecutive pages of `size`; the last page may be short."""
    return [items[i:i + size] for i in range(0, len(items), size)]


async def fetch_open_events(db: AsyncSession) -> list[Event]:
    """Open events with host, location, building and requests (with guests), by id."""
    result = await db.execute(
        select(Event)
        .where(Event.event_status == EventStatus.OPEN)
        .options(
            selectinload(Event.host),
            selectinload(Event.location).selectinload(Location.building),
            selectinload(Event.requests).selectinload(EventRequest.guest),
        )
        .order_by(Event.id.asc())
    )
    return list(result.scalars().all())


async def get_active_events(db: AsyncSession) -> list[list[dict]]:
    """Paged open events, served from the cache when present."""
    cached = await cache_get(ACTIVE_EVENTS_KEY)
    record_cache_operation(ACTIVE_EVENTS_KEY, hit=cached is not None)
    if cached is not None:
        return json.loads(cached)

    events = await fetch_open_events(db)
    serialized = [ActiveEventResponse.model_validate(e).model_dump(mode="json") for e in events]
    pages = paginate(serialized, settings.EVENTS_PER_PAGE)

    await cache_set(ACTIVE_EVENTS_KEY, json.dumps(pages), settings.ACTIVE_EVENTS_CACHE_TTL)
    logger.info(
        "active_events_cache_set",
        events=len(serialized),
        pages=len(pages),
        ttl=settings.ACTIVE_EVENTS_CACHE_TTL,
    )
    return pages


async def active_events(db: AsyncSession) -> list[dict]:
    return list(chain.from_iterable(await get_active_events(db)))


async def active_events_page(db: AsyncSession, page: int) -> Optional[list[dict]]:
    """1-indexed page, or None when the page does not exist."""
    pages = await get_active_events(db)
    if page < 1 or page > len(pages):
        return None
    return pages[page - 1]


async def active_events_pages(db: AsyncSession) -> int:
    cached = await cache_get(ACTIVE_EVENTS_PAGES_KEY)
    record_cache_operation(ACTIVE_EVENTS_PAGES_KEY, hit=cached is not None)
    if cached is not None:
        return json.loads(cached)

    page_count = len(await get_active_events(db))
    await cache_set(ACTIVE_EVENTS_PAGES_KEY, json.dumps(page_count), settings.ACTIVE_EVENTS_CACHE_TTL)
    logger.info("active_events_pages_cache_set", pages=page_count)
    return page_count


async def invalidate_active_events() -> bool:
    """Drop the cached listing so the next read recomputes it."""
    return await cache_delete(ACTIVE_EVENTS_KEY) > 0
