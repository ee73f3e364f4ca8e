"""
Event endpoints: the cached active listing, event lifecycle and sweeps.

The /active routes are declared before /{event_id} so they are not
captured by it.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.db.session import get_db
from campus_events.schemas.event import (
    ActiveEventResponse,
    ActiveEventsPagesResponse,
    CancelEventResponse,
    EventCreate,
    EventResponse,
    SweepResponse,
)
from campus_events.schemas.request import EventRequestResponse
from campus_events.services.active_events_service import (
    active_events,
    active_events_page,
    active_events_pages,
    invalidate_active_events,
)
from campus_events.services.event_service import cancel_event, create_event, get_event_details
from campus_events.services.request_service import get_event_requests
from campus_events.services.sweeper_service import auto_update_events
from campus_events.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/active", response_model=list[ActiveEventResponse])
async def list_active_events(db: AsyncSession = Depends(get_db)):
    """
    All open events, ordered by id.
    Served from Redis for up to 30 seconds after the last computation.
    """
    return await active_events(db)


@router.get("/active/pages", response_model=ActiveEventsPagesResponse)
async def count_active_event_pages(db: AsyncSession = Depends(get_db)):
    return ActiveEventsPagesResponse(pages=await active_events_pages(db))


@router.get("/active/pages/{page}", response_model=list[ActiveEventResponse])
async def get_active_events_page(
    page: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
):
    """One page (1-indexed) of open events."""
    events = await active_events_page(db, page)
    if events is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Page {page} not found",
        )
    return events


@router.delete("/active/cache", status_code=status.HTTP_204_NO_CONTENT)
async def drop_active_events_cache():
    """Force the next active events read to hit the database."""
    await invalidate_active_events()


@router.post("/sweep", response_model=SweepResponse)
async def sweep_events(db: AsyncSession = Depends(get_db)):
    """Close open events that are full or have ended."""
    closed = await auto_update_events(db, trigger="manual")
    return SweepResponse(closed_event_ids=closed)


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(event_data: EventCreate, db: AsyncSession = Depends(get_db)):
    """Create an open event. The active listing picks it up on its next refresh."""
    return await create_event(db, event_data)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single event by ID. Not cached (needs real-time guest counts)."""
    return await get_event_details(db, event_id)


@router.get("/{event_id}/requests", response_model=list[EventRequestResponse])
async def list_event_requests(event_id: int, db: AsyncSession = Depends(get_db)):
    return await get_event_requests(db, event_id)


@router.post("/{event_id}/cancel", response_model=CancelEventResponse)
async def cancel_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    event = await cancel_event(db, event_id)
    return CancelEventResponse(event_id=event.id, event_status=event.event_status)
