"""
Guest request endpoints with concurrency-safe acceptance.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.db.session import get_db
from campus_events.models.request import RequestStatus
from campus_events.schemas.request import RequestCreate, RequestDecisionResponse, RequestResponse
from campus_events.services.request_service import accept_request, create_request, reject_request

router = APIRouter(prefix="/requests", tags=["Requests"])


@router.post("/", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request_endpoint(request_data: RequestCreate, db: AsyncSession = Depends(get_db)):
    """Ask to join an event. Capacity is not checked until the host accepts."""
    return await create_request(
        db,
        guest_id=request_data.guest_id,
        event_id=request_data.event_id,
        host_id=request_data.host_id,
    )


@router.post("/{request_id}/accept", response_model=RequestDecisionResponse)
async def accept_request_endpoint(request_id: int, db: AsyncSession = Depends(get_db)):
    """
    Accept a pending request.

    A full event is not an error: the request is rejected and the response
    carries accepted=false. Concurrent acceptances are resolved with
    optimistic locking; a 409 means the retries ran out.
    """
    accepted = await accept_request(db, request_id)
    return RequestDecisionResponse(
        request_id=request_id,
        accepted=accepted,
        request_status=RequestStatus.ACCEPTED if accepted else RequestStatus.REJECTED,
    )


@router.post("/{request_id}/reject", response_model=RequestDecisionResponse)
async def reject_request_endpoint(request_id: int, db: AsyncSession = Depends(get_db)):
    request = await reject_request(db, request_id)
    return RequestDecisionResponse(
        request_id=request.id,
        accepted=False,
        request_status=request.request_status,
    )
