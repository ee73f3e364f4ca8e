"""
User endpoints: the authenticated user, profiles and request inboxes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.security import get_current_user_id
from campus_events.db.session import get_db
from campus_events.schemas.profile import UserProfileResponse
from campus_events.schemas.request import GuestRequestResponse, HostRequestResponse
from campus_events.schemas.user import UserSummary
from campus_events.services.request_service import get_user_guest_requests, get_user_host_requests
from campus_events.services.user_service import get_user, get_user_profile

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserSummary)
async def read_self(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The user identified by the bearer token."""
    return await get_user(db, user_id)


@router.get("/{user_id}", response_model=UserProfileResponse)
async def read_user_profile(user_id: int, db: AsyncSession = Depends(get_db)):
    return await get_user_profile(db, user_id)


@router.get("/{user_id}/host-requests", response_model=list[HostRequestResponse])
async def read_user_host_requests(user_id: int, db: AsyncSession = Depends(get_db)):
    """Pending requests for events this user hosts."""
    return await get_user_host_requests(db, user_id)


@router.get("/{user_id}/guest-requests", response_model=list[GuestRequestResponse])
async def read_user_guest_requests(user_id: int, db: AsyncSession = Depends(get_db)):
    """Requests this user has made, in any state."""
    return await get_user_guest_requests(db, user_id)
