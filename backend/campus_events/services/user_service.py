"""
User lookups: the authenticated user and public profiles.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.exceptions import NotFoundError
from campus_events.models.building import Location
from campus_events.models.event import Event
from campus_events.models.user import User


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def get_user_profile(db: AsyncSession, user_id: int) -> User:
    """User with hosted and joined events, each with host, location and building."""
    user = await get_user(db, user_id)
    # Reload both collections even when this session already holds them.
    # The user row itself is not repopulated: Event.host can lead back to it.
    db.expire(user, ["host_events", "guest_events"])

    options = []
    for events in (User.host_events, User.guest_events):
        options.append(selectinload(events).selectinload(Event.host))
        options.append(selectinload(events).selectinload(Event.location).selectinload(Location.building))

    result = await db.execute(select(User).where(User.id == user_id).options(*options))
    return result.scalar_one()
