"""
Building and location lookups.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.exceptions import NotFoundError
from campus_events.models.building import Building


async def get_building(db: AsyncSession, building_id: int) -> Building:
    result = await db.execute(
        select(Building)
        .where(Building.id == building_id)
        .options(selectinload(Building.locations))
    )
    building = result.scalar_one_or_none()
    if not building:
        raise NotFoundError("Building", building_id)
    return building


async def list_buildings(db: AsyncSession) -> list[Building]:
    result = await db.execute(select(Building).order_by(Building.id))
    return list(result.scalars().all())
