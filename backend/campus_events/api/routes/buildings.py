"""
Building endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.db.session import get_db
from campus_events.schemas.building import BuildingDetailResponse, BuildingResponse
from campus_events.services.building_service import get_building, list_buildings

router = APIRouter(prefix="/buildings", tags=["Buildings"])


@router.get("/", response_model=list[BuildingResponse])
async def list_buildings_endpoint(db: AsyncSession = Depends(get_db)):
    return await list_buildings(db)


@router.get("/{building_id}", response_model=BuildingDetailResponse)
async def get_building_endpoint(building_id: int, db: AsyncSession = Depends(get_db)):
    """A building with its locations."""
    return await get_building(db, building_id)
