"""
Pydantic schemas for buildings and locations.
"""

from pydantic import BaseModel


class BuildingResponse(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class LocationSummary(BaseModel):
    id: int
    name: str
    building_id: int

    model_config = {"from_attributes": True}


class LocationResponse(BaseModel):
    id: int
    name: str
    building: BuildingResponse

    model_config = {"from_attributes": True}


class BuildingDetailResponse(BuildingResponse):
    locations: list[LocationSummary]
