"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from campus_events.models.event import EventStatus
from campus_events.models.request import RequestStatus
from campus_events.schemas.building import LocationResponse
from campus_events.schemas.user import UserSummary


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    start_time: datetime
    end_time: datetime
    max_guest_count: int = Field(..., gt=0, le=100000)
    guest_count: int = Field(default=0, ge=0)
    location_id: int
    host_id: int

    @model_validator(mode="after")
    def check_times_and_capacity(self) -> "EventCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.guest_count > self.max_guest_count:
            raise ValueError("guest_count cannot exceed max_guest_count")
        return self


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    start_time: datetime
    end_time: datetime
    max_guest_count: int
    guest_count: int
    event_status: EventStatus
    host: UserSummary
    location: LocationResponse

    model_config = {"from_attributes": True}


class RequestGuestSummary(BaseModel):
    id: int
    request_status: RequestStatus
    guest: UserSummary

    model_config = {"from_attributes": True}


class ActiveEventResponse(EventResponse):
    requests: list[RequestGuestSummary]


class ActiveEventsPagesResponse(BaseModel):
    pages: int


class CancelEventResponse(BaseModel):
    event_id: int
    event_status: EventStatus


class SweepResponse(BaseModel):
    closed_event_ids: list[int]
