"""
Pydantic schemas for guest requests.
"""

from datetime import datetime
from pydantic import BaseModel

from campus_events.models.request import RequestStatus
from campus_events.schemas.event import EventResponse
from campus_events.schemas.user import UserSummary


class RequestCreate(BaseModel):
    guest_id: int
    event_id: int
    host_id: int


class RequestResponse(BaseModel):
    id: int
    guest_id: int
    host_id: int
    event_id: int
    request_status: RequestStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class HostRequestResponse(BaseModel):
    """A pending request as seen by the event's host."""

    id: int
    request_status: RequestStatus
    event: EventResponse
    guest: UserSummary

    model_config = {"from_attributes": True}


class GuestRequestResponse(BaseModel):
    """A request as seen by the guest who made it."""

    id: int
    request_status: RequestStatus
    event: EventResponse
    host: UserSummary

    model_config = {"from_attributes": True}


class EventRequestResponse(BaseModel):
    id: int
    request_status: RequestStatus
    event_id: int
    host: UserSummary
    guest: UserSummary

    model_config = {"from_attributes": True}


class RequestDecisionResponse(BaseModel):
    request_id: int
    accepted: bool
    request_status: RequestStatus
