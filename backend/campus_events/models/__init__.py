from campus_events.models.user import User, UserType, event_guests
from campus_events.models.building import Building, Location
from campus_events.models.event import Event, EventStatus
from campus_events.models.request import EventRequest, RequestStatus
from campus_events.models.survey import Survey, SurveyQuestion, SurveyAnswer

__all__ = [
    "User", "UserType", "event_guests",
    "Building", "Location",
    "Event", "EventStatus",
    "EventRequest", "RequestStatus",
    "Survey", "SurveyQuestion", "SurveyAnswer",
]
