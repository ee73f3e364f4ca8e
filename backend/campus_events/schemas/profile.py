"""
User profile: the user with the events they host and the events they joined.
"""

from campus_events.schemas.event import EventResponse
from campus_events.schemas.user import UserSummary


class UserProfileResponse(UserSummary):
    host_events: list[EventResponse]
    guest_events: list[EventResponse]
