from campus_events.schemas.user import UserSummary
from campus_events.schemas.building import (
    BuildingResponse, BuildingDetailResponse, LocationResponse, LocationSummary,
)
from campus_events.schemas.event import (
    EventCreate, EventResponse, ActiveEventResponse, ActiveEventsPagesResponse,
    CancelEventResponse, SweepResponse,
)
from campus_events.schemas.request import (
    RequestCreate, RequestResponse, HostRequestResponse, GuestRequestResponse,
    EventRequestResponse, RequestDecisionResponse,
)
from campus_events.schemas.survey import (
    SurveyAnswerCreate, SurveyAnswerResponse, SurveyQuestionResponse, SurveyResponse,
)
from campus_events.schemas.profile import UserProfileResponse

__all__ = [
    "UserSummary", "UserProfileResponse",
    "BuildingResponse", "BuildingDetailResponse", "LocationResponse", "LocationSummary",
    "EventCreate", "EventResponse", "ActiveEventResponse", "ActiveEventsPagesResponse",
    "CancelEventResponse", "SweepResponse",
    "RequestCreate", "RequestResponse", "HostRequestResponse", "GuestRequestResponse",
    "EventRequestResponse", "RequestDecisionResponse",
    "SurveyAnswerCreate", "SurveyAnswerResponse", "SurveyQuestionResponse", "SurveyResponse",
]
