"""
Pydantic schemas for user-related responses.
"""

from pydantic import BaseModel

from campus_events.models.user import UserType


class UserSummary(BaseModel):
    id: int
    email: str
    name: str
    user_type: UserType

    model_config = {"from_attributes": True}
