"""
Pydantic schemas for surveys. SurveyResponse is also the payload
broadcast to survey subscribers.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class SurveyAnswerCreate(BaseModel):
    question_id: int
    answer: str = Field(..., min_length=1, max_length=1000)


class SurveyAnswerResponse(BaseModel):
    id: int
    question_id: int
    answer: str
    created_at: datetime

    model_config = {"from_attributes": True}


class SurveyQuestionResponse(BaseModel):
    id: int
    prompt: str
    answers: list[SurveyAnswerResponse]

    model_config = {"from_attributes": True}


class SurveyResponse(BaseModel):
    id: int
    name: str
    curr_question: Optional[int]
    current_question: Optional[SurveyQuestionResponse]
    questions: list[SurveyQuestionResponse]

    model_config = {"from_attributes": True}
