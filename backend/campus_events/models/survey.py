"""
Live surveys.

`curr_question` indexes into the survey's questions ordered by id. It is
NULL before the survey starts and only moves forward. The index equal to
the number of questions marks a finished survey.
"""

from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin


class Survey(Base, TimestampMixin):
    __tablename__ = "surveys"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    curr_question = Column(Integer, nullable=True)

    questions = relationship("SurveyQuestion", back_populates="survey", order_by="SurveyQuestion.id")

    @property
    def current_question(self):
        if self.curr_question is None or self.curr_question >= len(self.questions):
            return None
        return self.questions[self.curr_question]

    def __repr__(self) -> str:
        return f"<Survey(id={self.id}, name={self.name}, curr_question={self.curr_question})>"


class SurveyQuestion(Base, TimestampMixin):
    __tablename__ = "survey_questions"

    id = Column(Integer, primary_key=True, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id"), nullable=False, index=True)
    prompt = Column(String(1000), nullable=False)

    survey = relationship("Survey", back_populates="questions")
    answers = relationship("SurveyAnswer", back_populates="question", order_by="SurveyAnswer.id")


class SurveyAnswer(Base, TimestampMixin):
    """Answers are append-only; nothing updates or deletes them."""

    __tablename__ = "survey_answers"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("survey_questions.id"), nullable=False, index=True)
    answer = Column(String(1000), nullable=False)

    question = relationship("SurveyQuestion", back_populates="answers")
