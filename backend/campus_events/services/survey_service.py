"""
Live survey control.

Every change to a survey (an answer arriving, the admin moving to the next
question) publishes the whole survey on SURVEY_UPDATE_<survey id>, where
the WebSocket subscribers of that survey pick it up. The payload is taken
when the change is made but only published once the transaction commits,
so subscribers never see a state the database does not hold.

Advancing uses the same optimistic scheme as request acceptance: the
UPDATE only matches the question index that was read, and a lost race is
rolled back and retried from a fresh read.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.config import get_settings
from campus_events.core.exceptions import ConcurrencyConflictError, NotFoundError, SurveyStateError
from campus_events.core.logging import get_logger
from campus_events.core.metrics import survey_publishes
from campus_events.db.session import on_commit
from campus_events.infrastructure.pubsub import PubSub
from campus_events.models.survey import Survey, SurveyAnswer, SurveyQuestion
from campus_events.schemas.survey import SurveyResponse

logger = get_logger(__name__)
settings = get_settings()


def survey_topic(survey_id: int) -> str:
    return f"SURVEY_UPDATE_{survey_id}"


def _survey_options():
    return (selectinload(Survey.questions).selectinload(SurveyQuestion.answers),)


def publish_survey(db: AsyncSession, pubsub: PubSub, survey: Survey, reason: str) -> None:
    """Snapshot the survey now and publish it when the transaction commits."""
    survey_id = survey.id
    payload = SurveyResponse.model_validate(survey).model_dump(mode="json")

    def publish() -> None:
        delivered = pubsub.publish(survey_topic(survey_id), payload)
        survey_publishes.labels(reason=reason).inc()
        logger.info("survey_published", survey_id=survey_id, reason=reason, delivered=delivered)

    on_commit(db, publish)


async def get_survey(db: AsyncSession, survey_id: int) -> Survey:
    result = await db.execute(
        select(Survey)
        .where(Survey.id == survey_id)
        .options(*_survey_options())
        .execution_options(populate_existing=True)
    )
    survey = result.scalar_one_or_none()
    if not survey:
        raise NotFoundError("Survey", survey_id)
    return survey


async def list_surveys(db: AsyncSession) -> list[Survey]:
    result = await db.execute(select(Survey).options(*_survey_options()).order_by(Survey.id))
    return list(result.scalars().all())


async def answer_survey(db: AsyncSession, pubsub: PubSub, question_id: int, answer: str) -> SurveyAnswer:
    """Append an answer to a question and broadcast the updated survey."""
    result = await db.execute(
        select(SurveyQuestion)
        .where(SurveyQuestion.id == question_id)
        .options(
            selectinload(SurveyQuestion.answers),
            selectinload(SurveyQuestion.survey).options(*_survey_options()),
        )
    )
    question = result.scalar_one_or_none()
    if not question:
        raise NotFoundError("Question", question_id)

    survey_answer = SurveyAnswer(question=question, answer=answer)
    db.add(survey_answer)
    await db.flush()
    await db.refresh(survey_answer, attribute_names=["created_at"])

    logger.info("survey_answered", survey_id=question.survey_id, question_id=question_id)
    publish_survey(db, pubsub, question.survey, reason="answer")
    return survey_answer


async def next_survey_question(db: AsyncSession, pubsub: PubSub, survey_id: int) -> Survey:
    """
    Move the survey to its next question.

    NULL goes to 0, n goes to n + 1. Position len(questions) means the
    survey is finished; advancing past it is refused.
    """
    max_attempts = settings.SURVEY_ADVANCE_MAX_RETRY_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        survey = await get_survey(db, survey_id)
        seen = survey.curr_question

        next_index = 0 if seen is None else seen + 1
        if next_index > len(survey.questions):
            raise SurveyStateError(f"Survey {survey_id} has already finished")

        unchanged = Survey.curr_question.is_(None) if seen is None else Survey.curr_question == seen
        result = await db.execute(
            update(Survey)
            .where(Survey.id == survey_id, unchanged)
            .values(curr_question=next_index)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            logger.info("survey_advance_retry", survey_id=survey_id, attempt=attempt, seen=seen)
            await db.rollback()
            if attempt == max_attempts:
                raise ConcurrencyConflictError(
                    f"Survey {survey_id} is being advanced concurrently. Please try again."
                )
            continue

        await db.refresh(survey, attribute_names=["curr_question"])
        logger.info("survey_advanced", survey_id=survey_id, curr_question=next_index, attempt=attempt)
        publish_survey(db, pubsub, survey, reason="next_question")
        return survey

    raise ConcurrencyConflictError()
