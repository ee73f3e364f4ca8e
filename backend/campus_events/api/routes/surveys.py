"""
Survey endpoints and the live update WebSocket.
"""

import asyncio

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.api.deps import get_pubsub
from campus_events.core.exceptions import NotFoundError
from campus_events.core.logging import get_logger
from campus_events.db.session import get_db
from campus_events.infrastructure.pubsub import PubSub
from campus_events.schemas.survey import SurveyAnswerCreate, SurveyAnswerResponse, SurveyResponse
from campus_events.services.survey_service import (
    answer_survey,
    get_survey,
    list_surveys,
    next_survey_question,
    survey_topic,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/surveys", tags=["Surveys"])


@router.get("/", response_model=list[SurveyResponse])
async def list_surveys_endpoint(db: AsyncSession = Depends(get_db)):
    return await list_surveys(db)


@router.post("/answers", response_model=SurveyAnswerResponse, status_code=status.HTTP_201_CREATED)
async def answer_survey_endpoint(
    answer_data: SurveyAnswerCreate,
    db: AsyncSession = Depends(get_db),
    pubsub: PubSub = Depends(get_pubsub),
):
    """Record an answer and push the updated survey to its subscribers."""
    return await answer_survey(db, pubsub, answer_data.question_id, answer_data.answer)


@router.get("/{survey_id}", response_model=SurveyResponse)
async def get_survey_endpoint(survey_id: int, db: AsyncSession = Depends(get_db)):
    return await get_survey(db, survey_id)


@router.post("/{survey_id}/next", response_model=SurveyResponse)
async def next_survey_question_endpoint(
    survey_id: int,
    db: AsyncSession = Depends(get_db),
    pubsub: PubSub = Depends(get_pubsub),
):
    """Advance to the next question and push the survey to its subscribers."""
    return await next_survey_question(db, pubsub, survey_id)


@router.websocket("/{survey_id}/updates")
async def survey_updates(websocket: WebSocket, survey_id: int, db: AsyncSession = Depends(get_db)):
    """
    Stream every update of one survey, in publish order, while connected.
    Updates published before connecting are not replayed.
    """
    try:
        await get_survey(db, survey_id)
    except NotFoundError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    # Release the session; the stream can stay open for a long time
    await db.close()

    pubsub: PubSub = websocket.app.state.pubsub
    async with pubsub.subscribe(survey_topic(survey_id)) as subscription:
        await websocket.accept()

        async def forward():
            async for payload in subscription:
                await websocket.send_json(payload)

        async def drain():
            # Incoming messages are ignored; reading is how a disconnect is noticed
            while True:
                await websocket.receive_text()

        tasks = {asyncio.create_task(forward()), asyncio.create_task(drain())}
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        for task in done:
            error = task.exception()
            if isinstance(error, WebSocketDisconnect):
                logger.info("survey_subscriber_disconnected", survey_id=survey_id, code=error.code)
            elif error is not None:
                logger.error("survey_stream_failed", survey_id=survey_id, error=str(error))
                raise error
