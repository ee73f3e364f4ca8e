"""
Tests for live survey control and broadcasting.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient
from starlette.websockets import WebSocketDisconnect

from campus_events import main
from campus_events.core.exceptions import NotFoundError, SurveyStateError
from campus_events.db.session import get_db
from campus_events.main import app
from campus_events.services.survey_service import (
    answer_survey,
    get_survey,
    next_survey_question,
    survey_topic,
)


async def next_message(subscription):
    return await asyncio.wait_for(anext(subscription), timeout=1)


async def assert_no_message(subscription):
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(anext(subscription), timeout=0.05)


@pytest.mark.asyncio
async def test_next_question_advances_and_publishes(db_session, pubsub, survey):
    async with pubsub.subscribe(survey_topic(survey.id)) as subscription:
        updated = await next_survey_question(db_session, pubsub, survey.id)
        await db_session.commit()
        assert updated.curr_question == 0
        payload = await next_message(subscription)
        assert payload["curr_question"] == 0
        assert payload["current_question"]["prompt"] == "How was the campus tour?"
        await assert_no_message(subscription)

        updated = await next_survey_question(db_session, pubsub, survey.id)
        await db_session.commit()
        assert updated.curr_question == 1
        payload = await next_message(subscription)
        assert payload["curr_question"] == 1
        assert payload["current_question"]["prompt"] == "What should we change?"
        await assert_no_message(subscription)


@pytest.mark.asyncio
async def test_nothing_published_before_commit(db_session, pubsub, survey):
    async with pubsub.subscribe(survey_topic(survey.id)) as subscription:
        await next_survey_question(db_session, pubsub, survey.id)
        await assert_no_message(subscription)

        await db_session.commit()
        assert (await next_message(subscription))["curr_question"] == 0


@pytest.mark.asyncio
async def test_rolled_back_changes_are_never_published(db_session, pubsub, survey):
    survey_id, question_id = survey.id, survey.questions[0].id

    async with pubsub.subscribe(survey_topic(survey_id)) as subscription:
        await next_survey_question(db_session, pubsub, survey_id)
        await answer_survey(db_session, pubsub, question_id, "Lost answer")
        await db_session.rollback()
        await assert_no_message(subscription)

        # A later commit on the same session does not resurrect them
        await db_session.commit()
        await assert_no_message(subscription)

    assert (await get_survey(db_session, survey_id)).curr_question is None


@pytest.mark.asyncio
async def test_next_question_stops_after_finish(db_session, pubsub, survey):
    for _ in range(3):
        updated = await next_survey_question(db_session, pubsub, survey.id)

    # Two questions: positions 0 and 1, then 2 means finished
    assert updated.curr_question == 2
    assert updated.current_question is None

    with pytest.raises(SurveyStateError):
        await next_survey_question(db_session, pubsub, survey.id)


@pytest.mark.asyncio
async def test_next_question_unknown_survey(db_session, pubsub):
    with pytest.raises(NotFoundError):
        await next_survey_question(db_session, pubsub, 99999)


@pytest.mark.asyncio
async def test_concurrent_advances_are_not_lost(session_factory, pubsub, survey):
    """
    Two admins advancing at once, each in its own session: both advances
    land, and subscribers see each position exactly once.
    """

    async def advance_in_own_session() -> int:
        async with session_factory() as session:
            updated = await next_survey_question(session, pubsub, survey.id)
            await session.commit()
            return updated.curr_question

    async with pubsub.subscribe(survey_topic(survey.id)) as subscription:
        results = await asyncio.gather(advance_in_own_session(), advance_in_own_session())
        published = [(await next_message(subscription))["curr_question"] for _ in range(2)]
        await assert_no_message(subscription)

    assert sorted(results) == [0, 1]
    assert sorted(published) == [0, 1]

    async with session_factory() as session:
        assert (await get_survey(session, survey.id)).curr_question == 1


@pytest.mark.asyncio
async def test_answer_publishes_full_survey(db_session, pubsub, survey):
    await next_survey_question(db_session, pubsub, survey.id)
    await db_session.commit()
    question_id = survey.questions[0].id

    async with pubsub.subscribe(survey_topic(survey.id)) as subscription:
        answer = await answer_survey(db_session, pubsub, question_id, "Loved it")
        await db_session.commit()
        payload = await next_message(subscription)

    assert answer.id is not None
    assert payload["id"] == survey.id
    answers = payload["current_question"]["answers"]
    assert [a["answer"] for a in answers] == ["Loved it"]
    assert answers[0]["question_id"] == question_id


@pytest.mark.asyncio
async def test_answers_accumulate(db_session, pubsub, survey):
    await next_survey_question(db_session, pubsub, survey.id)
    await db_session.commit()
    question_id = survey.questions[0].id

    async with pubsub.subscribe(survey_topic(survey.id)) as subscription:
        await answer_survey(db_session, pubsub, question_id, "Great")
        await answer_survey(db_session, pubsub, question_id, "Too long")
        await db_session.commit()
        first = await next_message(subscription)
        second = await next_message(subscription)

    # Each push carries the survey as it was when that answer arrived
    assert [a["answer"] for a in first["questions"][0]["answers"]] == ["Great"]
    assert [a["answer"] for a in second["questions"][0]["answers"]] == ["Great", "Too long"]


@pytest.mark.asyncio
async def test_answer_unknown_question(db_session, pubsub):
    with pytest.raises(NotFoundError):
        await answer_survey(db_session, pubsub, 99999, "Hello?")


@pytest.mark.asyncio
async def test_other_surveys_do_not_hear_updates(db_session, pubsub, survey):
    async with pubsub.subscribe(survey_topic(survey.id + 1)) as subscription:
        await next_survey_question(db_session, pubsub, survey.id)
        await db_session.commit()
        await assert_no_message(subscription)


@pytest.mark.asyncio
async def test_survey_endpoints(client: AsyncClient, survey, pubsub):
    response = await client.get(f"/api/v1/surveys/{survey.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["curr_question"] is None
    assert data["current_question"] is None
    assert len(data["questions"]) == 2

    async with pubsub.subscribe(survey_topic(survey.id)) as subscription:
        response = await client.post(f"/api/v1/surveys/{survey.id}/next")
        assert response.status_code == 200
        assert response.json()["curr_question"] == 0
        assert (await next_message(subscription))["curr_question"] == 0

        question_id = data["questions"][0]["id"]
        response = await client.post("/api/v1/surveys/answers", json={
            "question_id": question_id,
            "answer": "Very helpful",
        })
        assert response.status_code == 201
        assert response.json()["answer"] == "Very helpful"
        payload = await next_message(subscription)
        assert payload["current_question"]["answers"][0]["answer"] == "Very helpful"

    response = await client.get("/api/v1/surveys/")
    assert [s["id"] for s in response.json()] == [survey.id]


@pytest.mark.asyncio
async def test_survey_endpoints_not_found(client: AsyncClient):
    assert (await client.get("/api/v1/surveys/99999")).status_code == 404
    assert (await client.post("/api/v1/surveys/99999/next")).status_code == 404
    response = await client.post("/api/v1/surveys/answers", json={"question_id": 99999, "answer": "x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_empty_answer_rejected(client: AsyncClient, survey):
    response = await client.post("/api/v1/surveys/answers", json={"question_id": 1, "answer": ""})
    assert response.status_code == 422


@pytest.fixture
def live_client(session_factory, fake_redis, monkeypatch):
    """Full app with lifespan, for WebSocket tests. Each request gets its own session."""
    monkeypatch.setattr(main.settings, "SWEEP_ENABLED", False)

    async def override_get_db():
        async with session_factory() as session:
            yield session
            await session.commit()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_survey_updates_stream_in_publish_order(live_client, survey):
    url = f"/api/v1/surveys/{survey.id}/updates"
    with live_client.websocket_connect(url) as websocket:
        assert live_client.post(f"/api/v1/surveys/{survey.id}/next").status_code == 200
        assert live_client.post(f"/api/v1/surveys/{survey.id}/next").status_code == 200

        first = websocket.receive_json()
        second = websocket.receive_json()
        assert first["curr_question"] == 0
        assert second["curr_question"] == 1
        assert second["current_question"]["prompt"] == "What should we change?"

    # Disconnecting unsubscribes
    assert app.state.pubsub.subscriber_count(survey_topic(survey.id)) == 0


def test_survey_updates_unknown_survey_closes(live_client):
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with live_client.websocket_connect("/api/v1/surveys/99999/updates"):
            pass
    assert excinfo.value.code == 1008
