"""
Pytest fixtures for test database, cache, broker, client and sample data.

Each test gets its own SQLite database file (so concurrent sessions really
are separate connections) and its own in-memory Redis.
"""

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import fakeredis
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from campus_events.main import app
from campus_events.db.base import Base
from campus_events.db.session import get_db
from campus_events.core.security import create_access_token
from campus_events.infrastructure.pubsub import PubSub
from campus_events.models import (
    Building,
    Event,
    EventRequest,
    EventStatus,
    Location,
    Survey,
    SurveyQuestion,
    User,
    UserType,
)
from campus_events.services import cache_service


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema in a throwaway database file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'campus_events_test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch) -> fakeredis.FakeAsyncRedis:
    """Swap the Redis client for an isolated in-memory one."""
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    monkeypatch.setattr(cache_service, "_redis_client", client)
    return client


@pytest.fixture
def pubsub() -> PubSub:
    return PubSub(max_queue_size=10)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, pubsub: PubSub) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        # Commit like get_db so on-commit work (survey pushes) runs
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db
    app.state.pubsub = pubsub

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_user(db: AsyncSession, email: str, name: str, user_type=UserType.STUDENT) -> User:
    user = User(email=email, name=name, user_type=user_type)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_event(
    db: AsyncSession,
    host: User,
    location: Location,
    title: str = "Study Group",
    max_guest_count: int = 10,
    guest_count: int = 0,
    starts_in: timedelta = timedelta(days=1),
    duration: timedelta = timedelta(hours=2),
    status: EventStatus = EventStatus.OPEN,
) -> Event:
    start = datetime.now(timezone.utc) + starts_in
    event = Event(
        title=title,
        description=f"{title} description",
        start_time=start,
        end_time=start + duration,
        max_guest_count=max_guest_count,
        guest_count=guest_count,
        event_status=status,
        host_id=host.id,
        location_id=location.id,
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)
    return event


async def create_request(db: AsyncSession, guest: User, event: Event) -> EventRequest:
    request = EventRequest(guest_id=guest.id, host_id=event.host_id, event_id=event.id)
    db.add(request)
    await db.commit()
    await db.refresh(request)
    return request


@pytest_asyncio.fixture
async def host(db_session: AsyncSession) -> User:
    return await create_user(db_session, "host@campus.edu", "Hannah Host")


@pytest_asyncio.fixture
async def guest(db_session: AsyncSession) -> User:
    return await create_user(db_session, "guest@campus.edu", "Gary Guest")


@pytest_asyncio.fixture
async def other_guest(db_session: AsyncSession) -> User:
    return await create_user(db_session, "other@campus.edu", "Olive Other")


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await create_user(db_session, "admin@campus.edu", "Ada Admin", UserType.ADMIN)


@pytest_asyncio.fixture
async def auth_headers(guest: User) -> dict:
    """Authorization headers with Bearer token for the guest."""
    token = create_access_token(data={"sub": str(guest.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def location(db_session: AsyncSession) -> Location:
    building = Building(name="Engineering Hall")
    db_session.add(building)
    await db_session.flush()
    location = Location(name="Room 101", building_id=building.id)
    db_session.add(location)
    await db_session.commit()
    await db_session.refresh(location)
    return location


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, host: User, location: Location) -> Event:
    """Open event with 2 free slots."""
    return await create_event(db_session, host, location, title="Board Game Night", max_guest_count=2)


@pytest_asyncio.fixture
async def full_event(db_session: AsyncSession, host: User, location: Location) -> Event:
    """Open event with no free slots."""
    return await create_event(
        db_session, host, location, title="Sold Out Talk", max_guest_count=3, guest_count=3
    )


@pytest_asyncio.fixture
async def survey(db_session: AsyncSession) -> Survey:
    """Survey with two questions, not started."""
    survey = Survey(name="Orientation Feedback")
    db_session.add(survey)
    await db_session.flush()
    db_session.add_all([
        SurveyQuestion(survey_id=survey.id, prompt="How was the campus tour?"),
        SurveyQuestion(survey_id=survey.id, prompt="What should we change?"),
    ])
    await db_session.commit()
    await db_session.refresh(survey, attribute_names=["name", "curr_question", "questions"])
    return survey
