"""
Gradewise - Test Configuration
Pytest fixtures and configuration for testing
"""
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

import gradewise.models  # noqa: F401
from gradewise.ai.evaluator import AnswerEvaluator
from gradewise.ai.performance_analyzer import PerformanceAnalyzer
from gradewise.ai.study_planner import StudyPlanner
from gradewise.api.deps import (
    get_answer_evaluator,
    get_ocr_service,
    get_performance_analyzer,
    get_study_planner,
)
from gradewise.core.database import Base, get_db
from gradewise.main import app
from tests.fakes import FakeLLM, FakeOCR


# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# Create test engine; NullPool so no connection outlives its event loop
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)

test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

PASSWORD = "TestPass123!"


@pytest.fixture
def evaluator_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def planner_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def analyzer_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def fake_ocr() -> FakeOCR:
    return FakeOCR()


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    evaluator_llm: FakeLLM,
    planner_llm: FakeLLM,
    analyzer_llm: FakeLLM,
    fake_ocr: FakeOCR,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database and AI adapter overrides."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_answer_evaluator] = lambda: AnswerEvaluator(llm_client=evaluator_llm)
    app.dependency_overrides[get_study_planner] = lambda: StudyPlanner(llm_client=planner_llm)
    app.dependency_overrides[get_performance_analyzer] = lambda: PerformanceAnalyzer(llm_client=analyzer_llm)
    app.dependency_overrides[get_ocr_service] = lambda: fake_ocr

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def register_and_login(
    client: AsyncClient,
    email: str,
    role: str = "student",
    class_name: str | None = None,
) -> dict[str, str]:
    """Register a user and return Authorization headers for them."""
    payload = {
        "email": email,
        "password": PASSWORD,
        "name": email.split("@")[0].title(),
        "role": role,
    }
    if class_name:
        payload["class_name"] = class_name
    response = await client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201, response.text

    response = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def teacher_headers(client: AsyncClient) -> dict[str, str]:
    return await register_and_login(client, "teacher@school.org", role="teacher")


@pytest_asyncio.fixture
async def student_headers(client: AsyncClient) -> dict[str, str]:
    return await register_and_login(client, "student@school.org", role="student", class_name="10-A")


@pytest.fixture
def sample_user_data() -> dict[str, Any]:
    """Sample user registration data."""
    return {
        "email": "asha@school.org",
        "password": PASSWORD,
        "name": "Asha Rao",
        "role": "student",
        "class_name": "10-A",
    }


@pytest.fixture
def sample_test_data() -> dict[str, Any]:
    """A draft test with one question of each type."""
    return {
        "title": "Unit Test 1",
        "subject": "Physics",
        "class_name": "10-A",
        "total_marks": 20,
        "duration_minutes": 45,
        "test_date": "2026-11-02T09:00:00Z",
        "questions": [
            {
                "type": "mcq",
                "text": "What is the SI unit of force?",
                "options": [
                    {"text": "Joule"},
                    {"text": "Newton", "is_correct": True},
                    {"text": "Watt"},
                ],
                "marks": 2,
                "order": 1,
                "topic": "Units",
            },
            {
                "type": "numerical",
                "text": "A 2 kg mass accelerates at 3 m/s^2. What is the net force in N?",
                "correct_answer": "6",
                "marks": 3,
                "order": 2,
                "topic": "Mechanics",
            },
            {
                "type": "short",
                "text": "State Newton's first law.",
                "marks": 5,
                "order": 3,
                "ai_rubric": "Mentions inertia and the absence of net external force.",
                "topic": "Mechanics",
            },
            {
                "type": "long",
                "text": "Explain the conservation of momentum with an example.",
                "marks": 10,
                "order": 4,
                "topic": "Momentum",
            },
        ],
    }


async def create_published_test(
    client: AsyncClient,
    headers: dict[str, str],
    data: dict[str, Any],
) -> dict[str, Any]:
    """Create a test as staff and publish it; returns the staff view."""
    response = await client.post("/api/v1/tests", json=data, headers=headers)
    assert response.status_code == 201, response.text
    created = response.json()

    response = await client.post(f"/api/v1/tests/{created['id']}/publish", headers=headers)
    assert response.status_code == 200, response.text
    return created
