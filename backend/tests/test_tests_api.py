"""
Gradewise - Test Authoring API Tests
"""
import pytest
from httpx import AsyncClient

from tests.conftest import create_published_test, register_and_login


@pytest.mark.asyncio
async def test_create_test_as_teacher(client: AsyncClient, teacher_headers, sample_test_data):
    response = await client.post("/api/v1/tests", json=sample_test_data, headers=teacher_headers)
    assert response.status_code == 201
    data = response.json()

    assert data["status"] == "draft"
    assert data["subject"] == "Physics"
    assert len(data["questions"]) == 4
    assert sorted(data["question_types"]) == ["long", "mcq", "numerical", "short"]

    mcq = data["questions"][0]
    assert mcq["type"] == "mcq"
    assert mcq["correct_answer"] == "1"
    assert [o["text"] for o in mcq["options"]] == ["Joule", "Newton", "Watt"]


@pytest.mark.asyncio
async def test_student_cannot_create_test(client: AsyncClient, student_headers, sample_test_data):
    response = await client.post("/api/v1/tests", json=sample_test_data, headers=student_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_test_requires_auth(client: AsyncClient, sample_test_data):
    response = await client.post("/api/v1/tests", json=sample_test_data)
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "question",
    [
        # mcq with two correct options
        {
            "type": "mcq", "text": "Pick one", "order": 1,
            "options": [{"text": "a", "is_correct": True}, {"text": "b", "is_correct": True}],
        },
        # mcq with a single option
        {"type": "mcq", "text": "Pick one", "order": 1, "options": [{"text": "a", "is_correct": True}]},
        # mcq with no correct option
        {"type": "mcq", "text": "Pick one", "order": 1, "options": [{"text": "a"}, {"text": "b"}]},
        # numerical without a numeric key
        {"type": "numerical", "text": "How many?", "order": 1, "correct_answer": "several"},
        # options on a non-mcq question
        {"type": "short", "text": "Explain", "order": 1, "options": [{"text": "a"}, {"text": "b"}]},
        # tolerance on a non-numerical question
        {"type": "long", "text": "Explain", "order": 1, "tolerance": 0.5},
        # zero marks
        {"type": "short", "text": "Explain", "order": 1, "marks": 0},
    ],
)
async def test_invalid_questions_rejected(client: AsyncClient, teacher_headers, sample_test_data, question):
    payload = {**sample_test_data, "questions": [question]}
    response = await client.post("/api/v1/tests", json=payload, headers=teacher_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_question_order_rejected(client: AsyncClient, teacher_headers, sample_test_data):
    questions = sample_test_data["questions"]
    questions[1]["order"] = questions[0]["order"]
    response = await client.post("/api/v1/tests", json=sample_test_data, headers=teacher_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_add_question_to_draft(client: AsyncClient, teacher_headers, sample_test_data):
    created = (await client.post(
        "/api/v1/tests", json={**sample_test_data, "questions": []}, headers=teacher_headers
    )).json()

    response = await client.post(
        f"/api/v1/tests/{created['id']}/questions",
        json={
            "type": "numerical",
            "text": "g on Earth in m/s^2?",
            "correct_answer": "9.81",
            "tolerance": 0.05,
            "marks": 2,
            "order": 1,
        },
        headers=teacher_headers,
    )
    assert response.status_code == 201
    assert response.json()["tolerance"] == 0.05

    duplicate = await client.post(
        f"/api/v1/tests/{created['id']}/questions",
        json={"type": "short", "text": "Why?", "order": 1},
        headers=teacher_headers,
    )
    assert duplicate.status_code == 400


@pytest.mark.asyncio
async def test_publish_requires_questions(client: AsyncClient, teacher_headers, sample_test_data):
    created = (await client.post(
        "/api/v1/tests", json={**sample_test_data, "questions": []}, headers=teacher_headers
    )).json()

    response = await client.post(f"/api/v1/tests/{created['id']}/publish", headers=teacher_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_lifecycle_moves_forward_only(client: AsyncClient, teacher_headers, sample_test_data):
    created = (await client.post("/api/v1/tests", json=sample_test_data, headers=teacher_headers)).json()
    test_id = created["id"]

    # draft -> completed skips a step
    response = await client.post(f"/api/v1/tests/{test_id}/complete", headers=teacher_headers)
    assert response.status_code == 409

    response = await client.post(f"/api/v1/tests/{test_id}/publish", headers=teacher_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "published"

    response = await client.post(f"/api/v1/tests/{test_id}/publish", headers=teacher_headers)
    assert response.status_code == 409

    response = await client.post(
        f"/api/v1/tests/{test_id}/questions",
        json={"type": "short", "text": "Late question", "order": 9},
        headers=teacher_headers,
    )
    assert response.status_code == 409

    response = await client.post(f"/api/v1/tests/{test_id}/complete", headers=teacher_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    response = await client.post(f"/api/v1/tests/{test_id}/publish", headers=teacher_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_only_owner_can_publish(client: AsyncClient, teacher_headers, sample_test_data):
    created = (await client.post("/api/v1/tests", json=sample_test_data, headers=teacher_headers)).json()
    other = await register_and_login(client, "other.teacher@school.org", role="teacher")

    response = await client.post(f"/api/v1/tests/{created['id']}/publish", headers=other)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_student_visibility(client: AsyncClient, teacher_headers, student_headers, sample_test_data):
    draft = (await client.post("/api/v1/tests", json=sample_test_data, headers=teacher_headers)).json()

    response = await client.get(f"/api/v1/tests/{draft['id']}", headers=student_headers)
    assert response.status_code == 404
    response = await client.get("/api/v1/tests", headers=student_headers)
    assert response.json() == []

    published = await create_published_test(client, teacher_headers, sample_test_data)
    other_class = await create_published_test(
        client, teacher_headers, {**sample_test_data, "class_name": "9-B"}
    )

    response = await client.get("/api/v1/tests", headers=student_headers)
    assert [t["id"] for t in response.json()] == [published["id"]]
    assert other_class["id"] not in [t["id"] for t in response.json()]

    response = await client.get(f"/api/v1/tests/{published['id']}", headers=student_headers)
    assert response.status_code == 200
    view = response.json()
    mcq = view["questions"][0]
    assert mcq["options"] == ["Joule", "Newton", "Watt"]
    assert "correct_answer" not in mcq
    assert "ai_rubric" not in view["questions"][2]


@pytest.mark.asyncio
async def test_teacher_sees_answer_key(client: AsyncClient, teacher_headers, sample_test_data):
    published = await create_published_test(client, teacher_headers, sample_test_data)

    response = await client.get(f"/api/v1/tests/{published['id']}", headers=teacher_headers)
    assert response.status_code == 200
    assert response.json()["questions"][1]["correct_answer"] == "6"


@pytest.mark.asyncio
async def test_get_missing_test(client: AsyncClient, teacher_headers):
    response = await client.get("/api/v1/tests/999", headers=teacher_headers)
    assert response.status_code == 404
