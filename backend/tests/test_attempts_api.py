"""
Gradewise - Attempt API Tests
Start, submit and evaluate, with the AI adapters replaced by fakes.
"""
import pytest
from httpx import AsyncClient

from gradewise.ai.evaluator import AnswerEvaluator
from gradewise.ai.ocr import OCRServiceError
from gradewise.schemas.ai import OCRResult
from gradewise.services.grading import OCR_FAILURE_FEEDBACK
from tests.conftest import create_published_test, register_and_login


def _answers(questions: list[dict]) -> list[dict]:
    mcq, numerical, short, long_ = questions
    return [
        {"question_id": mcq["id"], "selected_option": 1},
        {"question_id": numerical["id"], "text": "6"},
        {"question_id": short["id"], "text": "A body stays at rest unless a net force acts on it."},
        {"question_id": long_["id"], "image_url": "https://cdn.school.org/scans/p1.jpg"},
    ]


async def _start(client: AsyncClient, headers, test_id: int) -> dict:
    response = await client.post("/api/v1/attempts", json={"test_id": test_id}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_full_attempt_flow(
    client: AsyncClient,
    teacher_headers,
    student_headers,
    sample_test_data,
    evaluator_llm,
    fake_ocr,
):
    test = await create_published_test(client, teacher_headers, sample_test_data)

    attempt = await _start(client, student_headers, test["id"])
    assert attempt["status"] == "in_progress"
    assert attempt["answers"] == []
    assert attempt["end_time"] is None

    response = await client.post(
        f"/api/v1/attempts/{attempt['id']}/submit",
        json={"answers": _answers(test["questions"])},
        headers=student_headers,
    )
    assert response.status_code == 200
    submitted = response.json()
    assert submitted["status"] == "completed"
    assert submitted["end_time"] is not None
    assert len(submitted["answers"]) == 4
    assert all(a["score"] is None for a in submitted["answers"])

    evaluator_llm.queue(
        {"score": 4, "confidence": 85, "feedback": "Mentions inertia."},
        {"score": 12, "confidence": 90, "feedback": "Clear example."},
    )
    fake_ocr.queue(OCRResult(text="Momentum before equals momentum after a collision.", confidence=70))

    response = await client.post(f"/api/v1/attempts/{attempt['id']}/evaluate", headers=teacher_headers)
    assert response.status_code == 200
    evaluated = response.json()

    assert evaluated["status"] == "evaluated"
    mcq, numerical, short, long_ = evaluated["answers"]

    assert mcq["score"] == 2
    assert mcq["is_correct"] is True
    assert mcq["ai_confidence"] == 100
    assert numerical["score"] == 3
    assert numerical["is_correct"] is True
    assert short["score"] == 4
    assert short["ai_feedback"] == "Mentions inertia."
    # model over-scored; clamped to the question's 10 marks
    assert long_["score"] == 10
    assert long_["ai_confidence"] == 70
    assert long_["ocr_text"] == "Momentum before equals momentum after a collision."

    assert evaluated["score"] == 19
    assert evaluated["score"] == sum(a["score"] for a in evaluated["answers"])

    response = await client.get(f"/api/v1/attempts/{attempt['id']}", headers=student_headers)
    assert response.status_code == 200
    assert response.json()["score"] == 19


@pytest.mark.asyncio
async def test_evaluation_survives_ai_failures(
    client: AsyncClient,
    teacher_headers,
    student_headers,
    sample_test_data,
    evaluator_llm,
    fake_ocr,
):
    test = await create_published_test(client, teacher_headers, sample_test_data)
    attempt = await _start(client, student_headers, test["id"])
    await client.post(
        f"/api/v1/attempts/{attempt['id']}/submit",
        json={"answers": _answers(test["questions"])},
        headers=student_headers,
    )

    evaluator_llm.queue(RuntimeError("upstream timeout"))
    fake_ocr.queue(OCRServiceError("engine unavailable"))

    response = await client.post(f"/api/v1/attempts/{attempt['id']}/evaluate", headers=teacher_headers)
    assert response.status_code == 200
    evaluated = response.json()

    assert evaluated["status"] == "evaluated"
    _, _, short, long_ = evaluated["answers"]
    assert short["score"] == 0
    assert short["ai_confidence"] == 0
    assert short["ai_feedback"] == AnswerEvaluator.FALLBACK_FEEDBACK
    assert long_["score"] == 0
    assert long_["ai_confidence"] == 0
    assert long_["ai_feedback"] == OCR_FAILURE_FEEDBACK
    assert evaluated["score"] == 5


@pytest.mark.asyncio
async def test_unanswered_questions_are_allowed(
    client: AsyncClient, teacher_headers, student_headers, sample_test_data
):
    test = await create_published_test(client, teacher_headers, sample_test_data)
    attempt = await _start(client, student_headers, test["id"])

    response = await client.post(
        f"/api/v1/attempts/{attempt['id']}/submit",
        json={"answers": [{"question_id": test["questions"][0]["id"], "selected_option": 0}]},
        headers=student_headers,
    )
    assert response.status_code == 200

    response = await client.post(f"/api/v1/attempts/{attempt['id']}/evaluate", headers=teacher_headers)
    assert response.status_code == 200
    evaluated = response.json()
    assert evaluated["score"] == 0
    assert evaluated["answers"][0]["is_correct"] is False


@pytest.mark.asyncio
async def test_start_requires_published_test(
    client: AsyncClient, teacher_headers, student_headers, sample_test_data
):
    draft = (await client.post("/api/v1/tests", json=sample_test_data, headers=teacher_headers)).json()

    response = await client.post("/api/v1/attempts", json={"test_id": draft["id"]}, headers=student_headers)
    assert response.status_code == 409

    response = await client.post("/api/v1/attempts", json={"test_id": 999}, headers=student_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_only_students_start_attempts(client: AsyncClient, teacher_headers, sample_test_data):
    test = await create_published_test(client, teacher_headers, sample_test_data)
    response = await client.post("/api/v1/attempts", json={"test_id": test["id"]}, headers=teacher_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_submit_transitions(client: AsyncClient, teacher_headers, student_headers, sample_test_data):
    test = await create_published_test(client, teacher_headers, sample_test_data)
    attempt = await _start(client, student_headers, test["id"])
    url = f"/api/v1/attempts/{attempt['id']}"

    # evaluation before submission
    response = await client.post(f"{url}/evaluate", headers=teacher_headers)
    assert response.status_code == 409

    other = await register_and_login(client, "other.student@school.org", class_name="10-A")
    response = await client.post(f"{url}/submit", json={"answers": []}, headers=other)
    assert response.status_code == 403

    response = await client.post(f"{url}/submit", json={"answers": []}, headers=student_headers)
    assert response.status_code == 200

    response = await client.post(f"{url}/submit", json={"answers": []}, headers=student_headers)
    assert response.status_code == 409

    # students cannot trigger evaluation
    response = await client.post(f"{url}/evaluate", headers=student_headers)
    assert response.status_code == 403

    response = await client.post(f"{url}/evaluate", headers=teacher_headers)
    assert response.status_code == 200

    response = await client.post(f"{url}/evaluate", headers=teacher_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_submit_validates_answer_shapes(
    client: AsyncClient, teacher_headers, student_headers, sample_test_data
):
    test = await create_published_test(client, teacher_headers, sample_test_data)
    mcq, numerical, _, _ = test["questions"]
    attempt = await _start(client, student_headers, test["id"])
    url = f"/api/v1/attempts/{attempt['id']}/submit"

    cases = [
        ([{"question_id": mcq["id"], "text": "Newton"}], 400),
        ([{"question_id": mcq["id"], "selected_option": 3}], 400),
        ([{"question_id": numerical["id"], "selected_option": 0}], 400),
        ([{"question_id": 999, "text": "6"}], 400),
        ([{"question_id": numerical["id"], "text": "6", "image_url": "https://cdn.test/x.jpg"}], 422),
        ([{"question_id": numerical["id"]}], 422),
        ([{"question_id": numerical["id"], "text": "6"}, {"question_id": numerical["id"], "text": "7"}], 422),
    ]
    for answers, expected in cases:
        response = await client.post(url, json={"answers": answers}, headers=student_headers)
        assert response.status_code == expected, answers

    # nothing was stored by the rejected submissions
    response = await client.get(f"/api/v1/attempts/{attempt['id']}", headers=student_headers)
    assert response.json()["status"] == "in_progress"
    assert response.json()["answers"] == []


@pytest.mark.asyncio
async def test_attempt_visibility(client: AsyncClient, teacher_headers, student_headers, sample_test_data):
    test = await create_published_test(client, teacher_headers, sample_test_data)
    attempt = await _start(client, student_headers, test["id"])

    other = await register_and_login(client, "other.student@school.org", class_name="10-A")
    response = await client.get(f"/api/v1/attempts/{attempt['id']}", headers=other)
    assert response.status_code == 403

    response = await client.get(f"/api/v1/attempts/{attempt['id']}", headers=teacher_headers)
    assert response.status_code == 200

    response = await client.get("/api/v1/attempts/999", headers=teacher_headers)
    assert response.status_code == 404
