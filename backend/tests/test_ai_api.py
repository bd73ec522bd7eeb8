"""
Gradewise - AI and OCR API Tests
"""
import pytest
from httpx import AsyncClient

from gradewise.ai.evaluator import AnswerEvaluator
from gradewise.ai.ocr import OCRServiceError
from gradewise.schemas.ai import OCRResult


@pytest.mark.asyncio
async def test_evaluate_endpoint(client: AsyncClient, teacher_headers, evaluator_llm):
    evaluator_llm.queue({"score": 6.5, "confidence": 140, "feedback": "Solid answer."})

    response = await client.post(
        "/api/v1/ai/evaluate",
        json={
            "answer": "Light bends when it enters a denser medium.",
            "question": "What is refraction?",
            "rubric": "Definition plus cause.",
            "max_marks": 5,
        },
        headers=teacher_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"score": 5.0, "confidence": 100.0, "feedback": "Solid answer."}


@pytest.mark.asyncio
async def test_evaluate_endpoint_fallback(client: AsyncClient, teacher_headers, evaluator_llm):
    evaluator_llm.queue("[1, 2, 3]")

    response = await client.post(
        "/api/v1/ai/evaluate",
        json={"answer": "x", "question": "What is refraction?", "max_marks": 5},
        headers=teacher_headers,
    )
    assert response.status_code == 200
    assert response.json()["feedback"] == AnswerEvaluator.FALLBACK_FEEDBACK


@pytest.mark.asyncio
async def test_evaluate_endpoint_is_staff_only(client: AsyncClient, student_headers):
    response = await client.post(
        "/api/v1/ai/evaluate",
        json={"answer": "x", "question": "q", "max_marks": 5},
        headers=student_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_study_plan_endpoint(client: AsyncClient, student_headers, planner_llm):
    planner_llm.queue({"plan": "Revise optics.", "resources": []})

    response = await client.post(
        "/api/v1/ai/study-plan",
        json={"weak_topics": ["Optics"], "strong_topics": [], "subject": "Physics"},
        headers=student_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"plan": "Revise optics.", "resources": []}


@pytest.mark.asyncio
async def test_analyze_performance_endpoint(client: AsyncClient, teacher_headers, analyzer_llm):
    analyzer_llm.queue(ValueError("Expected a JSON object, got list"))

    response = await client.post(
        "/api/v1/ai/analyze-performance",
        json={"results": [
            {"student_id": 1, "score": 10, "answers": []},
            {"student_id": 2, "score": 20, "answers": []},
        ]},
        headers=teacher_headers,
    )
    assert response.status_code == 200
    assert response.json()["average_score"] == 15


@pytest.mark.asyncio
async def test_ocr_endpoint(client: AsyncClient, student_headers, fake_ocr):
    fake_ocr.queue(OCRResult(text="E = mc^2", confidence=92))

    response = await client.post("/api/v1/ocr", json={"image": "iVBORw0KGgo="}, headers=student_headers)
    assert response.status_code == 200
    assert response.json() == {"text": "E = mc^2", "confidence": 92.0}


@pytest.mark.asyncio
async def test_ocr_endpoint_unavailable(client: AsyncClient, student_headers, fake_ocr):
    fake_ocr.queue(OCRServiceError("Failed to process image with OCR"))

    response = await client.post("/api/v1/ocr", json={"image": "iVBORw0KGgo="}, headers=student_headers)
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_ocr_endpoint_rejects_empty_image(client: AsyncClient, student_headers):
    response = await client.post("/api/v1/ocr", json={"image": ""}, headers=student_headers)
    assert response.status_code == 422
