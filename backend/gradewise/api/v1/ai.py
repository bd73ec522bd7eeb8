"""
Gradewise - AI API
Direct access to the evaluation adapters and OCR
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from gradewise.ai.evaluator import AnswerEvaluator
from gradewise.ai.ocr import OCRService, OCRServiceError
from gradewise.ai.performance_analyzer import PerformanceAnalyzer
from gradewise.ai.study_planner import StudyPlanner
from gradewise.api.deps import (
    Context,
    StaffContext,
    get_answer_evaluator,
    get_ocr_service,
    get_performance_analyzer,
    get_study_planner,
)
from gradewise.schemas.ai import (
    AnalyzePerformanceRequest,
    EvaluateAnswerRequest,
    OCRRequest,
    OCRResult,
    PerformanceAnalysis,
    StudyPlan,
    StudyPlanRequest,
    SubjectiveEvaluation,
)

router = APIRouter(tags=["AI"])


@router.post("/ai/evaluate", response_model=SubjectiveEvaluation)
async def evaluate_answer(
    request: EvaluateAnswerRequest,
    ctx: StaffContext,
    evaluator: Annotated[AnswerEvaluator, Depends(get_answer_evaluator)],
):
    """Evaluate one free-text answer against a rubric."""
    return await evaluator.evaluate_subjective_answer(
        answer=request.answer,
        question=request.question,
        rubric=request.rubric,
        max_marks=request.max_marks,
    )


@router.post("/ai/study-plan", response_model=StudyPlan)
async def create_study_plan(
    request: StudyPlanRequest,
    ctx: Context,
    planner: Annotated[StudyPlanner, Depends(get_study_planner)],
):
    """Generate a study plan from weak and strong topics."""
    return await planner.generate_study_plan(
        weak_topics=request.weak_topics,
        strong_topics=request.strong_topics,
        subject=request.subject,
    )


@router.post("/ai/analyze-performance", response_model=PerformanceAnalysis)
async def analyze_performance(
    request: AnalyzePerformanceRequest,
    ctx: StaffContext,
    analyzer: Annotated[PerformanceAnalyzer, Depends(get_performance_analyzer)],
):
    """Summarize a set of student results."""
    return await analyzer.analyze_test_performance(request.results)


@router.post("/ocr", response_model=OCRResult)
async def process_ocr(
    request: OCRRequest,
    ctx: Context,
    ocr: Annotated[OCRService, Depends(get_ocr_service)],
):
    """Recognize the text in a scanned answer image."""
    try:
        return await ocr.process_image(request.image)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except OCRServiceError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
