"""
Gradewise - AI Schemas
Pydantic schemas for the OCR and AI evaluation operations
"""
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Subjective answer evaluation
# ============================================================================

class SubjectiveEvaluation(BaseModel):
    """Evaluation of one free-text answer. Always within range."""
    score: Annotated[float, Field(ge=0)]
    confidence: Annotated[float, Field(ge=0, le=100)]
    feedback: str


class EvaluateAnswerRequest(BaseModel):
    answer: str
    question: Annotated[str, Field(min_length=1)]
    rubric: str = ""
    max_marks: Annotated[float, Field(ge=0)]


# ============================================================================
# Study plans
# ============================================================================

class StudyResource(BaseModel):
    """A recommended study resource (video, article, practice, ...)."""
    title: str
    type: str
    url: Optional[str] = None


class StudyPlan(BaseModel):
    plan: str
    resources: list[StudyResource] = []


class StudyPlanRequest(BaseModel):
    weak_topics: list[str] = []
    strong_topics: list[str] = []
    subject: Annotated[str, Field(min_length=1)]


# ============================================================================
# Test performance
# ============================================================================

class AnswerResult(BaseModel):
    question_id: int
    score: float
    question: str


class StudentResult(BaseModel):
    """One student's outcome on a test, as fed to performance analysis."""
    student_id: int
    score: float
    answers: list[AnswerResult] = []


class HardQuestion(BaseModel):
    question_id: int
    question: str
    avg_score: float


class PerformanceAnalysis(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    average_score: float
    hardest_questions: Annotated[list[HardQuestion], Field(max_length=3)] = []
    recommendations: str


class AnalyzePerformanceRequest(BaseModel):
    results: list[StudentResult]


# ============================================================================
# OCR
# ============================================================================

class OCRRequest(BaseModel):
    """Image as a base64 string, a data URI, or an http(s) URL."""
    image: Annotated[str, Field(min_length=1)]


class OCRResult(BaseModel):
    text: str
    confidence: Annotated[float, Field(ge=0, le=100)]
