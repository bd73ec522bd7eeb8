"""
Gradewise - Grading Pipeline
Per-answer pipeline of typed stages: classify, OCR, objective scoring or AI
evaluation. Each stage returns a StageResult; grade_answer folds the stage
results into an AnswerGrade and never raises for a single answer.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from gradewise.ai.core.telemetry import stage_span
from gradewise.ai.evaluator import AnswerEvaluator, EvaluationError
from gradewise.ai.ocr import OCRService
from gradewise.models.test import QuestionType
from gradewise.schemas.ai import OCRResult, SubjectiveEvaluation
from gradewise.services.scoring import ObjectiveScore, score_objective_answer

if TYPE_CHECKING:
    from gradewise.models.attempt import Answer
    from gradewise.models.test import Question

logger = logging.getLogger(__name__)

T = TypeVar("T")

OBJECTIVE_CONFIDENCE = 100.0
OCR_FAILURE_FEEDBACK = "Unable to read the scanned answer due to system error. Please review manually."
BLANK_ANSWER_FEEDBACK = "No answer provided."


@dataclass
class StageResult(Generic[T]):
    """Result-or-error value returned by every pipeline stage."""
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "StageResult[T]":
        return cls(error=error)


class AnswerKind(str, Enum):
    OBJECTIVE = "objective"    # mcq, or numerical typed as text
    SUBJECTIVE = "subjective"  # short/long typed as text
    SCANNED = "scanned"        # any image answer: OCR, then AI evaluation


@dataclass
class AnswerGrade:
    """Everything evaluation writes back onto one Answer row."""
    answer_id: int
    score: float
    ai_confidence: float
    ai_feedback: Optional[str] = None
    is_correct: Optional[bool] = None
    ocr_text: Optional[str] = None
    failed: bool = False


@dataclass
class AttemptGrade:
    grades: list[AnswerGrade] = field(default_factory=list)

    @property
    def total_score(self) -> float:
        return sum(g.score for g in self.grades)

    @property
    def failed_answers(self) -> list[int]:
        return [g.answer_id for g in self.grades if g.failed]


def classify(question: "Question", answer: "Answer") -> AnswerKind:
    if answer.image_url:
        return AnswerKind.SCANNED
    if QuestionType(question.type).is_objective:
        return AnswerKind.OBJECTIVE
    return AnswerKind.SUBJECTIVE


def rubric_for(question: "Question") -> str:
    if question.ai_rubric:
        return question.ai_rubric
    if question.type == "numerical" and question.correct_answer is not None:
        return f"Expected answer: {question.correct_answer}. Award full marks only for this value."
    return ""


class GradingPipeline:
    """Grades the answers of one attempt, sequentially."""

    def __init__(self, evaluator: AnswerEvaluator, ocr: OCRService):
        self.evaluator = evaluator
        self.ocr = ocr

    # --- Stages ---

    async def ocr_stage(self, answer: "Answer") -> StageResult[OCRResult]:
        try:
            return StageResult.success(await self.ocr.process_image(answer.image_url))
        except Exception as e:
            return StageResult.failure(str(e) or type(e).__name__)

    def objective_stage(self, question: "Question", answer: "Answer") -> StageResult[ObjectiveScore]:
        return StageResult.success(score_objective_answer(question, answer))

    async def evaluation_stage(
        self,
        question: "Question",
        text: str,
    ) -> StageResult[SubjectiveEvaluation]:
        try:
            evaluation = await self.evaluator.evaluate(
                answer=text,
                question=question.text,
                rubric=rubric_for(question),
                max_marks=question.marks,
            )
        except EvaluationError as e:
            return StageResult.failure(str(e))
        return StageResult.success(evaluation)

    # --- Fold ---

    async def grade_answer(self, question: "Question", answer: "Answer") -> AnswerGrade:
        """Run the stages for one answer and fold them into a grade."""
        kind = classify(question, answer)

        with stage_span("grading.answer", {"answer.id": answer.id, "answer.kind": kind.value}) as span:
            if kind == AnswerKind.OBJECTIVE:
                result = self.objective_stage(question, answer).value
                span.set_attribute("grading.score", result.score)
                return AnswerGrade(
                    answer_id=answer.id,
                    score=result.score,
                    ai_confidence=OBJECTIVE_CONFIDENCE,
                    is_correct=result.is_correct,
                )

            ocr_text = None
            ocr_confidence = OBJECTIVE_CONFIDENCE
            text = answer.text or ""

            if kind == AnswerKind.SCANNED:
                recognized = await self.ocr_stage(answer)
                if not recognized.ok:
                    logger.warning("OCR failed for answer %s: %s", answer.id, recognized.error)
                    span.set_attribute("grading.failed_stage", "ocr")
                    return AnswerGrade(
                        answer_id=answer.id,
                        score=0,
                        ai_confidence=0,
                        ai_feedback=OCR_FAILURE_FEEDBACK,
                        failed=True,
                    )
                ocr_text = recognized.value.text
                ocr_confidence = recognized.value.confidence
                text = ocr_text

            if not text.strip():
                return AnswerGrade(
                    answer_id=answer.id,
                    score=0,
                    ai_confidence=ocr_confidence,
                    ai_feedback=BLANK_ANSWER_FEEDBACK,
                    ocr_text=ocr_text,
                )

            evaluated = await self.evaluation_stage(question, text)
            if not evaluated.ok:
                logger.warning("AI evaluation failed for answer %s: %s", answer.id, evaluated.error)
                span.set_attribute("grading.failed_stage", "evaluation")
                fallback = AnswerEvaluator.fallback()
                return AnswerGrade(
                    answer_id=answer.id,
                    score=fallback.score,
                    ai_confidence=fallback.confidence,
                    ai_feedback=fallback.feedback,
                    ocr_text=ocr_text,
                    failed=True,
                )

            evaluation = evaluated.value
            span.set_attribute("grading.score", evaluation.score)
            return AnswerGrade(
                answer_id=answer.id,
                score=min(evaluation.score, question.marks),
                ai_confidence=min(evaluation.confidence, ocr_confidence),
                ai_feedback=evaluation.feedback,
                ocr_text=ocr_text,
            )

    async def grade_attempt(self, answers: list["Answer"]) -> AttemptGrade:
        """Grade every answer; a failure in one never stops the others."""
        attempt_grade = AttemptGrade()
        for answer in answers:
            attempt_grade.grades.append(await self.grade_answer(answer.question, answer))
        return attempt_grade
