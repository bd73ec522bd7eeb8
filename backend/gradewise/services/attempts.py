"""
Gradewise - Attempt Service
Attempt lifecycle: start, submit, evaluate.

    in_progress --submit--> completed --evaluate--> evaluated

No transition goes backwards. Evaluation is triggered separately from
submission and always finishes, even if individual answers fail to grade.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gradewise.core.context import RequestContext
from gradewise.core.exceptions import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from gradewise.models.attempt import Answer, AttemptStatus, TestAttempt
from gradewise.models.test import Question, QuestionType, Test, TestStatus
from gradewise.schemas.attempt import AnswerSubmit, AttemptSubmitRequest
from gradewise.services.grading import GradingPipeline

logger = logging.getLogger(__name__)


class AttemptService:
    """Service for test attempts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def start_attempt(self, ctx: RequestContext, test_id: int) -> TestAttempt:
        """Open a new in-progress attempt on a published test."""
        if not ctx.is_student:
            raise PermissionDeniedError("Only students can attempt tests")

        test = await self.db.get(Test, test_id)
        if not test:
            raise NotFoundError("Test not found")
        if test.status != TestStatus.PUBLISHED.value:
            raise InvalidStateError("Test is not open for attempts")

        attempt = TestAttempt(
            test_id=test.id,
            student_id=ctx.user_id,
            status=AttemptStatus.IN_PROGRESS.value,
        )
        self.db.add(attempt)
        await self.db.flush()

        logger.info("Attempt %s started on test %s by student %s", attempt.id, test.id, ctx.user_id)
        return await self._load(attempt.id)

    async def submit_attempt(
        self,
        ctx: RequestContext,
        attempt_id: int,
        data: AttemptSubmitRequest,
    ) -> TestAttempt:
        """Persist the answers and close the attempt."""
        attempt = await self._load(attempt_id)

        if attempt.student_id != ctx.user_id:
            raise PermissionDeniedError("Only the student who started the attempt can submit it")
        if attempt.status != AttemptStatus.IN_PROGRESS.value:
            raise InvalidStateError(f"Attempt is already {attempt.status}")

        result = await self.db.execute(
            select(Question).where(Question.test_id == attempt.test_id)
        )
        questions = {q.id: q for q in result.scalars().all()}

        for item in data.answers:
            question = questions.get(item.question_id)
            if question is None:
                raise ValidationError(f"Question {item.question_id} does not belong to this test")
            self._check_answer_shape(question, item)

        for item in data.answers:
            attempt.answers.append(Answer(
                question_id=item.question_id,
                text=item.text,
                selected_option=item.selected_option,
                image_url=item.image_url,
            ))

        attempt.end_time = datetime.now(timezone.utc)
        attempt.status = AttemptStatus.COMPLETED.value
        await self.db.flush()

        logger.info("Attempt %s submitted with %d answers", attempt.id, len(data.answers))
        return await self._load(attempt.id)

    async def evaluate_attempt(
        self,
        ctx: RequestContext,
        attempt_id: int,
        pipeline: GradingPipeline,
    ) -> TestAttempt:
        """
        Grade every answer and finalize the attempt score.

        Objective answers are compared directly; subjective and scanned ones
        go through OCR and the AI evaluator. An answer whose grading fails
        scores 0 with confidence 0; the attempt is still finalized.
        """
        if not ctx.is_staff:
            raise PermissionDeniedError("Only staff can trigger evaluation")

        attempt = await self._load(attempt_id)
        if attempt.status != AttemptStatus.COMPLETED.value:
            raise InvalidStateError(
                f"Only completed attempts can be evaluated (attempt is {attempt.status})"
            )

        attempt_grade = await pipeline.grade_attempt(attempt.answers)

        answers_by_id = {a.id: a for a in attempt.answers}
        for grade in attempt_grade.grades:
            answer = answers_by_id[grade.answer_id]
            answer.score = grade.score
            answer.ai_confidence = grade.ai_confidence
            answer.ai_feedback = grade.ai_feedback
            answer.is_correct = grade.is_correct
            if grade.ocr_text is not None:
                answer.ocr_text = grade.ocr_text

        attempt.score = attempt_grade.total_score
        attempt.status = AttemptStatus.EVALUATED.value
        await self.db.flush()

        if attempt_grade.failed_answers:
            logger.warning(
                "Attempt %s evaluated with %d answers needing manual review: %s",
                attempt.id,
                len(attempt_grade.failed_answers),
                attempt_grade.failed_answers,
            )
        logger.info("Attempt %s evaluated, score %.2f", attempt.id, attempt.score)
        return await self._load(attempt.id)

    async def get_attempt(self, ctx: RequestContext, attempt_id: int) -> TestAttempt:
        attempt = await self._load(attempt_id)
        if attempt.student_id != ctx.user_id and not ctx.is_staff:
            raise PermissionDeniedError("Not allowed to view this attempt")
        return attempt

    # --- Helpers ---

    @staticmethod
    def _check_answer_shape(question: Question, item: AnswerSubmit) -> None:
        """The answer's input field must match the question type."""
        if question.type == QuestionType.MCQ.value:
            if item.selected_option is None:
                raise ValidationError(f"Question {question.id} is multiple choice; select an option")
            if item.selected_option >= len(question.options or []):
                raise ValidationError(f"Option {item.selected_option} does not exist for question {question.id}")
        elif item.selected_option is not None:
            raise ValidationError(f"Question {question.id} is {question.type}; answer with text or an image")

    async def _load(self, attempt_id: int) -> TestAttempt:
        result = await self.db.execute(
            select(TestAttempt)
            .where(TestAttempt.id == attempt_id)
            .options(
                selectinload(TestAttempt.answers).selectinload(Answer.question),
                selectinload(TestAttempt.test),
            )
            .execution_options(populate_existing=True)
        )
        attempt = result.scalar_one_or_none()
        if not attempt:
            raise NotFoundError("Attempt not found")
        return attempt
