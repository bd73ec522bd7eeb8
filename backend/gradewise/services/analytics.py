"""
Gradewise - Analytics Service
Weak/strong topic insights per student and class-level test performance
"""
import logging
from collections import OrderedDict
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gradewise.ai.performance_analyzer import PerformanceAnalyzer
from gradewise.ai.study_planner import StudyPlanner
from gradewise.core.config import settings
from gradewise.core.context import RequestContext
from gradewise.core.exceptions import InvalidStateError, NotFoundError, PermissionDeniedError
from gradewise.models.analytics import Analytics
from gradewise.models.attempt import Answer, AttemptStatus, TestAttempt
from gradewise.models.test import Question, Test
from gradewise.schemas.ai import AnswerResult, PerformanceAnalysis, StudentResult

logger = logging.getLogger(__name__)


def topic_of(question: Question) -> str:
    return question.topic or f"Question {question.order}"


def topic_breakdown(questions: list[Question], answers: list[Answer]) -> "OrderedDict[str, float]":
    """
    Ratio of marks earned per topic, over every question in the test.
    Unanswered questions count as zero.
    """
    scored = {a.question_id: (a.score or 0.0) for a in answers}
    earned: "OrderedDict[str, float]" = OrderedDict()
    possible: dict[str, float] = {}

    for question in sorted(questions, key=lambda q: q.order):
        topic = topic_of(question)
        earned[topic] = earned.get(topic, 0.0) + scored.get(question.id, 0.0)
        possible[topic] = possible.get(topic, 0.0) + question.marks

    return OrderedDict(
        (topic, earned[topic] / possible[topic] if possible[topic] else 0.0)
        for topic in earned
    )


def split_topics(breakdown: dict[str, float]) -> tuple[list[str], list[str]]:
    """Weak topics fall below WEAK_TOPIC_THRESHOLD, strong ones reach STRONG_TOPIC_THRESHOLD."""
    weak = [t for t, ratio in breakdown.items() if ratio < settings.WEAK_TOPIC_THRESHOLD]
    strong = [t for t, ratio in breakdown.items() if ratio >= settings.STRONG_TOPIC_THRESHOLD]
    return weak, strong


class AnalyticsService:
    """
    Service for deriving analytics from evaluated attempts.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def generate_for_attempt(
        self,
        ctx: RequestContext,
        attempt_id: int,
        planner: StudyPlanner,
    ) -> Analytics:
        """
        Derive weak/strong topics from an evaluated attempt and attach a study
        plan. Replaces any earlier analytics for the same student and test.
        """
        result = await self.db.execute(
            select(TestAttempt)
            .where(TestAttempt.id == attempt_id)
            .options(
                selectinload(TestAttempt.answers),
                selectinload(TestAttempt.test).selectinload(Test.questions),
            )
            .execution_options(populate_existing=True)
        )
        attempt = result.scalar_one_or_none()
        if not attempt:
            raise NotFoundError("Attempt not found")
        if attempt.student_id != ctx.user_id and not ctx.is_staff:
            raise PermissionDeniedError("Not allowed to generate analytics for this attempt")
        if attempt.status != AttemptStatus.EVALUATED.value:
            raise InvalidStateError("Analytics are only available for evaluated attempts")

        test = attempt.test
        weak, strong = split_topics(topic_breakdown(test.questions, attempt.answers))
        plan = await planner.generate_study_plan(weak, strong, test.subject)

        existing = await self.db.execute(
            select(Analytics).where(
                Analytics.user_id == attempt.student_id,
                Analytics.test_id == test.id,
            )
        )
        analytics = existing.scalar_one_or_none()
        if analytics is None:
            analytics = Analytics(user_id=attempt.student_id, test_id=test.id)
            self.db.add(analytics)

        analytics.weak_topics = weak
        analytics.strong_topics = strong
        analytics.recommended_resources = [r.model_dump(exclude_none=True) for r in plan.resources]
        analytics.study_plan = plan.plan
        analytics.insight_date = datetime.now(timezone.utc)

        await self.db.flush()
        await self.db.refresh(analytics)

        logger.info(
            "Analytics for user %s on test %s: %d weak, %d strong topics",
            attempt.student_id, test.id, len(weak), len(strong),
        )
        return analytics

    async def list_for_user(self, ctx: RequestContext, user_id: int) -> list[Analytics]:
        if user_id != ctx.user_id and not ctx.is_staff:
            raise PermissionDeniedError("Not allowed to view analytics for this user")

        result = await self.db.execute(
            select(Analytics)
            .where(Analytics.user_id == user_id)
            .order_by(Analytics.insight_date.desc())
        )
        return list(result.scalars().all())

    async def test_performance(
        self,
        ctx: RequestContext,
        test_id: int,
        analyzer: PerformanceAnalyzer,
    ) -> PerformanceAnalysis:
        """Aggregate every evaluated attempt on a test and ask for insights."""
        if not ctx.is_staff:
            raise PermissionDeniedError("Only staff can view test performance")

        test = await self.db.get(Test, test_id)
        if not test:
            raise NotFoundError("Test not found")

        result = await self.db.execute(
            select(TestAttempt)
            .where(
                TestAttempt.test_id == test_id,
                TestAttempt.status == AttemptStatus.EVALUATED.value,
            )
            .options(selectinload(TestAttempt.answers).selectinload(Answer.question))
            .order_by(TestAttempt.id)
            .execution_options(populate_existing=True)
        )
        attempts = result.scalars().all()

        results = [
            StudentResult(
                student_id=attempt.student_id,
                score=attempt.score or 0.0,
                answers=[
                    AnswerResult(
                        question_id=answer.question_id,
                        score=answer.score or 0.0,
                        question=answer.question.text,
                    )
                    for answer in attempt.answers
                ],
            )
            for attempt in attempts
        ]
        return await analyzer.analyze_test_performance(results)
