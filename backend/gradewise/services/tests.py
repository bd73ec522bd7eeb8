"""
Gradewise - Test Service
Authoring tests and questions, and moving tests through their lifecycle
"""
import logging

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
from gradewise.models.test import Question, Test, TestStatus
from gradewise.models.user import User
from gradewise.schemas.test import QuestionCreate, TestCreate

logger = logging.getLogger(__name__)


class TestService:
    """
    Service for test authoring.

    Tests move draft -> published -> completed and never back. Questions can
    only be added while a test is a draft.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_test(self, ctx: RequestContext, data: TestCreate) -> Test:
        """Create a draft test owned by the calling teacher."""
        if not ctx.is_staff:
            raise PermissionDeniedError("Only staff can create tests")

        test = Test(
            title=data.title,
            description=data.description,
            subject=data.subject,
            class_name=data.class_name,
            teacher_id=ctx.user_id,
            total_marks=data.total_marks,
            duration_minutes=data.duration_minutes,
            test_date=data.test_date,
            status=TestStatus.DRAFT.value,
        )
        test.questions = [self._build_question(q) for q in data.questions]

        self.db.add(test)
        await self.db.flush()

        logger.info("Test %s created by user %s with %d questions", test.id, ctx.user_id, len(data.questions))
        return await self._load(test.id)

    async def list_tests(self, ctx: RequestContext) -> list[Test]:
        """
        Tests visible to the caller.

        Teachers see their own tests, principals and admins see all, students
        see non-draft tests for their class.
        """
        query = select(Test).options(selectinload(Test.questions)).order_by(Test.test_date.desc())

        if ctx.role.value == "teacher":
            query = query.where(Test.teacher_id == ctx.user_id)
        elif not ctx.is_staff:
            query = query.where(Test.status != TestStatus.DRAFT.value)
            user = await self.db.get(User, ctx.user_id)
            if user is not None and user.class_name:
                query = query.where(Test.class_name == user.class_name)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_test(self, ctx: RequestContext, test_id: int) -> Test:
        test = await self._load(test_id)
        if not ctx.is_staff and test.status == TestStatus.DRAFT.value:
            raise NotFoundError("Test not found")
        return test

    async def add_question(self, ctx: RequestContext, test_id: int, data: QuestionCreate) -> Question:
        """Append a question to a draft test. Order must be unique within the test."""
        test = await self._load_owned(ctx, test_id)

        if test.status != TestStatus.DRAFT.value:
            raise InvalidStateError("Questions can only be added while the test is a draft")

        if any(q.order == data.order for q in test.questions):
            raise ValidationError(f"A question with order {data.order} already exists in this test")

        question = self._build_question(data)
        question.test_id = test.id
        self.db.add(question)
        await self.db.flush()
        await self.db.refresh(question)
        return question

    async def publish_test(self, ctx: RequestContext, test_id: int) -> Test:
        test = await self._load_owned(ctx, test_id)
        if not test.questions:
            raise ValidationError("Cannot publish a test without questions")
        return await self._advance(test, TestStatus.PUBLISHED)

    async def complete_test(self, ctx: RequestContext, test_id: int) -> Test:
        test = await self._load_owned(ctx, test_id)
        return await self._advance(test, TestStatus.COMPLETED)

    # --- Helpers ---

    async def _advance(self, test: Test, target: TestStatus) -> Test:
        """Move a test exactly one step forward."""
        current = test.test_status
        if target.rank != current.rank + 1:
            raise InvalidStateError(
                f"Cannot move test from '{current.value}' to '{target.value}'"
            )
        test.status = target.value
        await self.db.flush()
        logger.info("Test %s moved %s -> %s", test.id, current.value, target.value)
        return test

    async def _load(self, test_id: int) -> Test:
        result = await self.db.execute(
            select(Test)
            .where(Test.id == test_id)
            .options(selectinload(Test.questions))
            .execution_options(populate_existing=True)
        )
        test = result.scalar_one_or_none()
        if not test:
            raise NotFoundError("Test not found")
        return test

    async def _load_owned(self, ctx: RequestContext, test_id: int) -> Test:
        test = await self._load(test_id)
        if not ctx.is_staff:
            raise PermissionDeniedError("Only staff can modify tests")
        if test.teacher_id != ctx.user_id and not ctx.is_admin:
            raise PermissionDeniedError("Only the owning teacher can modify this test")
        return test

    @staticmethod
    def _build_question(data: QuestionCreate) -> Question:
        return Question(
            type=data.type.value,
            text=data.text,
            options=[opt.model_dump() for opt in data.options] if data.options else None,
            correct_answer=data.correct_answer,
            marks=data.marks,
            order=data.order,
            ai_rubric=data.ai_rubric,
            topic=data.topic,
            tolerance=data.tolerance,
        )
