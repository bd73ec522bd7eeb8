"""
Gradewise - Test Models
Teacher-authored tests and their questions
"""
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gradewise.core.database import Base

if TYPE_CHECKING:
    from gradewise.models.user import User


class TestStatus(str, Enum):
    """Test lifecycle. Transitions only move forward."""
    DRAFT = "draft"
    PUBLISHED = "published"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [TestStatus.DRAFT, TestStatus.PUBLISHED, TestStatus.COMPLETED]


class QuestionType(str, Enum):
    MCQ = "mcq"
    SHORT = "short"
    LONG = "long"
    NUMERICAL = "numerical"

    @property
    def is_objective(self) -> bool:
        return self in (QuestionType.MCQ, QuestionType.NUMERICAL)


class Test(Base):
    """A test created by a teacher for one class and subject."""

    __tablename__ = "tests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    subject: Mapped[str] = mapped_column(String(100))
    class_name: Mapped[str] = mapped_column(String(100))
    teacher_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        index=True
    )

    total_marks: Mapped[int] = mapped_column(Integer, default=100)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=60)
    test_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(String(20), default=TestStatus.DRAFT.value)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    # Relationships
    teacher: Mapped["User"] = relationship("User")
    questions: Mapped[list["Question"]] = relationship(
        "Question",
        back_populates="test",
        cascade="all, delete-orphan",
        order_by="Question.order",
    )

    @property
    def test_status(self) -> TestStatus:
        return TestStatus(self.status)

    @property
    def question_types(self) -> list[str]:
        """Distinct question types included, in first-seen order."""
        seen: list[str] = []
        for q in self.questions:
            if q.type not in seen:
                seen.append(q.type)
        return seen

    def __repr__(self):
        return f"<Test {self.id} '{self.title}' status={self.status}>"


class Question(Base):
    """
    A question within a test.

    For MCQs, ``options`` is a list of ``{"text", "is_correct"}`` objects and
    ``correct_answer`` holds the index of the correct option as a string.
    For numerical questions ``correct_answer`` holds the expected value.
    """

    __tablename__ = "questions"
    __table_args__ = (
        UniqueConstraint("test_id", "order", name="uq_question_test_order"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    test_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tests.id", ondelete="CASCADE"),
        index=True
    )
    type: Mapped[str] = mapped_column(String(20))
    text: Mapped[str] = mapped_column(Text)
    options: Mapped[list | None] = mapped_column(JSON, nullable=True)
    correct_answer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    marks: Mapped[int] = mapped_column(Integer, default=1)
    order: Mapped[int] = mapped_column(Integer)

    # Guidelines for AI evaluation of subjective answers
    ai_rubric: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Analytics grouping
    topic: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Numerical questions only; None means the configured default
    tolerance: Mapped[float | None] = mapped_column(Float, nullable=True)

    test: Mapped["Test"] = relationship("Test", back_populates="questions")

    def __repr__(self):
        return f"<Question {self.id} test={self.test_id} type={self.type} order={self.order}>"
