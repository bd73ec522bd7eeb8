"""
Gradewise - Attempt Models
A student's run through a test and the answers given in it
"""
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
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
    from gradewise.models.test import Question, Test
    from gradewise.models.user import User


class AttemptStatus(str, Enum):
    """Attempt lifecycle: in_progress -> completed -> evaluated."""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    EVALUATED = "evaluated"


class TestAttempt(Base):
    """One student's single run through a test."""

    __tablename__ = "test_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    test_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tests.id", ondelete="CASCADE"),
        index=True
    )
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        index=True
    )

    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Sum of answer scores, set on evaluation
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=AttemptStatus.IN_PROGRESS.value)

    # Relationships
    test: Mapped["Test"] = relationship("Test")
    student: Mapped["User"] = relationship("User")
    answers: Mapped[list["Answer"]] = relationship(
        "Answer",
        back_populates="attempt",
        order_by="Answer.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<TestAttempt {self.id} test={self.test_id} status={self.status} score={self.score}>"


class Answer(Base):
    """
    A student's answer to one question.

    Exactly one of ``selected_option`` (mcq), ``text`` (typed) or
    ``image_url`` (scanned handwriting) is the authoritative input.
    """

    __tablename__ = "answers"
    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_answer_attempt_question"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    attempt_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("test_attempts.id", ondelete="CASCADE"),
        index=True
    )
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("questions.id", ondelete="CASCADE"),
        index=True
    )

    # Inputs
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    selected_option: Mapped[int | None] = mapped_column(Integer, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Evaluation output
    ocr_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    ai_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)  # 0-100
    ai_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_correct: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    attempt: Mapped["TestAttempt"] = relationship("TestAttempt", back_populates="answers")
    question: Mapped["Question"] = relationship("Question")

    def __repr__(self):
        return f"<Answer {self.id} attempt={self.attempt_id} question={self.question_id} score={self.score}>"
