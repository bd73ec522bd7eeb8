"""
Gradewise - Test Schemas
Pydantic schemas for test and question authoring
"""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gradewise.models.test import QuestionType, TestStatus
from gradewise.services.scoring import parse_number


class McqOption(BaseModel):
    """A single multiple-choice option."""
    text: Annotated[str, Field(min_length=1)]
    is_correct: bool = False


class QuestionCreate(BaseModel):
    """
    A question to add to a draft test.

    MCQs need at least two options with exactly one marked correct; the
    correct answer is stored as that option's index. Numerical questions
    need a numeric ``correct_answer``.
    """
    type: QuestionType
    text: Annotated[str, Field(min_length=1)]
    options: Optional[list[McqOption]] = None
    correct_answer: Optional[str] = None
    marks: Annotated[int, Field(ge=1)] = 1
    order: Annotated[int, Field(ge=0)]
    ai_rubric: Optional[str] = None
    topic: Optional[str] = None
    tolerance: Annotated[float, Field(ge=0)] | None = None

    @model_validator(mode="after")
    def check_shape(self) -> "QuestionCreate":
        if self.type == QuestionType.MCQ:
            if not self.options or len(self.options) < 2:
                raise ValueError("MCQ questions must have at least 2 options")
            if any(not opt.text.strip() for opt in self.options):
                raise ValueError("All options must have text")
            correct = [i for i, opt in enumerate(self.options) if opt.is_correct]
            if len(correct) != 1:
                raise ValueError("MCQ questions must have exactly one correct option")
            self.correct_answer = str(correct[0])
        elif self.options:
            raise ValueError(f"Options are only allowed for mcq questions, not {self.type.value}")

        if self.type == QuestionType.NUMERICAL:
            if self.correct_answer is None or parse_number(self.correct_answer) is None:
                raise ValueError("Numerical questions require a numeric correct_answer")
        elif self.tolerance is not None:
            raise ValueError("Tolerance is only allowed for numerical questions")
        return self


class QuestionResponse(BaseModel):
    """Question as seen by staff, including the answer key."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    test_id: int
    type: QuestionType
    text: str
    options: Optional[list[McqOption]] = None
    correct_answer: Optional[str] = None
    marks: int
    order: int
    ai_rubric: Optional[str] = None
    topic: Optional[str] = None
    tolerance: Optional[float] = None


class QuestionPublic(BaseModel):
    """Question as shown to a student taking the test."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: QuestionType
    text: str
    options: list[str] = []
    marks: int
    order: int

    @model_validator(mode="before")
    @classmethod
    def strip_answer_key(cls, data):
        options = getattr(data, "options", None)
        if options is None and isinstance(data, dict):
            options = data.get("options")
        texts = [opt["text"] if isinstance(opt, dict) else opt for opt in options or []]
        if isinstance(data, dict):
            return {**data, "options": texts}
        return {
            "id": data.id,
            "type": data.type,
            "text": data.text,
            "options": texts,
            "marks": data.marks,
            "order": data.order,
        }


class TestCreate(BaseModel):
    """Request to create a draft test, optionally with its questions."""

    title: Annotated[str, Field(min_length=1, max_length=200)]
    description: Optional[str] = None
    subject: Annotated[str, Field(min_length=1, max_length=100)]
    class_name: Annotated[str, Field(min_length=1, max_length=100)]
    total_marks: Annotated[int, Field(ge=1)] = 100
    duration_minutes: Annotated[int, Field(ge=1)] = 60
    test_date: datetime
    questions: list[QuestionCreate] = []

    @model_validator(mode="after")
    def check_unique_order(self) -> "TestCreate":
        orders = [q.order for q in self.questions]
        if len(orders) != len(set(orders)):
            raise ValueError("Question order must be unique within a test")
        return self


class TestResponse(BaseModel):
    """Test summary."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    subject: str
    class_name: str
    teacher_id: int
    total_marks: int
    duration_minutes: int
    test_date: datetime
    status: TestStatus
    created_at: datetime
    question_types: list[QuestionType] = []


class TestDetailResponse(TestResponse):
    """Test with its full question list (staff view)."""
    questions: list[QuestionResponse] = []


class TestStudentView(TestResponse):
    """Test with questions stripped of answer keys (student view)."""
    questions: list[QuestionPublic] = []
