"""
Gradewise - Attempt Schemas
Pydantic schemas for starting, submitting and reviewing test attempts
"""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gradewise.models.attempt import AttemptStatus


class AttemptStartRequest(BaseModel):
    test_id: int


class AnswerSubmit(BaseModel):
    """
    A single answer. Exactly one of ``selected_option`` (mcq), ``text``
    (typed) or ``image_url`` (scanned handwriting) must be given.
    """
    question_id: int
    text: Optional[str] = None
    selected_option: Annotated[int, Field(ge=0)] | None = None
    image_url: Annotated[str, Field(min_length=1)] | None = None

    @model_validator(mode="after")
    def check_single_input(self) -> "AnswerSubmit":
        provided = [
            name for name in ("text", "selected_option", "image_url")
            if getattr(self, name) is not None
        ]
        if len(provided) != 1:
            raise ValueError(
                "Exactly one of text, selected_option or image_url must be provided"
            )
        return self


class AttemptSubmitRequest(BaseModel):
    answers: list[AnswerSubmit]

    @model_validator(mode="after")
    def check_unique_questions(self) -> "AttemptSubmitRequest":
        ids = [a.question_id for a in self.answers]
        if len(ids) != len(set(ids)):
            raise ValueError("Each question can be answered at most once")
        return self


class AnswerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question_id: int
    text: Optional[str] = None
    selected_option: Optional[int] = None
    image_url: Optional[str] = None
    ocr_text: Optional[str] = None
    score: Optional[float] = None
    ai_confidence: Optional[float] = None
    ai_feedback: Optional[str] = None
    is_correct: Optional[bool] = None


class AttemptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    test_id: int
    student_id: int
    status: AttemptStatus
    score: Optional[float] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    answers: list[AnswerResponse] = []
