"""
Gradewise - Objective Scoring
Direct-comparison scoring for mcq and numerical questions. No I/O.
"""
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from gradewise.core.config import settings

if TYPE_CHECKING:
    from gradewise.models.attempt import Answer
    from gradewise.models.test import Question


@dataclass
class ObjectiveScore:
    """Outcome of scoring one objective answer."""
    is_correct: bool
    score: float


def parse_number(value) -> Optional[float]:
    """
    Normalize a typed numeric answer and parse it.

    Strips surrounding whitespace, inner spaces and thousands separators.
    Returns None for anything that is not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = str(value).strip().replace(",", "").replace(" ", "")
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def score_mcq(selected_option: Optional[int], correct_answer: Optional[str], marks: int) -> ObjectiveScore:
    """Correct iff the selected option index equals the stored correct index."""
    try:
        correct_index = int(str(correct_answer).strip())
    except (TypeError, ValueError):
        return ObjectiveScore(is_correct=False, score=0)

    if selected_option is None or isinstance(selected_option, bool):
        return ObjectiveScore(is_correct=False, score=0)

    is_correct = selected_option == correct_index
    return ObjectiveScore(is_correct=is_correct, score=marks if is_correct else 0)


def score_numerical(
    answer_text: Optional[str],
    correct_answer: Optional[str],
    marks: int,
    tolerance: Optional[float] = None,
) -> ObjectiveScore:
    """
    Correct iff |value - correct| <= tolerance.

    ``tolerance`` of None falls back to NUMERICAL_TOLERANCE, which defaults to
    exact match.
    """
    value = parse_number(answer_text)
    expected = parse_number(correct_answer)
    if value is None or expected is None:
        return ObjectiveScore(is_correct=False, score=0)

    if tolerance is None:
        tolerance = settings.NUMERICAL_TOLERANCE
    tolerance = max(0.0, tolerance)

    is_correct = abs(value - expected) <= tolerance
    return ObjectiveScore(is_correct=is_correct, score=marks if is_correct else 0)


def score_objective_answer(
    question: "Question",
    answer: "Answer",
    answer_text: Optional[str] = None,
) -> ObjectiveScore:
    """
    Score an answer bound to an mcq or numerical question.

    ``answer_text`` overrides ``answer.text`` (used when the text came from OCR).
    Question types that are not objective score as incorrect.
    """
    if question.type == "mcq":
        return score_mcq(answer.selected_option, question.correct_answer, question.marks)
    if question.type == "numerical":
        text = answer_text if answer_text is not None else answer.text
        return score_numerical(text, question.correct_answer, question.marks, question.tolerance)
    return ObjectiveScore(is_correct=False, score=0)
