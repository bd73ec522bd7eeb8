"""
Gradewise - Answer Evaluator
Rubric-guided LLM evaluation of subjective answers
"""
import json
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from gradewise.ai.core.llm import LLMClient
from gradewise.schemas.ai import SubjectiveEvaluation

logger = logging.getLogger(__name__)


class EvaluationError(Exception):
    """The model could not be reached or gave an unusable reply."""
    pass


class EvaluationReply(BaseModel):
    """Raw model reply. Range checks happen after parsing (clamping)."""
    model_config = ConfigDict(allow_inf_nan=False, extra="ignore")

    score: float = Field(strict=True)
    confidence: float = Field(strict=True)
    feedback: str = Field(strict=True)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class AnswerEvaluator:
    """Evaluate free-text answers against a question and rubric."""

    SYSTEM_PROMPT = """You are an expert teacher evaluating student answers.
Given the question, rubric, and student's answer, provide an evaluation with:
1. A score between 0 and {max_marks} (can be decimal)
2. A confidence level between 0 and 100 indicating how certain you are of your evaluation
3. Constructive feedback explaining the score

Respond with ONLY this JSON (no markdown):
{{"score": number, "confidence": number, "feedback": string}}"""

    USER_PROMPT = """Question: {question}
Rubric: {rubric}
Student Answer: {answer}"""

    FALLBACK_FEEDBACK = "Unable to evaluate answer due to system error. Please review manually."

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self._llm = llm_client

    @property
    def llm(self) -> LLMClient:
        """Lazy load the LLM client. Low temperature for consistent grading."""
        if self._llm is None:
            self._llm = LLMClient(temperature=0.3)
        return self._llm

    @classmethod
    def fallback(cls) -> SubjectiveEvaluation:
        return SubjectiveEvaluation(score=0, confidence=0, feedback=cls.FALLBACK_FEEDBACK)

    async def evaluate(
        self,
        answer: str,
        question: str,
        rubric: str,
        max_marks: float,
    ) -> SubjectiveEvaluation:
        """
        Evaluate one answer.

        The model's score is clamped into [0, max_marks] and its confidence
        into [0, 100].

        Raises:
            EvaluationError: On network failure, malformed JSON or a reply
                that does not match the expected schema.
        """
        max_marks = max(0.0, float(max_marks))

        try:
            data = await self.llm.generate_json(
                prompt=self.USER_PROMPT.format(
                    question=question,
                    rubric=rubric or "Use your best judgement as a subject teacher.",
                    answer=answer,
                ),
                system_prompt=self.SYSTEM_PROMPT.format(max_marks=max_marks),
                agent_name="AnswerEvaluator",
            )
            reply = EvaluationReply.model_validate(data)
        except (json.JSONDecodeError, SchemaError) as e:
            raise EvaluationError(f"Malformed evaluation reply: {e}") from e
        except Exception as e:
            raise EvaluationError(f"Evaluation request failed: {e}") from e

        return SubjectiveEvaluation(
            score=clamp(reply.score, 0.0, max_marks),
            confidence=clamp(reply.confidence, 0.0, 100.0),
            feedback=reply.feedback,
        )

    async def evaluate_subjective_answer(
        self,
        answer: str,
        question: str,
        rubric: str,
        max_marks: float,
    ) -> SubjectiveEvaluation:
        """
        Evaluate one answer, degrading to a zero-score result on any failure.
        """
        try:
            return await self.evaluate(answer, question, rubric, max_marks)
        except EvaluationError as e:
            logger.error("AI evaluation error: %s", e)
            return self.fallback()


# Singleton instance
answer_evaluator = AnswerEvaluator()
