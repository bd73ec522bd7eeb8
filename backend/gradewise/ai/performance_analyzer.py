"""
Gradewise - Performance Analyzer
Class-level insights over all students' results on one test
"""
import json
import logging
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from gradewise.ai.core.llm import LLMClient
from gradewise.schemas.ai import HardQuestion, PerformanceAnalysis, StudentResult

logger = logging.getLogger(__name__)

MAX_HARDEST_QUESTIONS = 3


class HardQuestionReply(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    question_id: int = Field(strict=True, validation_alias=AliasChoices("question_id", "questionId"))
    question: str = Field(strict=True)
    avg_score: float = Field(strict=True, validation_alias=AliasChoices("avg_score", "avgScore"))


class PerformanceReply(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    average_score: float = Field(strict=True, validation_alias=AliasChoices("average_score", "averageScore"))
    hardest_questions: list[HardQuestionReply] = Field(
        validation_alias=AliasChoices("hardest_questions", "hardestQuestions"),
    )
    recommendations: str = Field(strict=True)


def mean_score(results: list[StudentResult]) -> float:
    """Arithmetic mean of student scores; 0 for no results."""
    if not results:
        return 0.0
    return sum(r.score for r in results) / len(results)


class PerformanceAnalyzer:
    """Analyze test performance data and provide teaching insights."""

    SYSTEM_PROMPT = """Analyze test performance data and provide insights.
Return a JSON object with:
1. "average_score": the calculated average score
2. "hardest_questions": an array of questions with lowest average scores (max 3), each with "question_id", "question" and "avg_score"
3. "recommendations": teaching recommendations based on the results"""

    FALLBACK_RECOMMENDATIONS = "Performance analysis failed. Please review individual student results."

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self._llm = llm_client

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            self._llm = LLMClient(temperature=0.3)
        return self._llm

    @classmethod
    def fallback(cls, results: list[StudentResult]) -> PerformanceAnalysis:
        return PerformanceAnalysis(
            average_score=mean_score(results),
            hardest_questions=[],
            recommendations=cls.FALLBACK_RECOMMENDATIONS,
        )

    async def analyze_test_performance(self, results: list[StudentResult]) -> PerformanceAnalysis:
        """
        Summarize a test's results.

        On failure the average is computed locally; hardest questions are left
        empty and a generic recommendation is returned.
        """
        payload = json.dumps([r.model_dump() for r in results])
        try:
            data = await self.llm.generate_json(
                prompt=f"Test Data: {payload}",
                system_prompt=self.SYSTEM_PROMPT,
                agent_name="PerformanceAnalyzer",
            )
            reply = PerformanceReply.model_validate(data)
        except Exception as e:
            logger.error("Test analysis error: %s", e)
            return self.fallback(results)

        return PerformanceAnalysis(
            average_score=reply.average_score,
            hardest_questions=[
                HardQuestion(**q.model_dump())
                for q in reply.hardest_questions[:MAX_HARDEST_QUESTIONS]
            ],
            recommendations=reply.recommendations,
        )


# Singleton instance
performance_analyzer = PerformanceAnalyzer()
