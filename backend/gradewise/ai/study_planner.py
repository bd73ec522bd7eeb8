"""
Gradewise - Study Planner
Personalized study plans from a student's weak and strong topics
"""
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from gradewise.ai.core.llm import LLMClient
from gradewise.schemas.ai import StudyPlan, StudyResource

logger = logging.getLogger(__name__)


class ResourceReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(strict=True, min_length=1)
    type: str = Field(strict=True, min_length=1)
    url: Optional[str] = Field(default=None, strict=True)


class StudyPlanReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    plan: str = Field(strict=True, min_length=1)
    resources: list[ResourceReply]


class StudyPlanner:
    """Generate a study plan focused on weak topics, with resources."""

    SYSTEM_PROMPT = """Generate a personalized study plan focused on improving weak topics, along with recommended resources.
Return a JSON object with two fields:
1. "plan": a structured study plan with bullet points and time estimates
2. "resources": an array of recommended resources, each with "title", "type" (video, article, practice), and optional "url"

Keep the response concise and focused on actionable advice."""

    USER_PROMPT = """Subject: {subject}
Weak Topics: {weak_topics}
Strong Topics: {strong_topics}"""

    FALLBACK_PLAN = (
        "Study plan generation failed. Please focus on reviewing the weak topics "
        "identified in your assessment."
    )

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self._llm = llm_client

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            self._llm = LLMClient(temperature=0.7)
        return self._llm

    @classmethod
    def fallback(cls) -> StudyPlan:
        return StudyPlan(
            plan=cls.FALLBACK_PLAN,
            resources=[StudyResource(title="General review resources", type="general")],
        )

    async def generate_study_plan(
        self,
        weak_topics: list[str],
        strong_topics: list[str],
        subject: str,
    ) -> StudyPlan:
        """
        Generate a study plan.

        Returns a generic plan with one placeholder resource if the model
        call fails or its reply does not match the schema.
        """
        try:
            data = await self.llm.generate_json(
                prompt=self.USER_PROMPT.format(
                    subject=subject,
                    weak_topics=", ".join(weak_topics) or "None identified",
                    strong_topics=", ".join(strong_topics) or "None identified",
                ),
                system_prompt=self.SYSTEM_PROMPT,
                agent_name="StudyPlanner",
            )
            reply = StudyPlanReply.model_validate(data)
        except Exception as e:
            logger.error("Study plan generation error: %s", e)
            return self.fallback()

        return StudyPlan(
            plan=reply.plan,
            resources=[StudyResource(**r.model_dump()) for r in reply.resources],
        )


# Singleton instance
study_planner = StudyPlanner()
