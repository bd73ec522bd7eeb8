"""
Gradewise - Analytics Schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from gradewise.schemas.ai import StudyResource


class AnalyticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    test_id: int
    weak_topics: list[str] = []
    strong_topics: list[str] = []
    recommended_resources: list[StudyResource] = []
    study_plan: Optional[str] = None
    insight_date: datetime
