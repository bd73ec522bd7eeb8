"""
Gradewise - Analytics API
Student insights and class-level test performance
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from gradewise.ai.performance_analyzer import PerformanceAnalyzer
from gradewise.ai.study_planner import StudyPlanner
from gradewise.api.deps import (
    Context,
    DbSession,
    StaffContext,
    get_performance_analyzer,
    get_study_planner,
    to_http_error,
)
from gradewise.core.exceptions import ServiceError
from gradewise.schemas.ai import PerformanceAnalysis
from gradewise.schemas.analytics import AnalyticsResponse
from gradewise.services.analytics import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.post("/attempts/{attempt_id}", response_model=AnalyticsResponse)
async def generate_attempt_analytics(
    attempt_id: int,
    ctx: Context,
    db: DbSession,
    planner: Annotated[StudyPlanner, Depends(get_study_planner)],
):
    """Derive weak/strong topics and a study plan from an evaluated attempt."""
    try:
        analytics = await AnalyticsService(db).generate_for_attempt(ctx, attempt_id, planner)
    except ServiceError as e:
        raise to_http_error(e)
    return AnalyticsResponse.model_validate(analytics)


@router.get("/users/{user_id}", response_model=list[AnalyticsResponse])
async def list_user_analytics(user_id: int, ctx: Context, db: DbSession):
    """All analytics rows for a user, newest first."""
    try:
        rows = await AnalyticsService(db).list_for_user(ctx, user_id)
    except ServiceError as e:
        raise to_http_error(e)
    return [AnalyticsResponse.model_validate(r) for r in rows]


@router.get("/tests/{test_id}/performance", response_model=PerformanceAnalysis)
async def get_test_performance(
    test_id: int,
    ctx: StaffContext,
    db: DbSession,
    analyzer: Annotated[PerformanceAnalyzer, Depends(get_performance_analyzer)],
):
    """Class-level insights over every evaluated attempt on a test."""
    try:
        return await AnalyticsService(db).test_performance(ctx, test_id, analyzer)
    except ServiceError as e:
        raise to_http_error(e)
