"""
Gradewise - Attempt API
Endpoints for starting, submitting and evaluating test attempts
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status

from gradewise.api.deps import (
    Context,
    DbSession,
    StaffContext,
    get_grading_pipeline,
    to_http_error,
)
from gradewise.core.exceptions import ServiceError
from gradewise.schemas.attempt import (
    AttemptResponse,
    AttemptStartRequest,
    AttemptSubmitRequest,
)
from gradewise.services.attempts import AttemptService
from gradewise.services.grading import GradingPipeline

router = APIRouter(prefix="/attempts", tags=["Attempts"])


@router.post("", response_model=AttemptResponse, status_code=status.HTTP_201_CREATED)
async def start_attempt(request: AttemptStartRequest, ctx: Context, db: DbSession):
    """Start a new attempt on a published test."""
    try:
        attempt = await AttemptService(db).start_attempt(ctx, request.test_id)
    except ServiceError as e:
        raise to_http_error(e)
    return AttemptResponse.model_validate(attempt)


@router.post("/{attempt_id}/submit", response_model=AttemptResponse)
async def submit_attempt(
    attempt_id: int,
    request: AttemptSubmitRequest,
    ctx: Context,
    db: DbSession,
):
    """
    Submit answers and close the attempt.
    Scoring happens later, when evaluation is triggered.
    """
    try:
        attempt = await AttemptService(db).submit_attempt(ctx, attempt_id, request)
    except ServiceError as e:
        raise to_http_error(e)
    return AttemptResponse.model_validate(attempt)


@router.post("/{attempt_id}/evaluate", response_model=AttemptResponse)
async def evaluate_attempt(
    attempt_id: int,
    ctx: StaffContext,
    db: DbSession,
    pipeline: Annotated[GradingPipeline, Depends(get_grading_pipeline)],
):
    """
    Score every answer and finalize the attempt.
    Answers that could not be graded come back with score 0 and confidence 0.
    """
    try:
        attempt = await AttemptService(db).evaluate_attempt(ctx, attempt_id, pipeline)
    except ServiceError as e:
        raise to_http_error(e)
    return AttemptResponse.model_validate(attempt)


@router.get("/{attempt_id}", response_model=AttemptResponse)
async def get_attempt(attempt_id: int, ctx: Context, db: DbSession):
    """Get an attempt with its answers."""
    try:
        attempt = await AttemptService(db).get_attempt(ctx, attempt_id)
    except ServiceError as e:
        raise to_http_error(e)
    return AttemptResponse.model_validate(attempt)
