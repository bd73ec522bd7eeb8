"""
Gradewise - Test API
Endpoints for authoring tests and questions
"""
from fastapi import APIRouter, status

from gradewise.api.deps import Context, DbSession, StaffContext, to_http_error
from gradewise.core.exceptions import ServiceError
from gradewise.schemas.test import (
    QuestionCreate,
    QuestionResponse,
    TestCreate,
    TestDetailResponse,
    TestResponse,
    TestStudentView,
)
from gradewise.services.tests import TestService

router = APIRouter(prefix="/tests", tags=["Tests"])


@router.post("", response_model=TestDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_test(request: TestCreate, ctx: StaffContext, db: DbSession):
    """Create a draft test, optionally with its questions."""
    try:
        test = await TestService(db).create_test(ctx, request)
    except ServiceError as e:
        raise to_http_error(e)
    return TestDetailResponse.model_validate(test)


@router.get("", response_model=list[TestResponse])
async def list_tests(ctx: Context, db: DbSession):
    """List the tests visible to the caller."""
    tests = await TestService(db).list_tests(ctx)
    return [TestResponse.model_validate(t) for t in tests]


@router.get("/{test_id}", response_model=None)
async def get_test(test_id: int, ctx: Context, db: DbSession):
    """
    Get a test with its questions.
    Staff see the answer key; students do not.
    """
    try:
        test = await TestService(db).get_test(ctx, test_id)
    except ServiceError as e:
        raise to_http_error(e)

    if ctx.is_staff:
        return TestDetailResponse.model_validate(test)
    return TestStudentView.model_validate(test)


@router.post(
    "/{test_id}/questions",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_question(test_id: int, request: QuestionCreate, ctx: StaffContext, db: DbSession):
    """Add a question to a draft test."""
    try:
        question = await TestService(db).add_question(ctx, test_id, request)
    except ServiceError as e:
        raise to_http_error(e)
    return QuestionResponse.model_validate(question)


@router.post("/{test_id}/publish", response_model=TestResponse)
async def publish_test(test_id: int, ctx: StaffContext, db: DbSession):
    """Open a draft test for attempts."""
    try:
        test = await TestService(db).publish_test(ctx, test_id)
    except ServiceError as e:
        raise to_http_error(e)
    return TestResponse.model_validate(test)


@router.post("/{test_id}/complete", response_model=TestResponse)
async def complete_test(test_id: int, ctx: StaffContext, db: DbSession):
    """Close a published test."""
    try:
        test = await TestService(db).complete_test(ctx, test_id)
    except ServiceError as e:
        raise to_http_error(e)
    return TestResponse.model_validate(test)
