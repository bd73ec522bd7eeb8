"""
Gradewise - API Dependencies
FastAPI dependencies for authentication, request context and adapters
"""
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from gradewise.ai.evaluator import AnswerEvaluator, answer_evaluator
from gradewise.ai.ocr import OCRService, ocr_service
from gradewise.ai.performance_analyzer import PerformanceAnalyzer, performance_analyzer
from gradewise.ai.study_planner import StudyPlanner, study_planner
from gradewise.core.context import RequestContext
from gradewise.core.database import get_db
from gradewise.core.exceptions import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    ValidationError,
)
from gradewise.core.security import verify_token
from gradewise.models.user import User, UserRole
from gradewise.services.auth import AuthService
from gradewise.services.grading import GradingPipeline

# Security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        HTTPException: If token is invalid or user not found
    """
    token = credentials.credentials
    user_id = verify_token(token, token_type="access")

    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    auth_service = AuthService(db)
    user = await auth_service.get_user_by_id(user_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    return user


async def get_request_context(
    current_user: Annotated[User, Depends(get_current_user)],
) -> RequestContext:
    """Identity and role of the caller, handed explicitly to services."""
    return RequestContext(user_id=current_user.id, role=current_user.user_role)


def require_role(*roles: UserRole):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/tests")
        async def create(ctx: RequestContext = Depends(require_role(UserRole.TEACHER))):
            ...
    """
    async def role_checker(
        ctx: Annotated[RequestContext, Depends(get_request_context)],
    ) -> RequestContext:
        if ctx.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {[r.value for r in roles]}",
            )
        return ctx

    return role_checker


# --- Adapters (overridable in tests) ---

def get_answer_evaluator() -> AnswerEvaluator:
    return answer_evaluator


def get_ocr_service() -> OCRService:
    return ocr_service


def get_study_planner() -> StudyPlanner:
    return study_planner


def get_performance_analyzer() -> PerformanceAnalyzer:
    return performance_analyzer


def get_grading_pipeline(
    evaluator: Annotated[AnswerEvaluator, Depends(get_answer_evaluator)],
    ocr: Annotated[OCRService, Depends(get_ocr_service)],
) -> GradingPipeline:
    return GradingPipeline(evaluator=evaluator, ocr=ocr)


def to_http_error(error: ServiceError) -> HTTPException:
    """Map a service-layer error onto an HTTP response."""
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, PermissionDeniedError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(error, InvalidStateError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(error))


# Type aliases for common dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
Context = Annotated[RequestContext, Depends(get_request_context)]
StaffContext = Annotated[
    RequestContext,
    Depends(require_role(UserRole.TEACHER, UserRole.PRINCIPAL, UserRole.ADMIN)),
]
DbSession = Annotated[AsyncSession, Depends(get_db)]
