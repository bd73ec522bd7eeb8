"""Gradewise - API v1 Router."""
from fastapi import APIRouter

from gradewise.api.v1.auth import router as auth_router
from gradewise.api.v1.tests import router as tests_router
from gradewise.api.v1.attempts import router as attempts_router
from gradewise.api.v1.ai import router as ai_router
from gradewise.api.v1.analytics import router as analytics_router

api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(tests_router)
api_router.include_router(attempts_router)
api_router.include_router(ai_router)
api_router.include_router(analytics_router)
