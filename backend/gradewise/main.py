"""
Gradewise - FastAPI Application
Main application entry point with middleware and route configuration
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gradewise.api.v1 import api_router
from gradewise.core.config import settings
from gradewise.core.database import init_db
from gradewise.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    configure_logging()

    if settings.TELEMETRY_ENABLED:
        try:
            from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

            from gradewise.ai.core.telemetry import init_telemetry

            init_telemetry()
            FastAPIInstrumentor.instrument_app(app)
        except Exception as e:
            logger.warning("Telemetry initialization skipped: %s", e)

    await init_db()
    logger.info("Database tables initialized")

    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Test authoring, attempt grading and learning analytics",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

    @app.get(f"{settings.API_V1_PREFIX}/health", tags=["Health"])
    async def api_v1_health_check():
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gradewise.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
