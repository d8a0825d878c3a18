"""Coursegate API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.access.decision import AccessDecisionService
from src.access.extension import SubscriptionExtensionService
from src.access.repository import CassandraAccessRepository
from src.access.router import router as access_router
from src.access.workflow import AccessRequestWorkflow
from src.config import Settings, get_settings
from src.core.clock import Clock, SystemClock
from src.core.context import get_request_id
from src.core.database import init_async_cassandra, shutdown_async_cassandra
from src.core.errors import AccessDeniedError, AccessError, status_code_for
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.core.redis import init_redis, shutdown_redis
from src.courses.service import CourseConfigReader
from src.health import router as health_router
from src.notifications.service import NotificationService
from src.progress.repository import CassandraProgressRepository
from src.progress.router import router as progress_router
from src.progress.service import ProgressService
from src.rewards.ledger import RewardLedger


if TYPE_CHECKING:
    from redis.asyncio import Redis


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


def wire_services(
    app: FastAPI,
    session: Any,
    settings: Settings,
    redis: "Redis | None" = None,
    clock: Clock | None = None,
) -> None:
    """Build the access engine on a Cassandra session and expose it on app state."""
    clock = clock or SystemClock()
    keyspace = settings.cassandra_keyspace

    access_repository = CassandraAccessRepository(session, keyspace)
    course_reader = CourseConfigReader(session, keyspace)
    decisions = AccessDecisionService(access_repository, course_reader, clock)

    app.state.cassandra_session = session
    app.state.redis = redis
    app.state.course_reader = course_reader
    app.state.access_decisions = decisions
    app.state.access_workflow = AccessRequestWorkflow(access_repository, clock)
    app.state.extension_service = SubscriptionExtensionService(
        access_repository, clock
    )
    app.state.progress_service = ProgressService(
        repository=CassandraProgressRepository(session, keyspace),
        ledger=RewardLedger(session, keyspace),
        decisions=decisions,
        clock=clock,
        reward_coins=settings.reward_coins_per_lesson,
        max_attempts=settings.completion_max_attempts,
    )
    app.state.notification_service = NotificationService(session, keyspace, redis)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Redis is non-critical: only real-time notification delivery needs it
    redis_client = None
    try:
        redis_client = await init_redis()
    except Exception as e:
        logger.warning(
            "redis_init_skipped",
            error=str(e),
            message="Running without Redis - real-time notifications disabled",
        )

    try:
        session = await init_async_cassandra()
        wire_services(app, session, settings, redis=redis_client)
        logger.info(
            "access_engine_initialized",
            reward_coins_per_lesson=settings.reward_coins_per_lesson,
            redis_enabled=redis_client is not None,
        )
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    await shutdown_redis()
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Never expose stack traces in responses; handlers below log the details
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Course access and subscription lifecycle API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    @app.exception_handler(AccessError)
    async def access_error_handler(request: Request, exc: AccessError) -> ORJSONResponse:
        """Translate domain errors into the error envelope."""
        status_code = status_code_for(exc)
        logger.info(
            "access_error",
            code=exc.code,
            status_code=status_code,
            detail=exc.message,
            path=request.url.path,
            method=request.method,
        )

        content: dict[str, Any] = {
            "error": True,
            "message": exc.message,
            "status_code": status_code,
            "request_id": _get_request_id_safe(request),
            "code": exc.code,
        }
        if isinstance(exc, AccessDeniedError):
            content["reason"] = exc.reason.value
        return ORJSONResponse(status_code=status_code, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": _get_request_id_safe(request),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle validation errors (safe to expose)."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": 422,
                "request_id": _get_request_id_safe(request),
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler: log everything, expose nothing."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": 500,
                "request_id": _get_request_id_safe(request),
            },
        )

    app.include_router(health_router)
    app.include_router(access_router)
    app.include_router(progress_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Coursegate API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
