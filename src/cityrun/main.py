"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.cityrun.config import settings
from src.cityrun.exceptions import CityRunError
from src.cityrun.features.auth import router as auth_router
from src.cityrun.features.routes import router as routes_router
from src.cityrun.features.routes.service import RouteRecommendationOrchestrator, SavedRouteService
from src.cityrun.features.users import router as users_router
from src.cityrun.services.auth import AuthService, PasswordHasher, UserRepository
from src.cityrun.services.database import get_query_builder
from src.cityrun.services.geo_engine import GeoEngineClient
from src.cityrun.services.rate_limiter import limiter
from src.cityrun.services.session_store import RedisSessionStore, create_redis_client

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).

    Builds every long-lived collaborator once and stores it on ``app.state``;
    request dependencies read them from there.
    """
    # Startup
    db = get_query_builder()
    session_store = RedisSessionStore(
        create_redis_client(settings.redis_url), key_prefix=settings.session_key_prefix
    )
    user_repository = UserRepository(db, table=settings.users_table)
    geo_engine = GeoEngineClient(
        settings.geo_engine_base_url,
        score_path=settings.geo_engine_score_path,
        timeout=settings.geo_engine_timeout_seconds,
        connect_timeout=settings.geo_engine_connect_timeout_seconds,
    )

    app.state.user_repository = user_repository
    app.state.auth_service = AuthService(
        users=user_repository,
        sessions=session_store,
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        session_ttl_seconds=settings.session_ttl_seconds,
    )
    app.state.route_orchestrator = RouteRecommendationOrchestrator(geo_engine)
    app.state.saved_route_service = SavedRouteService(db, table=settings.routes_table)

    logger.info(
        "Application started",
        extra={
            "session_ttl_seconds": settings.session_ttl_seconds,
            "geo_engine_url": settings.geo_engine_base_url,
        },
    )

    yield

    # Shutdown
    try:
        await geo_engine.close()
        session_store.close()
        logger.info("Application shutdown completed")
    except Exception as e:
        logger.error(f"Error during shutdown cleanup: {e}", exc_info=True)


app = FastAPI(
    title="CityRun API",
    description="API for route tracking and running route recommendation",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(CityRunError)
async def cityrun_error_handler(request: Request, exc: CityRunError) -> JSONResponse:
    """Render any domain error as ``{"error": code, "message": message}``."""
    if exc.status_code >= 500:
        logger.error(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={"error_type": exc.code.lower(), "path": request.url.path},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request body/parameter validation failures as 400 VALIDATION_ERROR."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "VALIDATION_ERROR",
            "message": f"{location}: {message}" if location else message,
        },
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide their details from the caller."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={"error_type": "unhandled", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "INTERNAL_ERROR", "message": "Internal server error"},
    )


origins = settings.cors_origins.split(",")
logger.info(f"Origins : {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", settings.session_header_name],
)

app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(routes_router, prefix=settings.api_prefix)


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str


@app.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    return HealthCheckResponse(status="healthy")
