import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import redis
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load environment variables as early as possible
load_dotenv()

from .core.config import settings
from .database import create_db_and_tables
from .deps import Services, authenticate, build_services
from .exceptions import AppError, app_error_handler, http_exception_handler, validation_exception_handler
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware
from .routers import auth_router, creatives_router, users_router
from .schemas import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def initialize_storage(app: FastAPI, services: Services) -> None:
    # Do not crash the app; report via health endpoint
    app.state.db_init_ok = True
    app.state.cache_ok = True
    try:
        create_db_and_tables(services.engine)
        logger.info("Database initialized successfully")
    except SQLAlchemyError:
        app.state.db_init_ok = False
        logger.exception("Database initialization failed")
    try:
        services.cache.ping()
        logger.info("Connected to Redis server")
    except redis.RedisError:
        app.state.cache_ok = False
        logger.exception("Redis connection failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    owns_services = getattr(app.state, "services", None) is None
    if owns_services:
        app.state.services = build_services(settings)
        initialize_storage(app, app.state.services)
    yield
    # Shutdown: uvicorn has already stopped accepting connections and drained
    # in-flight requests; queued background work is all that is left.
    logger.info("Completing background tasks...")
    if owns_services:
        app.state.services.close()
        app.state.services = None
    else:
        app.state.services.tasks.wait()
    logger.info(f"{settings.APP_NAME} stopped")


def create_app(services: Optional[Services] = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        dependencies=[Depends(authenticate)],
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
    )
    app.state.services = services

    # Add custom exception handlers
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Add middleware (last added runs first)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.allowed_methods_list,
        allow_headers=settings.allowed_headers_list,
    )
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.DEBUG)

    app.include_router(auth_router.router)
    app.include_router(creatives_router.router)
    app.include_router(users_router.router)

    @app.get("/health", response_model=HealthResponse)
    def health_check(request: Request):
        healthy = getattr(request.app.state, "db_init_ok", True) and getattr(request.app.state, "cache_ok", True)
        return HealthResponse(
            status="healthy" if healthy else "degraded",
            service=settings.APP_NAME,
            version=settings.APP_VERSION,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    return app


app = create_app()


def run() -> None:
    import uvicorn
    uvicorn.run(
        "cheershare.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,
        log_level=settings.LOG_LEVEL.lower(),
        timeout_graceful_shutdown=settings.SHUTDOWN_GRACE_SECONDS,
    )


if __name__ == "__main__":
    run()
