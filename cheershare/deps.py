"""
API dependencies.

Builds the service container once per process and exposes it, plus the
request identity, to route handlers through FastAPI's dependency injection.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Annotated, Optional

import redis
from fastapi import Depends, Request, Response
from sqlalchemy.engine import Engine

from .application.ports.user_repo import ANONYMOUS_USER, UserDto
from .application.services.auth_service import AuthService
from .application.services.creative_service import CreativeService
from .application.services.notification_service import NotificationService
from .application.services.token_service import SCOPE_AUTHENTICATION, TOKEN_LENGTH, TokenService
from .application.services.user_service import UserService
from .background import TaskTracker
from .cache import create_redis_client
from .core.config import Settings
from .database import create_engine_from_settings
from .exceptions import AuthError, NotFoundError, StorageError
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.otp.redis_otp_store import RedisOTPStore
from .infrastructure.persistence.sqlalchemy.repositories.creative_repository_sql import SqlCreativeRepository
from .infrastructure.persistence.sqlalchemy.repositories.token_repository_sql import SqlTokenRepository
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .infrastructure.sms.twilio_sender import TwilioSmsSender
from .infrastructure.storage.local_storage import LocalStorageRepository

logger = logging.getLogger(__name__)

BEARER_HEADERS = {"WWW-Authenticate": "Bearer", "Vary": "Authorization"}


@dataclass
class Services:
    """Container for all services."""
    users: UserService
    tokens: TokenService
    auth: AuthService
    creatives: CreativeService
    tasks: TaskTracker
    engine: Optional[Engine] = None
    cache: Optional[redis.Redis] = None

    def close(self) -> None:
        # Background work first: a queued SMS may still be retrying.
        self.tasks.shutdown()
        if self.cache is not None:
            self.cache.close()
        if self.engine is not None:
            self.engine.dispose()


def build_services(settings: Settings) -> Services:
    logger.info("Initializing services...")

    engine = create_engine_from_settings(settings)
    cache = create_redis_client(settings)
    tasks = TaskTracker(max_workers=settings.BACKGROUND_WORKERS)

    users = UserService(SqlUserRepository(engine))
    tokens = TokenService(SqlTokenRepository(engine), ttl=timedelta(hours=settings.TOKEN_TTL_HOURS))
    notifier = NotificationService(
        TwilioSmsSender.from_settings(settings),
        max_attempts=settings.SMS_MAX_ATTEMPTS,
        retry_delay=settings.SMS_RETRY_DELAY_SECONDS,
    )
    auth = AuthService(
        otp_store=RedisOTPStore(cache, ttl_seconds=settings.OTP_TTL_SECONDS, prefix=settings.OTP_KEY_PREFIX),
        users=users,
        tokens=tokens,
        notifier=notifier,
        tasks=tasks,
        audit=StdAuditLogger(),
    )
    creatives = CreativeService(
        SqlCreativeRepository(engine),
        LocalStorageRepository(settings.UPLOAD_DIR),
        max_file_size=settings.MAX_FILE_SIZE,
        allowed_extensions=tuple(settings.ALLOWED_IMAGE_EXTENSIONS),
    )

    logger.info("Services initialized successfully")
    return Services(
        users=users,
        tokens=tokens,
        auth=auth,
        creatives=creatives,
        tasks=tasks,
        engine=engine,
        cache=cache,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


def get_auth_service(services: ServicesDep) -> AuthService:
    return services.auth


def get_creative_service(services: ServicesDep) -> CreativeService:
    return services.creatives


# Authentication dependencies

def authenticate(request: Request, response: Response, services: ServicesDep) -> UserDto:
    """
    Resolve the Authorization header to a user.

    No header yields ANONYMOUS_USER. A header that is not exactly
    ``Bearer <26-char token>`` is rejected before any storage lookup.
    Installed app-wide, so every route runs it once per request; handlers
    that need the identity depend on it again and get the cached value.
    """
    response.headers.append("Vary", "Authorization")

    authorization_header = request.headers.get("Authorization")
    if not authorization_header:
        return ANONYMOUS_USER

    header_parts = authorization_header.split(" ")
    if len(header_parts) != 2 or header_parts[0] != "Bearer":
        raise AuthError("Invalid authorization header", headers=BEARER_HEADERS)

    token = header_parts[1]
    if len(token) != TOKEN_LENGTH:
        raise AuthError("Invalid authorization header", headers=BEARER_HEADERS)

    try:
        return services.tokens.verify(SCOPE_AUTHENTICATION, token)
    except NotFoundError:
        raise AuthError("Invalid authorization header", headers=BEARER_HEADERS)
    except StorageError as e:
        e.headers = {"Vary": "Authorization"}
        raise


def require_authenticated_user(user: Annotated[UserDto, Depends(authenticate)]) -> UserDto:
    if user.is_anonymous:
        raise AuthError("Unauthorized", headers=BEARER_HEADERS)
    return user


# Type aliases for dependencies
CurrentUser = Annotated[UserDto, Depends(require_authenticated_user)]
CurrentUserOptional = Annotated[UserDto, Depends(authenticate)]
