"""
FastAPI dependencies - Dependency injection factories and admission checks.

This module provides Depends() factories for injecting domain services
and infrastructure adapters into routes, plus the request admission
layer: bearer-token authentication and registration rate limiting.

Long-lived collaborators (connection pool, pending store, token service,
password hasher, email sender, rate limiter) live on app.state and are
created by configure_state() during lifespan startup.
"""

import logging
from datetime import timedelta

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from habitsphere.adapters.repository.postgres import PostgresHabitRepository, PostgresUserRepository
from habitsphere.adapters.smtp.console import ConsoleEmailSender
from habitsphere.adapters.smtp.smtp import SmtpEmailSender
from habitsphere.api.ratelimit import SlidingWindowRateLimiter
from habitsphere.config.settings import Settings
from habitsphere.domain.accounts import AccountService
from habitsphere.domain.credentials import PasswordHasher
from habitsphere.domain.exceptions import TokenExpired, TokenInvalid
from habitsphere.domain.habits import HabitService
from habitsphere.domain.models import SessionClaims
from habitsphere.domain.pending import PendingRegistrationStore
from habitsphere.domain.ports import EmailSender
from habitsphere.domain.registration import RegistrationService
from habitsphere.domain.tokens import TokenService

logger = logging.getLogger(__name__)


def build_email_sender(settings: Settings) -> EmailSender:
    """Pick the email adapter named by settings.email_backend."""
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.email_from,
            username=settings.smtp_user,
            password=settings.smtp_password,
        )
    return ConsoleEmailSender()


def configure_state(state, settings: Settings) -> None:
    """
    Attach the process-wide collaborators to app.state.

    The connection pool is attached separately since tests replace it.
    """
    state.pending_store = PendingRegistrationStore(ttl=timedelta(seconds=settings.pending_ttl_seconds))
    state.token_service = TokenService(
        secret=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(seconds=settings.token_ttl_seconds),
    )
    state.password_hasher = PasswordHasher(rounds=settings.bcrypt_cost)
    state.email_sender = build_email_sender(settings)
    state.rate_limiter = SlidingWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_user_repository(request: Request) -> PostgresUserRepository:
    """Create user repository with connection pool from app state."""
    return PostgresUserRepository(get_pool(request))


def get_habit_repository(request: Request) -> PostgresHabitRepository:
    """Create habit repository with connection pool from app state."""
    return PostgresHabitRepository(get_pool(request))


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the user repository, pending store, hasher, token
    service and email sender for the verification pipeline.
    """
    state = request.app.state
    return RegistrationService(
        users=get_user_repository(request),
        pending=state.pending_store,
        hasher=state.password_hasher,
        tokens=state.token_service,
        email_sender=state.email_sender,
    )


def get_account_service(request: Request) -> AccountService:
    state = request.app.state
    return AccountService(
        users=get_user_repository(request),
        hasher=state.password_hasher,
        tokens=state.token_service,
    )


def get_habit_service(request: Request) -> HabitService:
    return HabitService(habits=get_habit_repository(request))


# Bearer security scheme for OpenAPI documentation. auto_error is off so
# a missing header is reported as 401 rather than FastAPI's default.
http_bearer = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
) -> str | None:
    """Raw bearer token, or None when the header is absent."""
    if credentials is None:
        return None
    return credentials.credentials


def get_current_claims(
    token: str | None = Depends(get_bearer_token),
    tokens: TokenService = Depends(get_token_service),
) -> SessionClaims:
    """
    Authenticate the request from its bearer token.

    - Returns 401 when no token is supplied
    - Returns 403 when the token is invalid or expired

    Returns:
        Verified session claims for the caller
    """
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        return tokens.verify(token)
    except (TokenInvalid, TokenExpired):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        ) from None


def client_key(request: Request) -> str:
    """Identify the originating client for rate limiting."""
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def enforce_registration_rate_limit(request: Request) -> None:
    """
    Reject registration-class requests beyond the per-client cap.

    Raises 429 before the request reaches the verification pipeline.
    """
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    key = client_key(request)
    if not limiter.allow(key):
        logger.warning("Rate limit exceeded for %s on %s", key, request.url.path)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many email requests, please try again later.",
            headers={"Retry-After": str(limiter.retry_after(key))},
        )
