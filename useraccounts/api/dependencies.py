"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes,
plus the bearer-token authentication dependency.
"""

from fastapi import Cookie, Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from useraccounts.adapters.repository.postgres import PostgresCountryRepository, PostgresUserRepository
from useraccounts.adapters.smtp.console import ConsoleEmailSender
from useraccounts.adapters.smtp.mailer import SmtpEmailSender
from useraccounts.config.settings import get_settings
from useraccounts.domain.countries import CountryService
from useraccounts.domain.exceptions import NotAuthenticated
from useraccounts.domain.models import Identity
from useraccounts.domain.ports import CountryRepository, EmailSender, UserRepository
from useraccounts.domain.tokens import TokenService
from useraccounts.domain.users import UserService

REFRESH_TOKEN_COOKIE = "refreshToken"

# Module-level singleton - ConsoleEmailSender is stateless
_console_sender = ConsoleEmailSender()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_user_repository(request: Request) -> UserRepository:
    """Create user repository with connection pool from app state."""
    return PostgresUserRepository(get_pool(request))


def get_country_repository(request: Request) -> CountryRepository:
    """Create country repository with connection pool from app state."""
    return PostgresCountryRepository(get_pool(request))


def get_email_sender() -> EmailSender:
    """SMTP sender when a host is configured, console sender otherwise."""
    settings = get_settings()
    if not settings.smtp_host:
        return _console_sender
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.smtp_from or settings.smtp_user,
        timeout=settings.smtp_timeout_seconds,
    )


def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(
        access_secret=settings.jwt_access_secret,
        refresh_secret=settings.jwt_refresh_secret,
        access_ttl_seconds=settings.access_token_ttl_seconds,
        refresh_ttl_seconds=settings.refresh_token_ttl_seconds,
    )


def get_user_service(
    repository: UserRepository = Depends(get_user_repository),
    countries: CountryRepository = Depends(get_country_repository),
    email_sender: EmailSender = Depends(get_email_sender),
    tokens: TokenService = Depends(get_token_service),
) -> UserService:
    """
    Create user service with injected dependencies.

    Wires together the repositories, email sender and token service.
    """
    settings = get_settings()
    return UserService(
        repository=repository,
        countries=countries,
        email_sender=email_sender,
        tokens=tokens,
        api_url=settings.api_url,
        bcrypt_cost=settings.bcrypt_cost,
    )


def get_country_service(
    repository: CountryRepository = Depends(get_country_repository),
) -> CountryService:
    return CountryService(repository=repository)


# Bearer security scheme for OpenAPI documentation. auto_error is off so
# that missing credentials go through the same 401 body as invalid ones.
http_bearer = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: UserService = Depends(get_user_service),
) -> Identity:
    """
    Resolve the identity from the bearer access token.

    Raises:
        NotAuthenticated: Missing, malformed, invalid, expired or logged-out token
    """
    if credentials is None:
        raise NotAuthenticated()
    return service.authenticate(credentials.credentials)


def get_refresh_token(
    cookie_token: str | None = Cookie(default=None, alias=REFRESH_TOKEN_COOKIE),
    header_token: str | None = Header(default=None, alias="X-Refresh-Token"),
) -> str | None:
    """Refresh token from the refreshToken cookie, falling back to X-Refresh-Token."""
    return cookie_token or header_token
