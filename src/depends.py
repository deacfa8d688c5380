from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.email_notification_sink import EmailNotificationSink
from src.adapter.services.rate_limiter import InMemoryRateLimiter, RedisRateLimiter
from src.adapter.services.token_denylist import InMemoryTokenDenylist, RedisTokenDenylist
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import to_http_error
from src.app.services.notification import INotificationSink
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.security_audit import ClientInfo
from src.app.services.suspicious_activity import SuspiciousActivityMonitor
from src.app.services.token_authority import TokenAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import AuthenticateUserUseCase, CurrentUser

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


def _build_rate_limiter():
    if ApplicationConfig.CACHE_BACKEND == "redis":
        return RedisRateLimiter(ApplicationConfig.RATE_LIMITS, ApplicationConfig.REDIS_URL)
    return InMemoryRateLimiter(ApplicationConfig.RATE_LIMITS)


def _build_denylist():
    if ApplicationConfig.CACHE_BACKEND == "redis":
        return RedisTokenDenylist(ApplicationConfig.REDIS_URL)
    return InMemoryTokenDenylist()


# Process-wide collaborators; tests replace them through dependency_overrides
_token_authority: Optional[TokenAuthority] = None
_rate_limiter = _build_rate_limiter()
_notifier = EmailNotificationSink(
    smtp_host=ApplicationConfig.SMTP_HOST,
    smtp_port=ApplicationConfig.SMTP_PORT,
    smtp_user=ApplicationConfig.SMTP_USER,
    smtp_password=ApplicationConfig.SMTP_PASSWORD,
    smtp_use_tls=ApplicationConfig.SMTP_USE_TLS,
    from_email=ApplicationConfig.MAIL_FROM,
)
_monitor = SuspiciousActivityMonitor.from_config(ApplicationConfig.SUSPICIOUS_PATTERNS)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_authority() -> TokenAuthority:
    global _token_authority
    if _token_authority is None:
        _token_authority = TokenAuthority(ApplicationConfig.JWT_SECRET, _build_denylist())
    return _token_authority


def get_rate_limiter() -> Optional[IRateLimiter]:
    """None when rate limiting is switched off"""
    if not ApplicationConfig.RATE_LIMIT_ENABLED:
        return None
    return _rate_limiter


def get_notifier() -> INotificationSink:
    return _notifier


def get_activity_monitor() -> SuspiciousActivityMonitor:
    return _monitor


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(get_bearer_token),
    client: ClientInfo = Depends(get_client_info),
    uow: UnitOfWork = Depends(get_unit_of_work),
    tokens: TokenAuthority = Depends(get_token_authority),
) -> CurrentUser:
    """
    Dependency to authenticate the bearer token from the Authorization header.

    Returns:
        CurrentUser built from the live user record

    Raises:
        ClientError: 401 if token is missing, invalid, expired, denylisted,
        bound to a revoked session, or the user is gone or inactive
    """
    result = await AuthenticateUserUseCase(uow, tokens).execute(token, client, request.url.path)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
