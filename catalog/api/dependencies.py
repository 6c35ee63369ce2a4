"""Request Dependencies — per-request services, broker access and caller identity.

Invariants:
    - One AsyncSession per request, shared by every service built for it
    - get_current_user returns None (never raises) for missing/unknown tokens;
      protected mutations decide whether None is acceptable
    - The broker is the lifespan-owned instance on app.state

Design Decisions:
    - Services constructed per request from injected collaborators, so tests
      override get_db / app.state.broker and exercise the real wiring
"""

from datetime import timedelta

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config import get_settings
from catalog.core.repository_protocols import UserLike
from catalog.infrastructure.catalog_store import SqlCatalogStore
from catalog.infrastructure.database import get_db
from catalog.infrastructure.notification_broker import NotificationBroker
from catalog.infrastructure.user_store import SqlUserStore
from catalog.services.accounts import AccountService
from catalog.services.book_mutations import BookMutations
from catalog.services.book_queries import BookQueries

_bearer = HTTPBearer(auto_error=False)


def get_broker(request: Request) -> NotificationBroker:
    broker = getattr(request.app.state, "broker", None)
    if broker is None:
        raise RuntimeError("Notification broker not initialized")
    return broker


def get_account_service(db: AsyncSession = Depends(get_db)) -> AccountService:
    settings = get_settings()
    return AccountService(
        SqlUserStore(db),
        login_password=settings.login_password,
        session_ttl=timedelta(minutes=settings.session_ttl_minutes),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    accounts: AccountService = Depends(get_account_service),
) -> UserLike | None:
    """Resolve the bearer token to a user, or None."""
    if credentials is None:
        return None
    return await accounts.resolve_user(credentials.credentials)


def get_book_queries(db: AsyncSession = Depends(get_db)) -> BookQueries:
    return BookQueries(SqlCatalogStore(db))


def get_book_mutations(
    db: AsyncSession = Depends(get_db),
    broker: NotificationBroker = Depends(get_broker),
) -> BookMutations:
    return BookMutations(SqlCatalogStore(db), broker)
