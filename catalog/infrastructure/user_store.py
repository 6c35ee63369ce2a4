"""SQL User Store — user accounts and login sessions behind the UserStore protocol.

Invariants:
    - Only token hashes are persisted, never raw tokens
    - Expiry compared in SQL: a session at or past expires_at never resolves
    - Field rule and unique violations raise StoreValidationError("user", ...)
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.domain_types import UserId
from catalog.core.errors import StoreValidationError
from catalog.core.validation import UNIQUE, check_fields
from catalog.models.user import User, UserSession

logger = logging.getLogger(__name__)


class SqlUserStore:
    """UserStore implementation over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_user_by_username(self, username: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.username == username),
        )
        return result.scalar_one_or_none()

    async def create_user(self, username: str, favorite_genre: str) -> User:
        errors = check_fields(
            "user", {"username": username, "favorite_genre": favorite_genre},
        )
        if errors:
            raise StoreValidationError("user", errors)
        user = User(username=username, favorite_genre=favorite_genre)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Unique constraint violated on user: {e.orig}")
            raise StoreValidationError("user", {"username": UNIQUE})
        return user

    async def create_user_session(
        self, user_id: UserId, token_hash: str, expires_at: datetime,
    ) -> None:
        self.db.add(UserSession(
            token_hash=token_hash, user_id=user_id, expires_at=expires_at,
        ))
        await self.db.commit()

    async def find_user_by_token_hash(
        self, token_hash: str, now: datetime,
    ) -> User | None:
        result = await self.db.execute(
            select(User)
            .join(UserSession, UserSession.user_id == User.id)
            .where(UserSession.token_hash == token_hash)
            .where(UserSession.expires_at > now),
        )
        return result.scalar_one_or_none()
