"""Accounts — user registration, login and bearer token resolution.

Invariants:
    - Tokens are opaque (secrets.token_urlsafe); only their sha256 is stored
    - Every registered user logs in with the shared configured password
    - resolve_user never raises for bad tokens: unknown/expired -> None
    - Username collisions surface as UsernameTakenError, field rules as
      ValidationFailedError

Design Decisions:
    - Server-side sessions over signed tokens: no extra signing dependency,
      expiry enforced by the store query
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone

from catalog.core.errors import (
    InvalidCredentialsError, StoreValidationError, UsernameTakenError,
)
from catalog.core.payloads import user_payload
from catalog.core.repository_protocols import UserLike, UserStore
from catalog.core.validation import UNIQUE, to_validation_failed

logger = logging.getLogger(__name__)


def generate_token() -> str:
    return secrets.token_urlsafe(48)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AccountService:
    """User accounts and login sessions."""

    def __init__(
        self, store: UserStore, login_password: str, session_ttl: timedelta,
    ):
        self.store = store
        self._login_password = login_password
        self._session_ttl = session_ttl

    async def create_user(
        self, username: str | None, favorite_genre: str | None,
    ) -> dict:
        if username and await self.store.find_user_by_username(username):
            raise UsernameTakenError(username)
        try:
            user = await self.store.create_user(username, favorite_genre)
        except StoreValidationError as e:
            if e.errors.get("username") == UNIQUE:
                raise UsernameTakenError(username) from e
            raise to_validation_failed(e) from e
        logger.info(f"User '{user.username}' created", extra={"username": user.username})
        return user_payload(user)

    async def login(self, username: str, password: str) -> dict:
        """Issue a bearer token. Returns {"value": token}."""
        user = await self.store.find_user_by_username(username)
        if user is None or not hmac.compare_digest(
            password.encode("utf-8"), self._login_password.encode("utf-8"),
        ):
            logger.warning("Failed login attempt", extra={"username": username})
            raise InvalidCredentialsError()

        token = generate_token()
        await self.store.create_user_session(
            user.id, hash_token(token),
            datetime.now(timezone.utc) + self._session_ttl,
        )
        return {"value": token}

    async def resolve_user(self, token: str | None) -> UserLike | None:
        if not token:
            return None
        return await self.store.find_user_by_token_hash(
            hash_token(token), datetime.now(timezone.utc),
        )
