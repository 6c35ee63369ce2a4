"""User Routes — registration, login and the current caller.

Invariants:
    - POST /login returns {"value": token}; the token is sent back as
      `Authorization: Bearer <token>`
    - GET /users/me returns null for anonymous callers (never 401)
"""

from fastapi import APIRouter, Depends, status

from catalog.api.dependencies import get_account_service, get_current_user
from catalog.core.payloads import user_payload
from catalog.core.repository_protocols import UserLike
from catalog.schemas.user import LoginRequest, UserCreate
from catalog.services.accounts import AccountService

router = APIRouter(prefix="/api/v1", tags=["users"])


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    accounts: AccountService = Depends(get_account_service),
):
    return await accounts.create_user(body.username, body.favorite_genre)


@router.post("/login")
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    return await accounts.login(body.username, body.password)


@router.get("/users/me")
async def me(current_user: UserLike | None = Depends(get_current_user)):
    return user_payload(current_user) if current_user else None
