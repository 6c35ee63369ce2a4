"""User Schemas — registration and login request bodies."""

from pydantic import BaseModel


class UserCreate(BaseModel):
    """create_user arguments — rules enforced by the store, not here."""
    username: str | None = None
    favorite_genre: str | None = None


class LoginRequest(BaseModel):
    username: str
    password: str
