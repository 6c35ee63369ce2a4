"""Catalog Schemas — request bodies for book and author mutations.

Invariants:
    - BookCreate fields are optional so missing arguments reach the mutation
      pipeline and surface as INVALID_INPUT, not as a transport error
    - Strings are stripped of surrounding whitespace

Design Decisions:
    - Pydantic handles type coercion (published as int, genres as list[str])
"""

from pydantic import BaseModel, field_validator


class BookCreate(BaseModel):
    """add_book arguments."""
    title: str | None = None
    author: str | None = None
    published: int | None = None
    genres: list[str] | None = None

    @field_validator("title", "author")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v

    @field_validator("genres")
    @classmethod
    def strip_genres(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return [g.strip() for g in v if g.strip()]


class AuthorBirthYear(BaseModel):
    """edit_author arguments."""
    set_born_to: int
