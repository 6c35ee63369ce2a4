"""Book ORM — persists a catalog book and its ordered genre tags.

Invariants:
    - title is unique and non-nullable
    - author_id FK is non-nullable: a Book never exists without its Author
    - genres are ordered by BookGenre.position

Design Decisions:
    - book_genres table over a JSON column: genre membership filters as a
      plain EXISTS subquery on every dialect
    - Book.genres property hides the row wrapper from services
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from catalog.db.base import Base


class Book(Base):
    """Book entity — always joined with its Author when read."""
    __tablename__ = "books"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(
        String(500), nullable=False, unique=True,
    )
    published: Mapped[int] = mapped_column(Integer, nullable=False)
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("authors.id"), nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    author: Mapped["Author"] = relationship(
        "Author", back_populates="books",
    )
    genre_tags: Mapped[list["BookGenre"]] = relationship(
        "BookGenre", back_populates="book",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="BookGenre.position",
    )

    @property
    def genres(self) -> list[str]:
        return [tag.genre for tag in self.genre_tags]


class BookGenre(Base):
    """One genre tag of a Book, at a fixed position."""
    __tablename__ = "book_genres"

    book_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("books.id"), primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    genre: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True,
    )

    book: Mapped["Book"] = relationship("Book", back_populates="genre_tags")
