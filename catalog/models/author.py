"""Author ORM — persists a book author.

Invariants:
    - name is unique and non-nullable (min length enforced by the store)
    - born is optional
    - book_count is derived on demand, never stored

Design Decisions:
    - No cascade to books: authors are never deleted
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from catalog.db.base import Base


class Author(Base):
    """Author entity — referenced by every Book."""
    __tablename__ = "authors"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(200), nullable=False, unique=True,
    )
    born: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    books: Mapped[list["Book"]] = relationship(
        "Book", back_populates="author",
    )
