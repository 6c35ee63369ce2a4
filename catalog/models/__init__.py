"""ORM Models — SQLAlchemy declarative models for all catalog entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Book always references exactly one Author (author_id FK, non-nullable)

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from catalog.models.author import Author  # noqa: F401
from catalog.models.book import Book, BookGenre  # noqa: F401
from catalog.models.user import User, UserSession  # noqa: F401
