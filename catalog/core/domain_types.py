"""Domain Types — identity types, event topics and catalog constants.

Invariants:
    - AuthorId, UserId wrap UUIDs — never use bare UUID in domain logic
    - ALL_GENRES is a reserved genre value that disables genre filtering
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

AuthorId = NewType("AuthorId", UUID)
UserId = NewType("UserId", UUID)


# ─── Constants ───────────────────────────────────────────────────

ALL_GENRES: str = "all"

AUTHOR_NAME_MIN_LENGTH: int = 5
BOOK_TITLE_MIN_LENGTH: int = 2
USERNAME_MIN_LENGTH: int = 3


# ─── Enums ───────────────────────────────────────────────────────

class EventTopic(str, Enum):
    """Broadcast topics for live subscriptions."""
    BOOK_ADDED = "BOOK_ADDED"


class SubscriptionState(str, Enum):
    """Per-subscriber channel lifecycle: OPEN -> DELIVERING -> CLOSED."""
    OPEN = "open"
    DELIVERING = "delivering"
    CLOSED = "closed"


class FetchStrategy(str, Enum):
    """Book fetch strategies chosen by the relation fetch planner."""
    ALL_BOOKS = "all_books"
    BY_AUTHOR = "by_author"
    BY_GENRE = "by_genre"
    BY_AUTHOR_AND_GENRE = "by_author_and_genre"
