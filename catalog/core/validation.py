"""Field Rules & Validation Messages — declarative constraint and message tables.

Invariants:
    - FIELD_RULES is the single source of truth for per-entity field constraints
    - check_fields is PURE: returns {field: kind}, never raises
    - Every StoreValidationError maps to exactly one ValidationFailedError
    - Unknown (entity, field, kind) falls back to the field's "required" message

Design Decisions:
    - Mapping table keyed by (entity, field, kind) instead of per-mutation
      switch statements: one place to read every user-facing message
    - FIELD_PRIORITY decides which violation is reported when several fields fail
"""

from dataclasses import dataclass

from catalog.core.domain_types import (
    AUTHOR_NAME_MIN_LENGTH, BOOK_TITLE_MIN_LENGTH, USERNAME_MIN_LENGTH,
)
from catalog.core.errors import StoreValidationError, ValidationFailedError

REQUIRED = "required"
MINLENGTH = "minlength"
UNIQUE = "unique"


@dataclass(frozen=True)
class FieldRule:
    """Constraints for one persisted field."""
    required: bool = False
    min_length: int | None = None
    unique: bool = False


FIELD_RULES: dict[str, dict[str, FieldRule]] = {
    "author": {
        "name": FieldRule(
            required=True, min_length=AUTHOR_NAME_MIN_LENGTH, unique=True,
        ),
    },
    "book": {
        "title": FieldRule(
            required=True, min_length=BOOK_TITLE_MIN_LENGTH, unique=True,
        ),
        "published": FieldRule(required=True),
        "genres": FieldRule(required=True),
        "author_id": FieldRule(required=True),
    },
    "user": {
        "username": FieldRule(
            required=True, min_length=USERNAME_MIN_LENGTH, unique=True,
        ),
        "favorite_genre": FieldRule(required=True),
    },
}

FIELD_PRIORITY: dict[str, tuple[str, ...]] = {
    "author": ("name",),
    "book": ("title", "published", "genres", "author_id"),
    "user": ("favorite_genre", "username"),
}

VALIDATION_MESSAGES: dict[tuple[str, str, str], str] = {
    ("author", "name", REQUIRED): "Name is required!",
    ("author", "name", MINLENGTH): (
        f"Name must be at least {AUTHOR_NAME_MIN_LENGTH} characters long!"
    ),
    ("book", "title", REQUIRED): "Title is required!",
    ("book", "title", MINLENGTH): (
        f"Title must be at least {BOOK_TITLE_MIN_LENGTH} characters long!"
    ),
    ("book", "published", REQUIRED): "Published year is required!",
    ("book", "genres", REQUIRED): "At least one genre is required!",
    ("book", "author_id", REQUIRED): "Author is required!",
    ("user", "username", REQUIRED): "Username is required!",
    ("user", "username", MINLENGTH): (
        f"Username must be at least {USERNAME_MIN_LENGTH} characters long!"
    ),
    ("user", "favorite_genre", REQUIRED): "Favorite genre is required",
}


def check_fields(entity: str, values: dict) -> dict[str, str]:
    """Return {field: violation_kind} for every rule the values break."""
    errors: dict[str, str] = {}
    for name, rule in FIELD_RULES.get(entity, {}).items():
        value = values.get(name)
        if _is_missing(value):
            if rule.required:
                errors[name] = REQUIRED
            continue
        if rule.min_length is not None and len(value) < rule.min_length:
            errors[name] = MINLENGTH
    return errors


def unique_fields(entity: str) -> list[str]:
    return [
        name for name, rule in FIELD_RULES.get(entity, {}).items() if rule.unique
    ]


def to_validation_failed(exc: StoreValidationError) -> ValidationFailedError:
    """Map a store violation to its user-facing error."""
    field = _reported_field(exc.entity, exc.errors)
    kind = exc.errors.get(field, REQUIRED)
    message = (
        VALIDATION_MESSAGES.get((exc.entity, field, kind))
        or VALIDATION_MESSAGES.get((exc.entity, field, REQUIRED))
        or f"{field} is invalid"
    )
    return ValidationFailedError(message, exc.entity, field, kind)


def _reported_field(entity: str, errors: dict[str, str]) -> str:
    for name in FIELD_PRIORITY.get(entity, ()):
        if name in errors:
            return name
    return next(iter(errors), "")


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple)) and len(value) == 0:
        return True
    return False
