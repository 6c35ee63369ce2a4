"""Field-Demand Analysis — decides which derived fields a read actually needs.

Invariants:
    - A selection tree is dict[str, dict]: field name -> nested selection,
      empty dict for a scalar leaf, at most one relation hop deep
    - parse_selection returns None for absent or malformed text (never raises)
    - analyze_* are pure: identical selections always yield identical decisions
    - Absent or malformed selections yield FieldDemand.conservative()

Design Decisions:
    - Selection is an explicit, serializable structure instead of a transport
      AST: the planner never sees HTTP or query-language objects
    - Both snake_case and camelCase names accepted for the count field
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass

Selection = dict[str, "Selection"]

MAX_SELECTION_DEPTH: int = 1
BOOK_COUNT_FIELDS = frozenset({"book_count", "bookCount"})

_TOKEN = re.compile(r"\s*([A-Za-z_][A-Za-z0-9_]*|[{},]|\S)")
_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class FieldDemand:
    """Decision set produced by field-demand analysis."""
    needs_author_book_count: bool = True

    @classmethod
    def conservative(cls) -> "FieldDemand":
        """Compute every derivable field."""
        return cls(needs_author_book_count=True)


class _MalformedSelection(Exception):
    pass


# ─── Parsing ─────────────────────────────────────────────────────

def parse_selection(text: str | None) -> Selection | None:
    """Parse ``title,author{name,book_count}`` into a selection tree."""
    if text is None or not text.strip():
        return None
    tokens = _TOKEN.findall(text)
    try:
        tree, pos = _parse_fields(tokens, 0, depth=0)
    except _MalformedSelection:
        return None
    if pos != len(tokens):
        return None
    return tree


def _parse_fields(tokens: list[str], pos: int, depth: int) -> tuple[Selection, int]:
    tree: Selection = {}
    while True:
        if pos >= len(tokens) or not _NAME.fullmatch(tokens[pos]):
            raise _MalformedSelection
        name = tokens[pos]
        pos += 1
        children: Selection = {}
        if pos < len(tokens) and tokens[pos] == "{":
            if depth >= MAX_SELECTION_DEPTH:
                raise _MalformedSelection
            children, pos = _parse_fields(tokens, pos + 1, depth + 1)
            if pos >= len(tokens) or tokens[pos] != "}":
                raise _MalformedSelection
            pos += 1
        tree.setdefault(name, {}).update(children)
        if pos < len(tokens) and tokens[pos] == ",":
            pos += 1
            continue
        return tree, pos


# ─── Analysis ────────────────────────────────────────────────────

def analyze_book_selection(selection: object) -> FieldDemand:
    """Book reads: count demanded iff requested under the author relation."""
    if not _is_well_formed(selection):
        return FieldDemand.conservative()
    author = selection.get("author")
    if author is None:
        return FieldDemand(needs_author_book_count=False)
    return FieldDemand(needs_author_book_count=_requests_book_count(author))


def analyze_author_selection(selection: object) -> FieldDemand:
    """Author reads: count demanded iff requested at the top level."""
    if not _is_well_formed(selection):
        return FieldDemand.conservative()
    return FieldDemand(needs_author_book_count=_requests_book_count(selection))


def _requests_book_count(selection: Mapping) -> bool:
    return any(name in selection for name in BOOK_COUNT_FIELDS)


def _is_well_formed(node: object, depth: int = 0) -> bool:
    if not isinstance(node, Mapping):
        return False
    for name, children in node.items():
        if not isinstance(name, str) or not name:
            return False
        if not isinstance(children, Mapping):
            return False
        if children and depth >= MAX_SELECTION_DEPTH:
            return False
        if not _is_well_formed(children, depth + 1):
            return False
    return True
