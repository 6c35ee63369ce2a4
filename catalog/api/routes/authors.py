"""Author Routes — author reads, counts and the birth-year edit.

Invariants:
    - GET /authors computes book_count only when `fields` asks for it
      (or when no/malformed selection is given)
    - PUT /authors/{name}/born requires a bearer token; unknown name returns null
"""

from fastapi import APIRouter, Depends, Query

from catalog.api.dependencies import (
    get_book_mutations, get_book_queries, get_current_user,
)
from catalog.core.field_demand import analyze_author_selection, parse_selection
from catalog.core.repository_protocols import UserLike
from catalog.schemas.catalog import AuthorBirthYear
from catalog.services.book_mutations import BookMutations
from catalog.services.book_queries import BookQueries

router = APIRouter(prefix="/api/v1/authors", tags=["authors"])


@router.get("")
async def all_authors(
    fields: str | None = Query(None),
    queries: BookQueries = Depends(get_book_queries),
):
    demand = analyze_author_selection(parse_selection(fields))
    return await queries.all_authors(demand)


@router.get("/count")
async def author_count(queries: BookQueries = Depends(get_book_queries)):
    return {"count": await queries.author_count()}


@router.put("/{name}/born")
async def edit_author(
    name: str,
    body: AuthorBirthYear,
    current_user: UserLike | None = Depends(get_current_user),
    mutations: BookMutations = Depends(get_book_mutations),
):
    """Set an author's birth year. Returns null if no author has that name."""
    return await mutations.edit_author(current_user, name, body.set_born_to)
