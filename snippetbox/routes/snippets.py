"""
Snippetbox — Snippet Route Handlers
=====================================

What:  GET / (latest snippets), GET /snippet/view?id=N (one snippet),
       POST /snippet/create (store a snippet, redirect to it).
How:   Each handler validates the request, calls SnippetStore with the
       request's session and renders a page through the template cache.
       Failures are raised as application exceptions and turned into
       responses by the global handlers in main.py.

Status mapping (GET and HEAD are served alike for the two pages):
    /                 200 page │ 500 store error
    /snippet/view     200 page │ 404 bad id / no live row │ 500 store error
    /snippet/create   303 redirect │ 405 wrong method (router) │ 500 store error
"""

import logging
import re

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from snippetbox.database import get_db_session
from snippetbox.exceptions import NotFoundError
from snippetbox.schemas.snippet import TemplateData
from snippetbox.services.snippet_store import SnippetStore
from snippetbox.templates import render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Snippets"], redirect_slashes=False)

# Placeholder content until the create form exists
PLACEHOLDER_TITLE = "O snail"
PLACEHOLDER_CONTENT = "O snail\nClimb Mount Fuji,\nBut slowly, slowly!\n\n– Kobayashi Issa"
PLACEHOLDER_EXPIRES_DAYS = 7

_INTEGER = re.compile(r"[+-]?[0-9]+")

# Upper bound of the `snippets.id` column (32-bit signed INTEGER)
MAX_SNIPPET_ID = 2**31 - 1


def get_snippet_store(request: Request) -> SnippetStore:
    """Dependency returning the SnippetStore built by create_app()."""
    return request.app.state.snippets


def parse_snippet_id(raw: str | None) -> int:
    """
    Convert the `id` query value into a positive integer.

    Raises:
        NotFoundError: Missing, not a base-10 integer, less than 1, or
            larger than any id the database can hold.
    """
    if raw is None or not _INTEGER.fullmatch(raw):
        raise NotFoundError(resource="snippet", resource_id=raw)
    snippet_id = int(raw)
    if not 1 <= snippet_id <= MAX_SNIPPET_ID:
        raise NotFoundError(resource="snippet", resource_id=raw)
    return snippet_id


@router.api_route(
    "/",
    methods=["GET", "HEAD"],
    response_class=HTMLResponse,
    summary="List the latest snippets",
)
async def home(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    store: SnippetStore = Depends(get_snippet_store),
):
    snippets = await store.latest(db)
    return render(request, 200, "home.html", TemplateData(snippets=snippets))


@router.api_route(
    "/snippet/view",
    methods=["GET", "HEAD"],
    response_class=HTMLResponse,
    summary="View one snippet",
)
async def snippet_view(
    request: Request,
    raw_id: str | None = Query(default=None, alias="id"),
    db: AsyncSession = Depends(get_db_session),
    store: SnippetStore = Depends(get_snippet_store),
):
    """
    Render a single live snippet.

    The id arrives as a raw string so that malformed values produce the same
    404 as unknown ones instead of FastAPI's 422.
    """
    snippet_id = parse_snippet_id(raw_id)
    snippet = await store.get(db, snippet_id)
    return render(request, 200, "view.html", TemplateData(snippet=snippet))


@router.post(
    "/snippet/create",
    status_code=303,
    response_class=RedirectResponse,
    summary="Create a snippet",
)
async def snippet_create(
    db: AsyncSession = Depends(get_db_session),
    store: SnippetStore = Depends(get_snippet_store),
):
    """
    Store a new snippet and redirect to its page with 303 See Other, so the
    browser follows up with a GET.

    Only POST is routed here; other methods get 405 with `Allow: POST` from
    the router.
    """
    snippet_id = await store.insert(
        db,
        title=PLACEHOLDER_TITLE,
        content=PLACEHOLDER_CONTENT,
        expires_days=PLACEHOLDER_EXPIRES_DAYS,
    )
    return RedirectResponse(url=f"/snippet/view?id={snippet_id}", status_code=303)
