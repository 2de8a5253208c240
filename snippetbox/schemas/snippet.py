"""
Snippetbox — Pydantic Schemas
===============================

What:  Pydantic models for data that leaves the persistence layer.
How:   `Snippet` is built from ORM rows (`from_attributes`) so templates never
       touch live SQLAlchemy objects; `TemplateData` is the per-request render
       envelope; `HealthResponse` is the JSON body of GET /health.
Who:   Returned by SnippetStore, consumed by the render helper and templates.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


class Snippet(BaseModel):
    """
    Read-only view of one snippet row.

    Frozen: a snippet is never updated once stored.
    """
    id: int = Field(ge=1, description="Store-assigned identifier")
    title: str
    content: str
    created: datetime = Field(description="Creation time (UTC)")
    expires: datetime = Field(description="Expiry time (UTC)")

    model_config = {"from_attributes": True, "frozen": True}


def _current_year() -> int:
    return datetime.now(timezone.utc).year


class TemplateData(BaseModel):
    """
    Render envelope handed to template execution.

    Carries at most one of `snippet` / `snippets`, plus the cross-cutting
    fields every page can use (the footer reads `current_year`).
    """
    snippet: Optional[Snippet] = None
    snippets: List[Snippet] = Field(default_factory=list)
    current_year: int = Field(default_factory=_current_year)


class HealthResponse(BaseModel):
    """Body of GET /health."""
    status: str = Field(description="healthy or unhealthy")
    database: str = Field(description="connected or unreachable")
    version: str
    uptime_seconds: float
