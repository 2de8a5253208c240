"""
Snippetbox — Snippet Store
============================

What:  The persistence layer for snippets: insert, get-by-id, latest.
How:   Each operation is one SQL statement executed on the AsyncSession the
       caller supplies. Rows come back as frozen `Snippet` schemas.
Who:   Called by the route handlers in routes/snippets.py.

Expiry is enforced at query time: both `get` and `latest` only see rows whose
`expires` is after the current UTC time. Nothing is ever deleted.

Error Translation:
    - No live row for an id          → NotFoundError
    - Any SQLAlchemyError            → StorageError (cause logged server-side)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snippetbox.exceptions import NotFoundError, StorageError
from snippetbox.models.snippet import Snippet as SnippetRow
from snippetbox.schemas.snippet import Snippet

logger = logging.getLogger(__name__)

LATEST_LIMIT = 10


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnippetStore:
    """
    Stateless data-access object for the `snippets` table.

    The clock is injectable so tests can move "now" past an expiry without
    sleeping.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock

    async def insert(
        self,
        db: AsyncSession,
        title: str,
        content: str,
        expires_days: int,
    ) -> int:
        """
        Store a new snippet and return its database-assigned id.

        created = now (UTC), expires = now + `expires_days` days.

        The transaction is committed here so the id is visible to the
        redirected GET that normally follows.

        Raises:
            StorageError: The insert or commit failed.
        """
        now = self._clock()
        row = SnippetRow(
            title=title,
            content=content,
            created=now,
            expires=now + timedelta(days=expires_days),
        )
        try:
            db.add(row)
            await db.flush()
            snippet_id = row.id
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error inserting snippet: %s", e, exc_info=True)
            raise StorageError(
                message="Could not store the snippet",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Snippet %d created (expires in %d days)", snippet_id, expires_days)
        return snippet_id

    async def get(self, db: AsyncSession, snippet_id: int) -> Snippet:
        """
        Fetch one live snippet by id.

        Raises:
            NotFoundError: No row with this id, or the row has expired.
            StorageError: The query failed.
        """
        query = select(SnippetRow).where(
            SnippetRow.id == snippet_id,
            SnippetRow.expires > self._clock(),
        )
        try:
            result = await db.execute(query)
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching snippet %d: %s", snippet_id, e, exc_info=True)
            raise StorageError(
                message="Could not retrieve the snippet",
                context={"snippet_id": snippet_id, "error_type": type(e).__name__},
            ) from e

        if row is None:
            raise NotFoundError(resource="snippet", resource_id=str(snippet_id))

        return Snippet.model_validate(row)

    async def latest(self, db: AsyncSession) -> List[Snippet]:
        """
        Return up to 10 live snippets, newest first.

        An empty list is a valid result.

        Raises:
            StorageError: The query failed.
        """
        query = (
            select(SnippetRow)
            .where(SnippetRow.expires > self._clock())
            .order_by(SnippetRow.created.desc(), SnippetRow.id.desc())
            .limit(LATEST_LIMIT)
        )
        try:
            result = await db.execute(query)
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing snippets: %s", e, exc_info=True)
            raise StorageError(
                message="Could not retrieve snippets",
                context={"error_type": type(e).__name__},
            ) from e

        return [Snippet.model_validate(row) for row in rows]
