"""
Snippetbox — Snippet SQLAlchemy Model
=======================================

What:  ORM model representing the `snippets` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for
       migrations and the test suite creates the table from its metadata.
Who:   Used by SnippetStore for insert/get/latest.

Table layout:
    - id: integer primary key assigned by the database (autoincrement)
    - title: short title, at most 100 characters
    - content: full snippet body
    - created / expires: UTC timestamps; a row is live while expires > now

Rows are never updated or deleted by the application. Expired rows stay in
the table and are filtered out at query time.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class Snippet(Base):
    """
    A stored text note with an expiry.

    Query Patterns:
        - Latest: WHERE expires > :now ORDER BY created DESC, id DESC LIMIT 10
          → uses idx_snippets_created
        - Get: WHERE id = :id AND expires > :now → primary key lookup
    """

    __tablename__ = "snippets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(100), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Timezone-aware columns; values are always written in UTC
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_snippets_created", "created"),
    )

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title='{self.title}', expires='{self.expires}')>"
