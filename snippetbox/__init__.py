"""
Snippetbox — Application Package
==================================

A small server-rendered web application for sharing text snippets that expire.

Architecture:

    ┌─────────────────────────────────────┐
    │      Routes (HTTP handlers)         │  ← request validation, status codes
    ├─────────────────────────────────────┤
    │      Templates (cache + render)     │  ← Jinja2 pages streamed as HTML
    ├─────────────────────────────────────┤
    │      Services (SnippetStore)        │  ← single-statement SQL operations
    ├─────────────────────────────────────┤
    │      Models & Schemas (Data)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database (Persistence)         │  ← async engine, per-request session
    └─────────────────────────────────────┘

Run with `python -m snippetbox --dsn <database-url>`.
"""

__version__ = "1.0.0"
