"""
Snippetbox — Test Configuration (conftest.py)
===============================================

Shared pytest fixtures for the test suite.

Fixture Hierarchy (all function-scoped):
    ├── settings:         Settings pointing at a per-test SQLite file and the
    │                     repository's ui/ templates and static assets
    ├── app:              create_app(settings) with the schema created
    ├── test_client:      HTTPX AsyncClient talking to `app` over ASGI
    ├── db_session:       a real AsyncSession on the test database
    ├── mock_db_session:  AsyncMock session for unit tests
    └── template_dir:     a minimal template tree in tmp_path
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from snippetbox.config import Settings
from snippetbox.database import Base
from snippetbox.main import create_app

REPO_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'snippetbox_test.db'}",
        template_dir=str(REPO_ROOT / "ui" / "html"),
        static_dir=str(REPO_ROOT / "ui" / "static"),
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings):
    """
    Application wired to a fresh SQLite database.

    ASGITransport does not run the lifespan, so the tables are created here
    and the engine is disposed on teardown.
    """
    application = create_app(settings)
    async with application.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_home(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def db_session(app):
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = row
        result = await store.get(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def template_dir(tmp_path):
    """base.html + one partial + two pages, mirroring ui/html."""
    root = tmp_path / "html"
    (root / "partials").mkdir(parents=True)
    (root / "pages").mkdir()
    (root / "base.html").write_text(
        "<title>{% block title %}{% endblock %}</title>"
        "{% include 'partials/nav.html' %}"
        "<main>{% block main %}{% endblock %}</main>"
    )
    (root / "partials" / "nav.html").write_text("<nav>nav</nav>")
    (root / "pages" / "home.html").write_text(
        "{% extends 'base.html' %}"
        "{% block title %}Home{% endblock %}"
        "{% block main %}{% for s in snippets %}<p>{{ s.title }}</p>{% endfor %}{% endblock %}"
    )
    (root / "pages" / "view.html").write_text(
        "{% extends 'base.html' %}"
        "{% block main %}<pre>{{ snippet.content }}</pre>{% endblock %}"
    )
    return root
