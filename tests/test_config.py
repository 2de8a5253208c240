"""
Snippetbox — Configuration & Startup Tests
============================================

What we test:
    ✅ Listen-address parsing and validation
    ✅ Log level normalisation
    ✅ CLI flags override Settings fields
    ✅ Startup failures exit non-zero without serving
    ✅ create_app fails fast on bad template or static directories
    ✅ The required route table is checked on the routers themselves
"""

import pytest
from fastapi import APIRouter
from jinja2 import TemplateNotFound
from pydantic import ValidationError

from snippetbox.__main__ import build_parser, main, settings_overrides
from snippetbox.config import Settings, split_addr
from snippetbox.main import REQUIRED_ROUTES, check_routes, create_app
from snippetbox.routes import health, snippets


class TestSplitAddr:

    @pytest.mark.parametrize(
        "addr, expected",
        [
            (":4000", ("0.0.0.0", 4000)),
            ("127.0.0.1:8080", ("127.0.0.1", 8080)),
            ("localhost:80", ("localhost", 80)),
            ("[::1]:4000", ("::1", 4000)),
        ],
    )
    def test_valid(self, addr, expected):
        assert split_addr(addr) == expected

    @pytest.mark.parametrize("addr", ["4000", ":http", "host:70000", ""])
    def test_invalid(self, addr):
        with pytest.raises(ValueError):
            split_addr(addr)


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("ADDR", "STATIC_DIR", "TEMPLATE_DIR", "DATABASE_URL", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.addr == ":4000"
        assert settings.static_dir == "./ui/static"
        assert settings.template_dir == "./ui/html"
        assert settings.listen_port == 4000
        assert settings.is_sqlite is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ADDR", "127.0.0.1:9000")
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///env.db")

        settings = Settings(_env_file=None)

        assert settings.listen_host == "127.0.0.1"
        assert settings.listen_port == 9000
        assert settings.is_sqlite is True

    def test_log_level_is_upper_cased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_invalid_addr(self):
        with pytest.raises(ValidationError):
            Settings(addr="no-port")


class TestCommandLine:

    @pytest.fixture(autouse=True)
    def quiet_logging(self, monkeypatch):
        monkeypatch.setattr("snippetbox.__main__.setup_logging", lambda *args, **kwargs: None)

    def test_flags_map_to_settings_fields(self):
        args = build_parser().parse_args(
            ["--addr", ":8080", "--static-dir", "/srv/static", "--dsn", "sqlite+aiosqlite:///x.db"]
        )

        assert settings_overrides(args) == {
            "addr": ":8080",
            "static_dir": "/srv/static",
            "database_url": "sqlite+aiosqlite:///x.db",
        }

    def test_no_flags_no_overrides(self):
        assert settings_overrides(build_parser().parse_args([])) == {}

    def test_log_level_flag_case_insensitive(self):
        args = build_parser().parse_args(["--log-level", "debug"])

        assert settings_overrides(args) == {"log_level": "DEBUG"}

    def test_invalid_addr_exits_non_zero(self):
        assert main(["--addr", "nonsense"]) == 1

    def test_template_error_exits_non_zero(self, tmp_path):
        exit_code = main([
            "--template-dir", str(tmp_path / "no-templates"),
            "--dsn", f"sqlite+aiosqlite:///{tmp_path / 'x.db'}",
        ])

        assert exit_code == 1


class TestCreateAppFailFast:

    def test_missing_template_dir(self, settings, tmp_path):
        bad = settings.model_copy(update={"template_dir": str(tmp_path / "nowhere")})

        with pytest.raises(TemplateNotFound):
            create_app(bad)

    def test_missing_static_dir(self, settings, tmp_path):
        bad = settings.model_copy(update={"static_dir": str(tmp_path / "nowhere")})

        with pytest.raises(RuntimeError):
            create_app(bad)

    def test_valid_settings_build_an_app(self, settings):
        app = create_app(settings)

        assert app.state.template_cache["home.html"].name == "home.html"


class TestCheckRoutes:

    def test_application_routers_pass(self):
        check_routes((snippets.router, health.router))

    def test_missing_route_is_reported(self):
        with pytest.raises(RuntimeError, match="/snippet/create"):
            check_routes((health.router,))

    def test_wrong_method_does_not_count(self):
        router = APIRouter()

        @router.get("/snippet/create")
        async def create_page():
            return None

        with pytest.raises(RuntimeError, match="POST"):
            check_routes((router,))

    def test_required_routes_are_all_declared_by_snippet_router(self):
        declared = {
            (route.path, method)
            for route in snippets.router.routes
            for method in route.methods
        }

        assert REQUIRED_ROUTES <= declared
