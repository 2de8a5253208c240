"""
Snippetbox — Template Cache & Render Helper
=============================================

What:  Pre-compiles the HTML templates into named template sets at startup and
       renders them into streaming HTML responses.
How:   One Jinja2 Environment rooted at the template directory. For every
       `pages/*.html` file a TemplateSet is compiled from `base.html`, every
       `partials/*.html` file and the page itself. Pages extend `base.html`,
       so rendering a page executes the base layout with the page's blocks.
Who:   `create_app()` builds the cache; route handlers call `render()`.
When:  Built once per process. Never reloaded or mutated afterwards.

Directory layout:
    ui/html/
    ├── base.html            ← layout, defines the "title" and "main" blocks
    ├── partials/*.html      ← fragments pulled in with {% include %}
    └── pages/*.html         ← one file per page; key in the cache

Any Jinja2 TemplateError while building (syntax error, missing base layout)
propagates to the caller and aborts startup.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple

from fastapi import Request
from fastapi.responses import StreamingResponse
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    select_autoescape,
)

from snippetbox.exceptions import TemplateRenderError
from snippetbox.schemas.snippet import TemplateData

logger = logging.getLogger(__name__)

BASE_TEMPLATE = "base.html"
PARTIALS_DIR = "partials"
PAGES_DIR = "pages"


def human_date(value: Optional[datetime]) -> str:
    """Format a timestamp like "18 Oct 2026 at 09:15"; None renders empty."""
    if value is None:
        return ""
    return value.strftime("%d %b %Y at %H:%M")


@dataclass(frozen=True)
class TemplateSet:
    """
    One compiled page, ready to execute.

    Only `page` is rendered; it pulls in the base layout and partials itself.
    `partials` holds the compiled fragments so each one is syntax-checked at
    startup even if no page includes it yet.
    """
    name: str
    partials: Tuple[Template, ...]
    page: Template

    def generate(self, data: TemplateData) -> Iterator[str]:
        """Yield rendered HTML chunks for `data`."""
        # dict(model) keeps nested models as objects for attribute access
        return self.page.generate(**dict(data))


class TemplateCache(Mapping[str, TemplateSet]):
    """
    Read-only mapping of page file name ("home.html") → TemplateSet.

    No method mutates the cache after construction, so it is shared by
    concurrent requests without locking.
    """

    def __init__(self, sets: Mapping[str, TemplateSet]):
        self._sets = MappingProxyType(dict(sets))

    def __getitem__(self, name: str) -> TemplateSet:
        return self._sets[name]

    def __iter__(self):
        return iter(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    @classmethod
    def from_directory(cls, template_dir: str) -> "TemplateCache":
        """
        Compile every page under `template_dir/pages` into a TemplateSet.

        Raises:
            jinja2.TemplateError: A template failed to load or parse.
        """
        root = Path(template_dir)
        env = create_environment(root)

        # Compiled up front so a missing or broken layout fails even with no pages
        env.get_template(BASE_TEMPLATE)
        partials = tuple(
            env.get_template(f"{PARTIALS_DIR}/{path.name}")
            for path in sorted((root / PARTIALS_DIR).glob("*.html"))
        )

        sets = {}
        for path in sorted((root / PAGES_DIR).glob("*.html")):
            page = env.get_template(f"{PAGES_DIR}/{path.name}")
            sets[path.name] = TemplateSet(
                name=path.name,
                partials=partials,
                page=page,
            )
            logger.debug("Compiled template set %s", path.name)

        logger.info("Template cache built: %d pages from %s", len(sets), root.resolve())
        return cls(sets)


def create_environment(root: Path) -> Environment:
    """
    Jinja2 environment for the HTML templates.

    - autoescape for .html: snippet content is user-visible text
    - StrictUndefined: referencing a missing field is an error, not ""
    - cache_size=-1, auto_reload=False: compiled templates are never evicted
      or re-read from disk
    """
    env = Environment(
        loader=FileSystemLoader(str(root)),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        cache_size=-1,
        auto_reload=False,
    )
    env.filters["human_date"] = human_date
    return env


def _stream(template_set: TemplateSet, data: TemplateData) -> Iterator[str]:
    try:
        yield from template_set.generate(data)
    except TemplateError:
        # Status and headers are already sent; the body ends here.
        logger.error("Error rendering %s after response started", template_set.name, exc_info=True)
        raise


def render(
    request: Request,
    status_code: int,
    page: str,
    data: TemplateData,
) -> StreamingResponse:
    """
    Look up `page` in the app's template cache and stream it with `status_code`.

    Raises:
        TemplateRenderError: No template set named `page` (→ 500).
    """
    cache: TemplateCache = request.app.state.template_cache
    template_set = cache.get(page)
    if template_set is None:
        raise TemplateRenderError(message=f"the template {page} does not exist", page=page)

    return StreamingResponse(
        _stream(template_set, data),
        status_code=status_code,
        media_type="text/html; charset=utf-8",
    )
