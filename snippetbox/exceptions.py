"""
Snippetbox — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the failure modes of a request.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) map them to HTTP
       status codes. The context is logged server-side and never returned
       to the client.
Who:   Raised by the store, the render helper and the router translation in
       main.py; caught by the global handlers.

Exception Hierarchy:
    SnippetboxError (base)
    ├── NotFoundError           → 404 Not Found
    ├── MethodNotAllowedError   → 405 Method Not Allowed (+ Allow header)
    ├── StorageError            → 500 Internal Server Error
    └── TemplateRenderError     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional, Sequence


class SnippetboxError(Exception):
    """
    Base exception for all Snippetbox application errors.

    Attributes:
        message:  Human-readable description (logged; never sent for 5xx)
        context:  Additional debug info (logged, NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(SnippetboxError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown or expired snippet id, malformed id, unmatched URL path.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class MethodNotAllowedError(SnippetboxError):
    """
    Raised when a route exists for the path but not for the request method.

    HTTP:    405 Method Not Allowed, with an `Allow` header listing `allowed`.
    """

    def __init__(
        self,
        allowed: Sequence[str] = ("POST",),
        context: Optional[Dict[str, Any]] = None,
    ):
        self.allowed = tuple(allowed)
        ctx = context or {}
        ctx["allowed"] = list(self.allowed)
        super().__init__(
            message=f"Method not allowed. Allowed: {', '.join(self.allowed)}",
            context=ctx,
        )


class StorageError(SnippetboxError):
    """
    Raised when a database operation fails unexpectedly.

    When:    Connection lost mid-query, constraint violation, driver error.
    HTTP:    500 Internal Server Error

    The response body is always the generic status text; the SQL error is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TemplateRenderError(SnippetboxError):
    """
    Raised when a handler asks `render()` for a page that is not in the
    template cache.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Template rendering failed",
        page: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if page:
            ctx["page"] = page
        super().__init__(message=message, context=ctx)
        self.page = page
