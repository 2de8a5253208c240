"""
Snippetbox — Middleware Package
=================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Logging] → Route Handler

The access log runs inside the request-ID middleware so every line carries
the request's ID.
"""
