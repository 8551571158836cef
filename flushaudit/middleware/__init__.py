"""ASGI middleware."""

from flushaudit.middleware.blame_context import BlameContextMiddleware

__all__ = ["BlameContextMiddleware"]
