"""HTTP middleware."""

from ai_editor.middleware.logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
