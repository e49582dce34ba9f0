"""API middleware for the layout service."""

from canvaslayout.api.middleware.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
]
