"""Middleware package."""
from convention_voting.middleware.activity import ActivityLoggingMiddleware
from convention_voting.middleware.logging import LoggingMiddleware

__all__ = ["ActivityLoggingMiddleware", "LoggingMiddleware"]
