"""Shared API dependencies."""
from datetime import datetime

from convention_voting.core.security import (
    AuthUser,
    get_current_user,
    require_admin,
    require_voter,
    require_watcher,
)
from convention_voting.core.utils import utc_now
from convention_voting.db import get_db, get_db_context


def get_now() -> datetime:
    """The request's single notion of "now".

    FastAPI caches dependencies per request, so every service call made for one
    request sees the same instant. Tests override this to pin the clock.
    """
    return utc_now()


__all__ = [
    "AuthUser",
    "get_current_user",
    "get_db",
    "get_db_context",
    "get_now",
    "require_admin",
    "require_voter",
    "require_watcher",
]
