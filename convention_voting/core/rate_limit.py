"""Rate limiting configuration."""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address

USER_KEY_PREFIX = "user:"


def get_client_ip(request):
    """Get client IP for rate limiting, considering proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


def get_rate_limit_key(request):
    """Limit authenticated callers per user, anonymous ones per client IP.

    The limited endpoints run after ``get_current_user`` has resolved, so the
    user is already on ``request.state`` when slowapi asks for the key.
    """
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"{USER_KEY_PREFIX}{user.user_id}"
    return get_client_ip(request)


# Uses Redis if REDIS_URL is set, falls back to memory for local dev
limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["100/minute"],
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    strategy="fixed-window"
)

# Per-user budgets. A voter casts at most one ballot per motion, so the vote
# limit only has to absorb retries.
RATE_LIMITS = {
    "vote": "30/minute",
    "voter_read": "120/minute",
    "watcher_read": "200/minute",
    "admin_write": "200/minute",
}
