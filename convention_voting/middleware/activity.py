"""Activity logging middleware for quorum tracking."""
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.background import BackgroundTask, BackgroundTasks
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from convention_voting.core.config import settings
from convention_voting.services.activity import record_activity_safely


class ActivityLoggingMiddleware(BaseHTTPMiddleware):
    """Record one activity row per authenticated request.

    The write runs as a background task after the response has been sent, on
    its own session. It never changes the response, and a failed write is
    only logged.
    """

    def __init__(
        self,
        app: ASGIApp,
        enabled: Optional[bool] = None,
        max_path_length: Optional[int] = None,
    ):
        super().__init__(app)
        self.enabled = settings.ACTIVITY_LOGGING_ENABLED if enabled is None else enabled
        self.max_path_length = max_path_length or settings.MAX_ACTIVITY_PATH_LENGTH

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        # Set by get_current_user once the bearer token has been verified
        user = getattr(request.state, "user", None)
        if not self.enabled or user is None:
            return response

        task = BackgroundTask(
            record_activity_safely,
            user.user_id,
            request.url.path,
            max_path_length=self.max_path_length,
        )
        if response.background is None:
            response.background = task
        else:
            response.background = BackgroundTasks([response.background, task])
        return response
