"""Unit tests for middleware."""
import pytest
from types import SimpleNamespace
from unittest.mock import Mock

from starlette.background import BackgroundTask, BackgroundTasks

from convention_voting.core.security import AuthUser
from convention_voting.middleware.activity import ActivityLoggingMiddleware
from convention_voting.middleware.logging import LoggingMiddleware
from convention_voting.services.activity import record_activity_safely


def make_request(path="/api/v1/voter/motions/open", headers=None, user=None):
    request = Mock()
    request.state = SimpleNamespace()
    if user is not None:
        request.state.user = user
    request.method = "GET"
    request.url = Mock()
    request.url.path = path
    request.client = Mock()
    request.client.host = "127.0.0.1"
    request.query_params = {}
    request.headers = headers or {}
    return request


def make_response(status_code=200):
    response = Mock()
    response.headers = {}
    response.status_code = status_code
    response.background = None
    return response


@pytest.mark.unit
class TestLoggingMiddleware:

    @pytest.mark.asyncio
    async def test_request_id_generated(self):
        request = make_request()
        response = make_response()

        async def call_next(req):
            assert isinstance(req.state.request_id, str)
            return response

        result = await LoggingMiddleware(Mock()).dispatch(request, call_next)

        assert result.headers["X-Request-ID"] == request.state.request_id
        assert len(request.state.request_id) > 0

    @pytest.mark.asyncio
    async def test_incoming_request_id_reused(self):
        request = make_request(headers={"X-Request-ID": "proxy-123"})

        async def call_next(req):
            return make_response()

        result = await LoggingMiddleware(Mock()).dispatch(request, call_next)

        assert result.headers["X-Request-ID"] == "proxy-123"

    @pytest.mark.asyncio
    async def test_exception_propagates(self):
        async def call_next(req):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await LoggingMiddleware(Mock()).dispatch(make_request(), call_next)


@pytest.mark.unit
class TestActivityLoggingMiddleware:

    @pytest.mark.asyncio
    async def test_authenticated_request_schedules_write(self):
        request = make_request(path="/api/v1/voter/motions/7", user=AuthUser(user_id="u-1"))
        response = make_response()

        async def call_next(req):
            return response

        middleware = ActivityLoggingMiddleware(Mock(), enabled=True, max_path_length=500)
        result = await middleware.dispatch(request, call_next)

        assert isinstance(result.background, BackgroundTask)
        assert result.background.func is record_activity_safely
        assert result.background.args == ("u-1", "/api/v1/voter/motions/7")
        assert result.background.kwargs == {"max_path_length": 500}

    @pytest.mark.asyncio
    async def test_anonymous_request_not_recorded(self):
        response = make_response(status_code=401)

        async def call_next(req):
            return response

        result = await ActivityLoggingMiddleware(Mock(), enabled=True).dispatch(make_request(), call_next)

        assert result.background is None

    @pytest.mark.asyncio
    async def test_disabled(self):
        request = make_request(user=AuthUser(user_id="u-1"))

        async def call_next(req):
            return make_response()

        result = await ActivityLoggingMiddleware(Mock(), enabled=False).dispatch(request, call_next)

        assert result.background is None

    @pytest.mark.asyncio
    async def test_existing_background_task_kept(self):
        request = make_request(user=AuthUser(user_id="u-1"))
        response = make_response()
        existing = BackgroundTask(Mock())
        response.background = existing

        async def call_next(req):
            return response

        result = await ActivityLoggingMiddleware(Mock(), enabled=True).dispatch(request, call_next)

        assert isinstance(result.background, BackgroundTasks)
        assert result.background.tasks[0] is existing
        assert result.background.tasks[1].func is record_activity_safely
