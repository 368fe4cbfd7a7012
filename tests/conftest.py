"""Shared test fixtures and configuration."""
import os

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from contextlib import contextmanager  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from convention_voting.api.deps import get_db, get_now  # noqa: E402
from convention_voting.core.security import create_access_token  # noqa: E402
from convention_voting.db.base import Base  # noqa: E402
from convention_voting.main import app  # noqa: E402
from tests import utils  # noqa: E402


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

# Fixed clock for deterministic voting windows
FIXED_NOW = datetime(2026, 3, 14, 15, 0, 0, tzinfo=timezone.utc)


class Clock:
    """Mutable stand-in for the request clock."""

    def __init__(self, now: datetime):
        self.now = now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests(request):
    """Disable rate limiting for all tests except rate limiting tests."""
    from convention_voting.core.rate_limit import limiter

    if "rate_limit" in request.keywords:
        limiter.reset()
        limiter.enabled = True
        yield
        limiter.reset()
    else:
        limiter.enabled = False
        yield
        limiter.enabled = True


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh database for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Create a new database session for a test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def activity_sessions(monkeypatch, session_factory):
    """Point background activity logging at the test database."""
    @contextmanager
    def test_db_context():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr("convention_voting.services.activity.get_db_context", test_db_context)
    return test_db_context


@pytest.fixture
def clock():
    return Clock(FIXED_NOW)


@pytest.fixture
def now(clock):
    return clock.now


@pytest.fixture(scope="function")
def client(db_session, clock):
    """Create a test client with a test database and a pinned clock."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------

@pytest.fixture
def pool(db_session):
    return utils.create_pool(db_session, "delegates", "Delegates")


@pytest.fixture
def voter(db_session, pool):
    user = utils.create_user(db_session, "voter1", "Ada", "Lovelace")
    utils.add_to_pool(db_session, user, pool)
    return user


@pytest.fixture
def other_voter(db_session, pool):
    user = utils.create_user(db_session, "voter2", "Grace", "Hopper")
    utils.add_to_pool(db_session, user, pool)
    return user


@pytest.fixture
def outsider(db_session):
    """A voter who belongs to no pool."""
    return utils.create_user(db_session, "outsider", "Alan", "Turing")


@pytest.fixture
def meeting(db_session, pool, now):
    return utils.create_meeting(db_session, pool, start_date=now - timedelta(hours=1))


@pytest.fixture
def motion(db_session, meeting):
    """Single-seat motion with choices A and B, not yet started."""
    motion = utils.create_motion(db_session, meeting, planned_duration=10, seat_count=1)
    utils.create_choices(db_session, motion, ["A", "B"])
    return motion


@pytest.fixture
def active_motion(db_session, motion, now):
    """The ``motion`` fixture, opened for voting one minute ago."""
    return utils.start_motion(db_session, motion, now - timedelta(minutes=1))


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

@pytest.fixture
def voter_token(voter):
    return create_access_token({"sub": voter.id})


@pytest.fixture
def admin_token():
    """Generate a valid admin JWT token."""
    return create_access_token({"sub": "admin-user", "is_admin": True})


@pytest.fixture
def watcher_token():
    return create_access_token({"sub": "watcher-user", "is_watcher": True})


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def voter_headers(voter_token):
    return auth_headers(voter_token)


@pytest.fixture
def admin_headers(admin_token):
    return auth_headers(admin_token)


@pytest.fixture
def watcher_headers(watcher_token):
    return auth_headers(watcher_token)
