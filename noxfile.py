import os
from pathlib import Path
import nox

# Reuse existing virtualenvs for faster runs
nox.options.reuse_existing_virtualenvs = True
# Default sessions when running "nox"
nox.options.sessions = ["lint", "unit", "integration"]

# Common dependencies for test sessions
COMMON_DEPS = ["-e", ".[test]"]

# Environment variables to propagate
PASSED_ENV_VARS = [
    "DATABASE_URL",
    "SECRET_KEY",
    "ENVIRONMENT",
    "LOG_LEVEL",
]


def _set_env(session):
    """
    Propagate database and test-related environment variables into the session.
    Also ensure the project root is on PYTHONPATH.
    """
    session.env["PYTHONPATH"] = str(Path.cwd())
    session.env.setdefault("ENVIRONMENT", "test")
    for var in PASSED_ENV_VARS:
        if var in os.environ:
            session.env[var] = os.environ[var]


@nox.session(name="lint")
def lint(session):
    """
    Code formatting, linting, and type-checks:
      - isort
      - black
      - flake8
      - mypy
    """
    _set_env(session)
    session.install("isort", "black", "flake8", "mypy")
    session.run("isort", "--check-only", "convention_voting/", "tests/")
    session.run("black", "--check", "convention_voting/", "tests/")
    session.run("flake8", "--max-line-length=120", "convention_voting/", "tests/")
    session.run("mypy", "--ignore-missing-imports", "convention_voting/")


def _pytest(session, default_path, coverage_floor):
    _set_env(session)
    session.install(*COMMON_DEPS)
    tests = session.posargs or [default_path]
    session.run(
        "pytest",
        *tests,
        "--maxfail=1",
        "-vv",
        "--tb=short",
        "--cov=convention_voting",
        "--cov-report=term-missing",
        "--cov-report=html:.nox/htmlcov",
        f"--cov-fail-under={coverage_floor}",
    )


@nox.session(name="unit")
def unit(session):
    """
    Run unit tests (SQLite in memory).
    Usage:
      nox -s unit
      nox -s unit -- tests/unit/test_services/test_tally.py
    """
    _pytest(session, "tests/unit", 70)


@nox.session(name="integration")
def integration(session):
    """
    Run API tests through the FastAPI test client.
    Usage:
      nox -s integration
      nox -s integration -- tests/integration/test_api/test_voting_flow.py
    """
    _pytest(session, "tests/integration", 60)
