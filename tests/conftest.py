"""Pytest configuration and fixtures for buildchecker tests."""

import itertools
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from buildchecker.branch.locker import Action, ActionKind
from buildchecker.core.build import Author, Build, BuildState
from buildchecker.core.errors import TeammateNotFound
from buildchecker.core.log import ConsoleSink, setup_logger
from buildchecker.team.resolver import Teammate

# Fixed reference time for timeout-sensitive tests
NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only logging for test runs; nothing leaves the machine."""
    setup_logger(
        log_root=Path(tempfile.gettempdir()) / "buildchecker-tests",
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_build():
    """Factory for Build records numbered newest first.

    make_build("failed") → finished failed build
    make_build("running", created_at=...) → unfinished build
    make_build(None) → build without a state
    """
    counter = itertools.count(100000, -1)

    def _make(state="passed", **kwargs):
        number = kwargs.pop("number", next(counter))
        parsed = BuildState.parse(state)
        finished = parsed not in (None, BuildState.RUNNING)
        created_at = kwargs.pop("created_at", NOW - timedelta(hours=1))
        defaults = {
            "number": number,
            "state": parsed,
            "created_at": created_at,
            "finished_at": (
                created_at + timedelta(minutes=20) if finished else None
            ),
            "commit": f"{number:040x}",
            "author": Author(name=f"Dev {number}", email=f"dev{number}@example.com"),
        }
        defaults.update(kwargs)
        return Build(**defaults)

    return _make


class FakeBranchLocker:
    """Records lock/unlock requests; optionally fails them."""

    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.calls = []

    def lock(self, ctx, commits, reason):
        self.calls.append(("lock", [c.commit for c in commits], reason))
        if self.fail_with:
            raise self.fail_with
        return Action(ActionKind.LOCK, lambda: self.calls.append("locked"))

    def unlock(self, ctx):
        self.calls.append(("unlock",))
        if self.fail_with:
            raise self.fail_with
        return Action(ActionKind.UNLOCK, lambda: self.calls.append("unlocked"))


class FakeTeammateResolver:
    """Resolves commits from a dict; anything else is not found."""

    def __init__(self, teammates=None, error=None):
        self.teammates = teammates or {}
        self.error = error
        self.calls = []

    def resolve_by_commit_author(self, ctx, owner, repo, commit):
        self.calls.append((owner, repo, commit))
        if self.error:
            raise self.error
        if commit not in self.teammates:
            raise TeammateNotFound(commit)
        return self.teammates[commit]


@pytest.fixture
def locker():
    return FakeBranchLocker()


@pytest.fixture
def failing_locker():
    return FakeBranchLocker(fail_with=RuntimeError("github is down"))


@pytest.fixture
def resolver():
    """Resolver that knows nobody."""
    return FakeTeammateResolver()


@pytest.fixture
def resolver_for():
    """Build a resolver mapping each given commit to a teammate."""
    def _make(*commits, error=None):
        return FakeTeammateResolver(
            {
                c: Teammate(name=f"T{i}", chat_id=f"U{i:04d}")
                for i, c in enumerate(commits)
            },
            error=error,
        )
    return _make
