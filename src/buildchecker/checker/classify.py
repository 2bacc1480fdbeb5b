"""Classify a single build as passed, failed or undecided."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum

from buildchecker.core.build import Build, BuildState


class BuildStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    INDETERMINATE = "indeterminate"

    @property
    def decided(self) -> bool:
        return self is not BuildStatus.INDETERMINATE


_FAILED_STATES = frozenset({BuildState.FAILED, BuildState.CANCELLED})


def as_utc(value: datetime) -> datetime:
    # Providers occasionally hand back naive timestamps; they are UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_build_passed(build: Build) -> bool:
    return build.state is BuildState.PASSED


def is_build_failed(
    build: Build,
    timeout: timedelta,
    now: datetime | None = None,
) -> bool:
    """A build failed if it says so, or if it has been running for
    longer than timeout (a zero timeout disables the latter)."""
    if build.state in _FAILED_STATES:
        return True

    if (
        timeout > timedelta(0)
        and build.created_at is not None
        and build.finished_at is None
    ):
        now = as_utc(now) if now is not None else datetime.now(UTC)
        return now > as_utc(build.created_at) + timeout

    return False


def classify_build(
    build: Build,
    timeout: timedelta,
    now: datetime | None = None,
) -> BuildStatus:
    """Classify build. Never raises."""
    if is_build_passed(build):
        return BuildStatus.PASSED
    if is_build_failed(build, timeout, now):
        return BuildStatus.FAILED
    return BuildStatus.INDETERMINATE
