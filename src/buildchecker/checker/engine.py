"""Decide whether a branch should be locked, given its recent builds."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field, field_validator

from buildchecker.branch.locker import BranchLocker
from buildchecker.checker.annotate import annotate_authors
from buildchecker.checker.classify import BuildStatus
from buildchecker.checker.scan import (
    find_first_decided,
    scan_consecutive_failures,
)
from buildchecker.core.build import Build
from buildchecker.core.context import Context
from buildchecker.core.errors import BranchLockError
from buildchecker.core.log import logger
from buildchecker.core.result import CheckResults
from buildchecker.team.resolver import TeammateResolver

DEFAULT_LOCK_REASON = "dev-experience"


class CheckOptions(BaseModel):
    """Parameters of one evaluation."""

    threshold: int = Field(
        ge=1,
        description="Consecutive failed builds needed to lock the branch",
    )
    build_timeout: timedelta = Field(
        default=timedelta(0),
        description=(
            "Unfinished builds running longer than this count as "
            "failed (zero disables)"
        ),
    )
    repo_owner: str = ""
    repo_name: str = ""
    lock_reason: str = Field(
        default=DEFAULT_LOCK_REASON,
        description="Team that owns the branch while it is locked",
    )

    @field_validator("build_timeout")
    @classmethod
    def _non_negative(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            raise ValueError("build_timeout must not be negative")
        return value


def _unlock(ctx: Context, branch: BranchLocker) -> CheckResults:
    try:
        action = branch.unlock(ctx)
    except Exception as e:
        raise BranchLockError(f"unlock branch: {e}") from e
    return CheckResults(lock_branch=False, action=action)


def check_builds(
    ctx: Context,
    branch: BranchLocker,
    teammates: TeammateResolver,
    builds: Sequence[Build],
    options: CheckOptions,
    now: datetime | None = None,
) -> CheckResults:
    """Evaluate builds (newest first) and decide to lock or unlock.

    The returned action is not executed here.

    Raises:
        CheckCancelled: If ctx is done before a decision is reached
        BranchLockError: If the branch locker fails to produce the
            action
    """
    ctx.raise_if_done()
    now = now or datetime.now(UTC)
    timeout = options.build_timeout

    index, status = find_first_decided(builds, timeout, now)
    if status is BuildStatus.PASSED:
        logger.info(
            f"Most recent finished build {builds[index].number} passed"
        )
        return _unlock(ctx, branch)
    if index is None:
        logger.info("No finished builds found")
        return _unlock(ctx, branch)

    logger.info(f"Most recent finished build {builds[index].number} failed")

    # The window opens one build before the first decided one. That
    # build is undecided with the same `now`, so the scan skips it.
    scan = scan_consecutive_failures(
        builds[max(index - 1, 0):],
        options.threshold,
        timeout,
        return_all=False,
        include_build=False,
        now=now,
    )
    logger.debug(
        "Scanned for consecutive failures",
        scanned=scan.scanned,
        failures=len(scan.failed_commits),
        threshold=options.threshold,
    )

    if not scan.threshold_exceeded:
        logger.info("Failure threshold not exceeded")
        return _unlock(ctx, branch)

    logger.warning(
        f"Failure threshold exceeded: {len(scan.failed_commits)} "
        f"consecutive failed builds"
    )

    resolutions = annotate_authors(
        ctx,
        teammates,
        scan.failed_commits,
        options.repo_owner,
        options.repo_name,
    )
    logger.info(
        "Resolved commit authors",
        resolved=sum(1 for r in resolutions if r.resolved),
        failed=sum(1 for r in resolutions if r.error is not None),
        skipped=sum(1 for r in resolutions if r.skipped),
    )

    try:
        action = branch.lock(ctx, scan.failed_commits, options.lock_reason)
    except Exception as e:
        raise BranchLockError(f"lock branch: {e}") from e

    return CheckResults(
        lock_branch=True,
        action=action,
        failed_commits=scan.failed_commits,
    )
