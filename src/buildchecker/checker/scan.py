"""Scan a newest-first build list for runs of consecutive failures."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from buildchecker.checker.classify import BuildStatus, classify_build
from buildchecker.core.build import Build, CommitInfo


@dataclass
class ScanResult:
    """Outcome of scan_consecutive_failures()."""

    failed_commits: list[CommitInfo] = field(default_factory=list)
    threshold_exceeded: bool = False
    # Number of builds examined, including the one that ended the scan.
    scanned: int = 0


def find_first_decided(
    builds: Sequence[Build],
    timeout: timedelta,
    now: datetime | None = None,
) -> tuple[int | None, BuildStatus]:
    """Locate the newest build that either passed or failed.

    Returns:
        (index, status) of that build, or (None, INDETERMINATE) if
        every build is still undecided
    """
    for i, build in enumerate(builds):
        status = classify_build(build, timeout, now)
        if status.decided:
            return i, status
    return None, BuildStatus.INDETERMINATE


def scan_consecutive_failures(
    builds: Sequence[Build],
    threshold: int,
    timeout: timedelta,
    return_all: bool = False,
    include_build: bool = False,
    now: datetime | None = None,
) -> ScanResult:
    """Collect the failed commits of the run starting at builds[0].

    A passed build ends the run. Undecided builds are skipped without
    breaking it. Once threshold failures have been seen the result is
    marked exceeded, and scanning stops there unless return_all is set.

    Args:
        builds: Builds ordered newest first, already sliced to start at
            the first build of interest
        threshold: Failures needed to mark the run as exceeded
        timeout: Running time after which an unfinished build counts
            as failed (zero disables)
        return_all: Keep scanning to the end of the run after the
            threshold is reached
        include_build: Attach the originating Build to each CommitInfo
        now: Reference time for timeout checks
    """
    result = ScanResult()

    for build in builds:
        result.scanned += 1
        status = classify_build(build, timeout, now)

        if status is BuildStatus.PASSED:
            return result
        if status is BuildStatus.INDETERMINATE:
            continue

        result.failed_commits.append(
            CommitInfo.from_build(build, include_build=include_build)
        )
        if len(result.failed_commits) >= threshold:
            result.threshold_exceeded = True
            if not return_all:
                return result

    return result
