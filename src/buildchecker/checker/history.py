"""Daily build statistics: totals, flaky failures and incident time.

A failure run that stays below the lock threshold is counted as flakes.
A run that reaches it is an incident, measured in minutes from the
oldest failed build until the build that turned the branch green
again.
"""

from __future__ import annotations

import csv
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from buildchecker.checker.classify import BuildStatus, as_utc, classify_build
from buildchecker.checker.engine import CheckOptions
from buildchecker.checker.scan import (
    find_first_decided,
    scan_consecutive_failures,
)
from buildchecker.core.build import Build
from buildchecker.core.log import logger


def build_date(value: datetime) -> str:
    return as_utc(value).date().isoformat()


@dataclass
class History:
    """Per-day counters keyed by ISO date."""

    totals: Counter = field(default_factory=Counter)
    flakes: Counter = field(default_factory=Counter)
    incidents: Counter = field(default_factory=Counter)

    def days(self) -> list[str]:
        return sorted(set(self.totals) | set(self.flakes) | set(self.incidents))


def generate_history(
    builds: Sequence[Build],
    window_start: datetime,
    options: CheckOptions,
    now: datetime | None = None,
) -> History:
    """Compute the History of builds (newest first).

    Builds created before window_start, or without a creation time,
    are ignored.
    """
    now = now or datetime.now(UTC)
    window_start = as_utc(window_start)
    timeout = options.build_timeout
    builds = [
        b for b in builds
        if b.created_at is not None and as_utc(b.created_at) >= window_start
    ]

    history = History()
    for build in builds:
        history.totals[build_date(build.created_at)] += 1

    # Passed build newer than the run being scanned, if any.
    recovered_by: Build | None = None
    remaining = builds
    while remaining:
        index, status = find_first_decided(remaining, timeout, now)
        if index is None:
            break
        if status is BuildStatus.PASSED:
            recovered_by = remaining[index]
            remaining = remaining[index + 1:]
            continue

        start = max(index - 1, 0)
        scan = scan_consecutive_failures(
            remaining[start:],
            options.threshold,
            timeout,
            return_all=True,
            include_build=True,
            now=now,
        )
        failed = [c.build for c in scan.failed_commits]

        if scan.threshold_exceeded:
            oldest = failed[-1]
            red_since = as_utc(oldest.created_at)
            green_at = now
            if recovered_by is not None:
                green_at = as_utc(
                    recovered_by.finished_at or recovered_by.created_at
                )
            minutes = max(int((green_at - red_since).total_seconds() // 60), 0)
            history.incidents[build_date(oldest.created_at)] += minutes
            logger.debug(
                "Incident found",
                failures=len(failed),
                since=red_since.isoformat(),
                minutes=minutes,
            )
        else:
            for build in failed:
                history.flakes[build_date(build.created_at)] += 1

        end = start + scan.scanned
        # Leave the passed build that ended the run for the next
        # iteration; it is the recovery point of the older run.
        if classify_build(remaining[end - 1], timeout, now) is BuildStatus.PASSED:
            end -= 1
        remaining = remaining[end:]
        recovered_by = None

    return history


def write_history_csv(history: History, path: Path) -> Path:
    """Write history as date,total,flakes,incident_minutes rows."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["date", "total", "flakes", "incident_minutes"])
        for day in history.days():
            writer.writerow([
                day,
                history.totals[day],
                history.flakes[day],
                history.incidents[day],
            ])
    return path
