"""History command - write daily build statistics to CSV."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from buildchecker.core.context import Context
from buildchecker.core.log import logger

if TYPE_CHECKING:
    from buildchecker.core.config import State
    from buildchecker.workflow.deps import BuildProvider


class HistoryCommand(BaseModel):
    """Summarize build totals, flakes and incident minutes per day."""

    days: int | None = Field(
        default=None,
        description="Days to look back (default: config.history.days)",
    )
    output: Path | None = Field(
        default=None,
        description="CSV path (default: config.history.output)",
    )

    async def run_workflow(
        self, state: State, builds: BuildProvider | None = None
    ) -> int:
        """Fetch the window's builds, compute history and write it.

        Returns:
            Exit code (0=success)
        """
        from buildchecker.buildkite.client import BuildkiteClient
        from buildchecker.checker.history import (
            generate_history,
            write_history_csv,
        )

        config = state.config
        runtime = state.runtime.history
        runtime.days = self.days or config.history.days
        runtime.output = self.output or config.history.output

        now = datetime.now(UTC)
        window_start = now - timedelta(days=runtime.days)

        owned = builds is None
        if owned:
            builds = BuildkiteClient(
                token=config.buildkite.token,
                organization=config.buildkite.organization,
                pipeline=config.buildkite.pipeline,
                base_url=config.buildkite.base_url,
            )
        try:
            with logger.span("Fetching build history", days=runtime.days):
                fetched = builds.list_builds(
                    Context.background(),
                    config.github.branch,
                    limit=None,
                    created_from=window_start,
                )
        finally:
            if owned:
                builds.close()
        runtime.builds_fetched = len(fetched)

        history = generate_history(
            fetched,
            window_start,
            config.check.options(config.github),
            now=now,
        )
        path = write_history_csv(history, runtime.output)
        runtime.status = "complete"

        logger.info(
            f"Wrote history for {len(history.days())} days to {path}",
            builds=len(fetched),
            incident_minutes=sum(history.incidents.values()),
            flakes=sum(history.flakes.values()),
        )
        return 0
