"""Check command - evaluate builds and lock or unlock the branch."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, Field

from buildchecker.core.context import Context
from buildchecker.core.errors import BuildCheckerError
from buildchecker.core.log import logger

if TYPE_CHECKING:
    from buildchecker.core.config import State
    from buildchecker.workflow.deps import CheckDeps


class CheckCommand(BaseModel):
    """Check recent builds and lock the branch after too many
    consecutive failures, or unlock it once a build passes.

    Meant to be run on a schedule (cron, CI scheduled job).
    """

    model_config = ConfigDict(populate_by_name=True)

    dry_run: bool = Field(
        default=False,
        alias="dry-run",
        description="Decide and report, but do not lock/unlock or notify",
    )
    timeout: float = Field(
        default=120.0,
        description="Seconds the whole check may take",
    )

    async def run_workflow(
        self, state: State, deps: CheckDeps | None = None
    ) -> int:
        """Run the check workflow.

        Args:
            state: State instance
            deps: Collaborators to use; built from config when None

        Returns:
            Exit code (0=success, 1=check failed)
        """
        from buildchecker.workflow.deps import CheckDeps
        from buildchecker.workflow.graph import create_workflow
        from buildchecker.workflow.nodes.fetch_builds import FetchBuilds

        state.runtime.check.dry_run = self.dry_run
        owned = deps is None
        if owned:
            deps = CheckDeps.from_config(
                state.config, Context.background().with_timeout(self.timeout)
            )

        workflow = create_workflow()
        try:
            result = await workflow.run(FetchBuilds(), state=state, deps=deps)
        except (BuildCheckerError, httpx.HTTPError) as e:
            state.runtime.check.status = "failed"
            logger.error(f"Check failed: {e}")
            return 1
        finally:
            if owned:
                deps.close()

        logger.info(f"Check complete: {result.output}")
        return 0
