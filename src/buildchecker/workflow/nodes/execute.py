"""Execute node - apply the decided branch action once."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from buildchecker.core.config import State
from buildchecker.core.log import logger
from buildchecker.workflow.deps import CheckDeps


@dataclass
class Execute(BaseNode[State, CheckDeps, str]):
    """Execute the action, unless this is a dry run."""

    async def run(
        self, ctx: GraphRunContext[State, CheckDeps]
    ) -> "Notify | End[str]":
        check = ctx.state.runtime.check
        results = check.results
        status = "locked" if results.lock_branch else "unlocked"

        if check.dry_run:
            logger.info(f"Dry run, not executing: {results.action!r}")
            check.status = status
            return End(status)

        results.action.execute()
        check.executed = True
        check.status = status

        from buildchecker.workflow.nodes.notify import Notify
        return Notify()
