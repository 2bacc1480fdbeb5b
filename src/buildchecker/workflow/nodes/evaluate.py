"""Evaluate node - decide whether to lock or unlock the branch."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from buildchecker.checker.engine import check_builds
from buildchecker.core.config import State
from buildchecker.core.log import logger
from buildchecker.workflow.deps import CheckDeps


@dataclass
class Evaluate(BaseNode[State, CheckDeps]):
    """Run the lock decision over the fetched builds."""

    async def run(
        self, ctx: GraphRunContext[State, CheckDeps]
    ) -> "Execute":
        config = ctx.state.config
        check = ctx.state.runtime.check

        results = check_builds(
            ctx.deps.context,
            ctx.deps.branch,
            ctx.deps.teammates,
            check.builds,
            config.check.options(config.github),
        )
        check.results = results

        logger.info(
            f"Decision: {results.action.kind.value} {config.github.branch}",
            failed_commits=len(results.failed_commits),
            noop=results.action.noop,
        )

        from buildchecker.workflow.nodes.execute import Execute
        return Execute()
