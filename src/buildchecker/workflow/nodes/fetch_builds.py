"""FetchBuilds node - load recent builds of the branch."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from buildchecker.core.config import State
from buildchecker.core.log import logger
from buildchecker.workflow.deps import CheckDeps


@dataclass
class FetchBuilds(BaseNode[State, CheckDeps]):
    """Fetch the most recent builds from the build provider."""

    async def run(
        self, ctx: GraphRunContext[State, CheckDeps]
    ) -> "Evaluate":
        config = ctx.state.config
        branch = config.github.branch

        with logger.span("Fetching builds", branch=branch):
            builds = ctx.deps.builds.list_builds(
                ctx.deps.context, branch, limit=config.check.builds_limit
            )

        ctx.state.runtime.check.builds = builds
        logger.info(f"Fetched {len(builds)} builds for {branch}")

        from buildchecker.workflow.nodes.evaluate import Evaluate
        return Evaluate()
