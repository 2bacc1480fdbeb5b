"""Notify node - tell Slack when the branch changed state."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from pydantic_graph import BaseNode, End, GraphRunContext

from buildchecker.core.config import State
from buildchecker.core.log import logger
from buildchecker.notify.slack import format_lock_message, format_unlock_message
from buildchecker.workflow.deps import CheckDeps


@dataclass
class Notify(BaseNode[State, CheckDeps, str]):
    """Post a lock/unlock message if the action changed anything."""

    async def run(
        self, ctx: GraphRunContext[State, CheckDeps]
    ) -> End[str]:
        config = ctx.state.config
        check = ctx.state.runtime.check
        results = check.results

        if results.action.noop:
            logger.debug("Branch state unchanged, no notification")
            return End(check.status)

        branch = config.github.branch
        if results.lock_branch:
            builds_url = (
                f"https://buildkite.com/{config.buildkite.organization}"
                f"/{config.buildkite.pipeline}/builds?branch={branch}"
            )
            payload = format_lock_message(branch, results, builds_url)
        else:
            payload = format_unlock_message(branch)

        # The branch has already changed; a failed notification is
        # reported but does not fail the run.
        try:
            check.notified = ctx.deps.notifier.post(ctx.deps.context, payload)
        except httpx.HTTPError as e:
            logger.error("Failed to post Slack notification", error=str(e))

        return End(check.status)
