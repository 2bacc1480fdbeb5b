"""Collaborators handed to workflow nodes as graph dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from buildchecker.branch.locker import BranchLocker
from buildchecker.core.build import Build
from buildchecker.core.context import Context
from buildchecker.notify.slack import SlackNotifier
from buildchecker.team.resolver import TeammateResolver


class BuildProvider(Protocol):
    def list_builds(
        self,
        ctx: Context,
        branch: str,
        limit: int = ...,
        created_from: datetime | None = None,
    ) -> list[Build]:
        """Builds of branch, newest first."""
        ...


@dataclass
class CheckDeps:
    builds: BuildProvider
    branch: BranchLocker
    teammates: TeammateResolver
    notifier: SlackNotifier
    context: Context = field(default_factory=Context.background)

    @classmethod
    def from_config(cls, config, context: Context | None = None) -> CheckDeps:
        """Wire the Buildkite, GitHub and Slack adapters from config."""
        from buildchecker.branch.github import GitHubBranchLocker
        from buildchecker.buildkite.client import BuildkiteClient
        from buildchecker.team.resolver import DirectoryTeammateResolver

        return cls(
            builds=BuildkiteClient(
                token=config.buildkite.token,
                organization=config.buildkite.organization,
                pipeline=config.buildkite.pipeline,
                base_url=config.buildkite.base_url,
            ),
            branch=GitHubBranchLocker(
                token=config.github.token,
                owner=config.github.owner,
                repo=config.github.repo,
                branch=config.github.branch,
            ),
            teammates=DirectoryTeammateResolver(
                config.team.teammates, token=config.github.token
            ),
            notifier=SlackNotifier(config.slack.webhook_url),
            context=context or Context.background(),
        )

    def close(self):
        for dep in (self.builds, self.branch, self.teammates, self.notifier):
            close = getattr(dep, "close", None)
            if close is not None:
                close()
