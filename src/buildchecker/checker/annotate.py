"""Attach chat identities to failed commits."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from buildchecker.core.build import CommitInfo
from buildchecker.core.context import Context
from buildchecker.core.log import logger
from buildchecker.team.resolver import Teammate, TeammateResolver


@dataclass
class AuthorResolution:
    """Outcome of resolving one commit's author.

    Exactly one of teammate/error is set, or neither when the commit
    was skipped because the context was done.
    """

    commit: CommitInfo
    teammate: Teammate | None = None
    error: Exception | None = None

    @property
    def resolved(self) -> bool:
        return self.teammate is not None

    @property
    def skipped(self) -> bool:
        return self.teammate is None and self.error is None


def annotate_authors(
    ctx: Context,
    teammates: TeammateResolver,
    failed_commits: Sequence[CommitInfo],
    owner: str,
    repo: str,
) -> list[AuthorResolution]:
    """Fill in author_chat_id and author_github on each commit, one at
    a time.

    Resolution failures are logged and leave the identity empty. Once
    ctx is done the remaining commits are skipped.
    """
    resolutions = []
    for info in failed_commits:
        if ctx.done:
            resolutions.append(AuthorResolution(info))
            continue

        try:
            teammate = teammates.resolve_by_commit_author(
                ctx, owner, repo, info.commit
            )
        except Exception as e:
            logger.warning(
                "Could not resolve commit author",
                commit=info.commit,
                author=info.author,
                error=str(e),
            )
            resolutions.append(AuthorResolution(info, error=e))
            continue

        info.author_chat_id = teammate.chat_id or None
        info.author_github = teammate.github or None
        resolutions.append(AuthorResolution(info, teammate=teammate))

    skipped = sum(1 for r in resolutions if r.skipped)
    if skipped:
        logger.warning(
            f"Skipped author resolution for {skipped} commit(s): "
            f"{ctx.reason()}"
        )
    return resolutions
