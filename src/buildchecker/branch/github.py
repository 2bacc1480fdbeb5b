"""Lock a GitHub branch by restricting who can push to it.

A branch counts as locked when its protection carries push
restrictions. Locking replaces the protection with one that only lets
the authors of the failed commits and the owning team push; unlocking
deletes the restrictions again.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from buildchecker.branch.locker import Action, ActionKind
from buildchecker.core.build import CommitInfo
from buildchecker.core.context import Context
from buildchecker.core.http import (
    GITHUB_API_URL,
    github_headers,
    make_client,
    request_timeout,
)
from buildchecker.core.log import logger


def _enabled(section: dict | None, key: str = "enabled") -> bool:
    return bool(section and section.get(key))


def protection_update(
    current: dict[str, Any],
    users: list[str],
    teams: list[str],
) -> dict[str, Any]:
    """Turn a GET protection response into a PUT protection body with
    push restrictions for users and teams.

    The PUT endpoint requires every top-level key; settings that are
    not configured are sent as null.
    """
    checks = current.get("required_status_checks")
    reviews = current.get("required_pull_request_reviews")

    body: dict[str, Any] = {
        "required_status_checks": None,
        "enforce_admins": _enabled(current.get("enforce_admins")),
        "required_pull_request_reviews": None,
        "restrictions": {"users": users, "teams": teams, "apps": []},
        "required_linear_history": _enabled(
            current.get("required_linear_history")
        ),
        "allow_force_pushes": _enabled(current.get("allow_force_pushes")),
        "allow_deletions": _enabled(current.get("allow_deletions")),
    }
    if checks:
        body["required_status_checks"] = {
            "strict": bool(checks.get("strict")),
            "contexts": checks.get("contexts", []),
        }
    if reviews:
        body["required_pull_request_reviews"] = {
            "dismiss_stale_reviews": bool(
                reviews.get("dismiss_stale_reviews")
            ),
            "require_code_owner_reviews": bool(
                reviews.get("require_code_owner_reviews")
            ),
            "required_approving_review_count": reviews.get(
                "required_approving_review_count", 1
            ),
        }
    return body


class GitHubBranchLocker:
    """BranchLocker backed by GitHub branch protection."""

    def __init__(
        self,
        token: str | None,
        owner: str,
        repo: str,
        branch: str,
        transport: httpx.BaseTransport | None = None,
    ):
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self._client = make_client(
            GITHUB_API_URL, github_headers(token), transport
        )

    @property
    def protection_path(self) -> str:
        return (
            f"/repos/{self.owner}/{self.repo}"
            f"/branches/{self.branch}/protection"
        )

    # Lookups below run after the lock decision; a done ctx falls back
    # to the default timeout.

    def is_locked(self, ctx: Context) -> bool:
        """Whether push restrictions are currently set."""
        response = self._client.get(
            f"{self.protection_path}/restrictions",
            timeout=request_timeout(ctx, strict=False),
        )
        if response.status_code == 404:
            return False
        response.raise_for_status()
        return True

    def lock(
        self,
        ctx: Context,
        commits: Sequence[CommitInfo],
        reason: str,
    ) -> Action:
        if self.is_locked(ctx):
            logger.info(f"Branch {self.branch} is already locked")
            return Action.nothing(ActionKind.LOCK, "already locked")

        # Authors of the failing commits may still push their fixes.
        # Their logins come from author annotation; unresolved authors
        # are left out.
        users = []
        for info in commits:
            if info.author_github and info.author_github not in users:
                users.append(info.author_github)

        response = self._client.get(
            self.protection_path, timeout=request_timeout(ctx, strict=False)
        )
        response.raise_for_status()
        body = protection_update(response.json(), users, [reason])

        def apply():
            logger.info(
                f"Locking branch {self.branch}",
                users=users,
                team=reason,
            )
            self._client.put(
                self.protection_path, json=body
            ).raise_for_status()

        return Action(
            ActionKind.LOCK,
            apply,
            f"restrict {self.branch} to {', '.join(users + [reason])}",
        )

    def unlock(self, ctx: Context) -> Action:
        if not self.is_locked(ctx):
            return Action.nothing(ActionKind.UNLOCK, "already unlocked")

        def apply():
            logger.info(f"Unlocking branch {self.branch}")
            self._client.delete(
                f"{self.protection_path}/restrictions"
            ).raise_for_status()

        return Action(
            ActionKind.UNLOCK, apply, f"remove {self.branch} restrictions"
        )

    def close(self):
        self._client.close()
