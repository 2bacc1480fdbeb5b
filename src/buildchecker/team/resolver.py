"""Map commits to the teammates who authored them."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

import httpx
from pydantic import BaseModel, Field

from buildchecker.core.context import Context
from buildchecker.core.errors import TeammateNotFound
from buildchecker.core.http import (
    GITHUB_API_URL,
    github_headers,
    make_client,
    request_timeout,
)
from buildchecker.core.log import logger


class Teammate(BaseModel):
    """A person on the team directory."""

    name: str = ""
    email: str = ""
    github: str = Field(default="", description="GitHub login")
    chat_id: str = Field(default="", description="Slack member ID")


class TeammateResolver(Protocol):
    def resolve_by_commit_author(
        self,
        ctx: Context,
        owner: str,
        repo: str,
        commit: str,
    ) -> Teammate:
        """Return the teammate who authored commit.

        Raises:
            TeammateNotFound: If the author is not on the team
        """
        ...


class DirectoryTeammateResolver:
    """Resolve authors against a configured teammate directory.

    The commit is looked up through the GitHub commits API and its
    author is matched by GitHub login first, then by email.
    """

    def __init__(
        self,
        teammates: Iterable[Teammate],
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.teammates = list(teammates)
        self._by_login = {
            t.github.lower(): t for t in self.teammates if t.github
        }
        self._by_email = {
            t.email.lower(): t for t in self.teammates if t.email
        }
        self._client = make_client(
            GITHUB_API_URL, github_headers(token), transport
        )

    def resolve_by_commit_author(
        self,
        ctx: Context,
        owner: str,
        repo: str,
        commit: str,
    ) -> Teammate:
        if not commit:
            raise TeammateNotFound("build has no commit")

        response = self._client.get(
            f"/repos/{owner}/{repo}/commits/{commit}",
            timeout=request_timeout(ctx),
        )
        response.raise_for_status()
        data = response.json()

        login = ((data.get("author") or {}).get("login") or "").lower()
        email = (
            ((data.get("commit") or {}).get("author") or {}).get("email")
            or ""
        ).lower()
        logger.debug(
            "Resolving commit author", commit=commit, login=login,
            email=email,
        )

        if login and login in self._by_login:
            return self._by_login[login]
        if email and email in self._by_email:
            return self._by_email[email]
        raise TeammateNotFound(
            f"no teammate for author of {commit} "
            f"(login={login or '?'}, email={email or '?'})"
        )

    def close(self):
        self._client.close()
