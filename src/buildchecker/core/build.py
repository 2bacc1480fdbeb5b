"""Build records supplied by the build provider, and the commit
records derived from failed builds."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BuildState(str, Enum):
    """State of a single CI run."""

    PASSED = "passed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    RUNNING = "running"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str | None) -> BuildState | None:
        """Map a provider state string onto BuildState.

        Buildkite spells it "canceled"; both spellings count as
        cancelled. Unrecognized strings become UNKNOWN and a missing
        state stays None.
        """
        if raw is None:
            return None
        raw = raw.lower()
        if raw == "canceled":
            return cls.CANCELLED
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


class Author(BaseModel):
    """Commit author as reported by the build provider."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""

    def __str__(self) -> str:
        return f"{self.name} ({self.email})"


class Build(BaseModel):
    """Immutable snapshot of one CI run."""

    model_config = ConfigDict(frozen=True)

    number: int
    state: BuildState | None = None
    created_at: datetime | None = None
    finished_at: datetime | None = None
    commit: str | None = None
    author: Author | None = None
    branch: str | None = None
    web_url: str | None = None

    @classmethod
    def from_buildkite(cls, payload: dict[str, Any]) -> Build:
        """Build a record from a Buildkite REST API build object."""
        author = payload.get("author")
        return cls(
            number=payload["number"],
            state=BuildState.parse(payload.get("state")),
            created_at=payload.get("created_at"),
            finished_at=payload.get("finished_at"),
            commit=payload.get("commit"),
            author=Author(**author) if author else None,
            branch=payload.get("branch"),
            web_url=payload.get("web_url"),
        )


class CommitInfo(BaseModel):
    """A commit whose build failed.

    Created by the scanner. Only author_chat_id and author_github are
    filled in later, by author annotation.
    """

    commit: str = Field(
        default="",
        description="Commit SHA (empty when the build had none)",
    )
    author: str = Field(
        default="",
        description="Author display string, 'Name (email)'",
    )
    author_chat_id: str | None = Field(
        default=None,
        description="Resolved chat identity, None if resolution failed",
    )
    author_github: str | None = Field(
        default=None,
        description="Resolved GitHub login, None if resolution failed",
    )
    build: Build | None = Field(
        default=None,
        description="Originating build, only kept when requested",
    )

    @classmethod
    def from_build(cls, build: Build, include_build: bool = False) -> CommitInfo:
        return cls(
            commit=build.commit or "",
            author=str(build.author) if build.author else "",
            build=build if include_build else None,
        )
