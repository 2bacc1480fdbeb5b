"""httpx client construction shared by the GitHub, Buildkite and Slack
adapters."""

from __future__ import annotations

import httpx

from buildchecker.core.context import Context

GITHUB_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 10.0


def github_headers(token: str | None) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def request_timeout(
    ctx: Context,
    default: float = DEFAULT_TIMEOUT,
    strict: bool = True,
) -> float:
    """Per-request timeout, shortened to what is left of ctx's deadline.

    Raises CheckCancelled if ctx is already done. With strict=False a
    done ctx falls back to default instead; branch lookups made after
    the lock decision use this so the action is still built.
    """
    if ctx.done and not strict:
        return default
    ctx.raise_if_done()
    remaining = ctx.remaining()
    if remaining is None:
        return default
    return min(default, remaining)


def make_client(
    base_url: str,
    headers: dict[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create a client; tests pass an httpx.MockTransport."""
    return httpx.Client(
        base_url=base_url,
        headers=headers or {},
        timeout=DEFAULT_TIMEOUT,
        transport=transport,
    )
