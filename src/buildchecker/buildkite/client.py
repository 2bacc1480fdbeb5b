"""Fetch builds from the Buildkite REST API."""

from __future__ import annotations

from datetime import datetime

import httpx

from buildchecker.core.build import Build
from buildchecker.core.context import Context
from buildchecker.core.http import make_client, request_timeout
from buildchecker.core.log import logger

PAGE_SIZE = 100


class BuildkiteClient:
    """Read-only client for one pipeline."""

    def __init__(
        self,
        token: str | None,
        organization: str,
        pipeline: str,
        base_url: str = "https://api.buildkite.com",
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.organization = organization
        self.pipeline = pipeline
        self._client = make_client(base_url, headers, transport)

    @property
    def builds_path(self) -> str:
        return (
            f"/v2/organizations/{self.organization}"
            f"/pipelines/{self.pipeline}/builds"
        )

    def list_builds(
        self,
        ctx: Context,
        branch: str,
        limit: int | None = PAGE_SIZE,
        created_from: datetime | None = None,
    ) -> list[Build]:
        """Return up to limit builds of branch, newest first.

        Args:
            ctx: Cancellation context for the requests
            branch: Branch name
            limit: Maximum number of builds (None for all)
            created_from: Only return builds created at or after this
                time

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
            CheckCancelled: If ctx is done between pages
        """
        params = {"branch": branch, "per_page": str(PAGE_SIZE)}
        if created_from is not None:
            params["created_from"] = created_from.isoformat()

        builds: list[Build] = []
        page = 1
        while limit is None or len(builds) < limit:
            response = self._client.get(
                self.builds_path,
                params={**params, "page": str(page)},
                timeout=request_timeout(ctx),
            )
            response.raise_for_status()
            payload = response.json()
            logger.spew("Fetched builds page", page=page, count=len(payload))
            if not payload:
                break

            builds.extend(Build.from_buildkite(b) for b in payload)
            if len(payload) < PAGE_SIZE:
                break
            page += 1

        if limit is not None:
            builds = builds[:limit]
        logger.debug(
            f"Fetched {len(builds)} builds",
            pipeline=self.pipeline,
            branch=branch,
        )
        return builds

    def close(self):
        self._client.close()
