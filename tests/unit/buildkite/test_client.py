"""Tests for the Buildkite build provider."""

from datetime import UTC, datetime

import httpx
import pytest

from buildchecker.buildkite.client import PAGE_SIZE, BuildkiteClient
from buildchecker.core.build import BuildState
from buildchecker.core.context import Context
from buildchecker.core.errors import CheckCancelled


def payload(number, state="passed"):
    return {
        "number": number,
        "state": state,
        "created_at": "2024-03-01T10:00:00Z",
        "finished_at": "2024-03-01T10:20:00Z",
        "commit": f"{number:040x}",
        "branch": "main",
        "web_url": f"https://buildkite.com/acme/widgets/builds/{number}",
        "author": {"name": "Dev", "email": "dev@example.com"},
    }


class FakeBuildkite:
    """Serves `total` builds newest first, PAGE_SIZE per page."""

    def __init__(self, total):
        self.total = total
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        page = int(request.url.params["page"])
        per_page = int(request.url.params["per_page"])
        first = self.total - (page - 1) * per_page
        numbers = range(first, max(first - per_page, 0), -1)
        return httpx.Response(200, json=[payload(n) for n in numbers])


def make_client(fake):
    return BuildkiteClient(
        token="bk-token", organization="acme", pipeline="widgets",
        transport=httpx.MockTransport(fake.handler),
    )


def test_single_page():
    fake = FakeBuildkite(total=5)
    client = make_client(fake)

    builds = client.list_builds(Context.background(), "main")

    assert [b.number for b in builds] == [5, 4, 3, 2, 1]
    assert len(fake.requests) == 1
    request = fake.requests[0]
    assert request.url.path == "/v2/organizations/acme/pipelines/widgets/builds"
    assert request.url.params["branch"] == "main"
    assert request.headers["Authorization"] == "Bearer bk-token"


def test_builds_are_parsed():
    fake = FakeBuildkite(total=1)
    build = make_client(fake).list_builds(Context.background(), "main")[0]

    assert build.state is BuildState.PASSED
    assert build.created_at == datetime(2024, 3, 1, 10, 0, tzinfo=UTC)
    assert build.commit == f"{1:040x}"
    assert str(build.author) == "Dev (dev@example.com)"


def test_limit_truncates():
    fake = FakeBuildkite(total=250)

    builds = make_client(fake).list_builds(Context.background(), "main", limit=99)

    assert len(builds) == 99
    assert builds[0].number == 250
    assert len(fake.requests) == 1


def test_unlimited_follows_pages():
    fake = FakeBuildkite(total=PAGE_SIZE * 2 + 10)

    builds = make_client(fake).list_builds(
        Context.background(), "main", limit=None
    )

    assert len(builds) == PAGE_SIZE * 2 + 10
    assert [int(r.url.params["page"]) for r in fake.requests] == [1, 2, 3]


def test_exact_page_multiple_stops_on_empty_page():
    fake = FakeBuildkite(total=PAGE_SIZE)

    builds = make_client(fake).list_builds(
        Context.background(), "main", limit=None
    )

    assert len(builds) == PAGE_SIZE
    assert len(fake.requests) == 2


def test_created_from_is_sent():
    fake = FakeBuildkite(total=1)
    since = datetime(2024, 2, 15, tzinfo=UTC)

    make_client(fake).list_builds(
        Context.background(), "main", created_from=since
    )

    assert fake.requests[0].url.params["created_from"] == since.isoformat()


def test_http_error_propagates():
    client = BuildkiteClient(
        token=None, organization="acme", pipeline="widgets",
        transport=httpx.MockTransport(lambda request: httpx.Response(403)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        client.list_builds(Context.background(), "main")


def test_cancelled_context_makes_no_requests():
    fake = FakeBuildkite(total=5)
    ctx = Context.background()
    ctx.cancel()

    with pytest.raises(CheckCancelled):
        make_client(fake).list_builds(ctx, "main")

    assert fake.requests == []
