"""Tests for teammate resolution through the GitHub commits API."""

import httpx
import pytest

from buildchecker.core.context import Context
from buildchecker.core.errors import TeammateNotFound
from buildchecker.team.resolver import DirectoryTeammateResolver, Teammate

COMMITS = {
    "aaa": {"author": {"login": "Alice"}, "commit": {"author": {"email": "a@x.io"}}},
    "bbb": {"author": None, "commit": {"author": {"email": "BOB@x.io"}}},
    "ccc": {"author": {"login": "mallory"}, "commit": {"author": {"email": "m@x.io"}}},
}

TEAM = [
    Teammate(name="Alice", github="alice", chat_id="U1"),
    Teammate(name="Bob", email="bob@x.io", chat_id="U2"),
]


def handler(request: httpx.Request) -> httpx.Response:
    sha = request.url.path.rsplit("/", 1)[1]
    if sha not in COMMITS:
        return httpx.Response(422, json={"message": "No commit found"})
    return httpx.Response(200, json={"sha": sha, **COMMITS[sha]})


@pytest.fixture
def directory():
    return DirectoryTeammateResolver(
        TEAM, token="t", transport=httpx.MockTransport(handler)
    )


def resolve(directory, commit):
    return directory.resolve_by_commit_author(
        Context.background(), "acme", "widgets", commit
    )


def test_match_by_login(directory):
    assert resolve(directory, "aaa").chat_id == "U1"


def test_match_by_email_when_no_login(directory):
    assert resolve(directory, "bbb").name == "Bob"


def test_unknown_author(directory):
    with pytest.raises(TeammateNotFound, match="mallory"):
        resolve(directory, "ccc")


def test_empty_commit_rejected_without_request():
    def fail(request):
        raise AssertionError("unexpected request")

    directory = DirectoryTeammateResolver(
        TEAM, transport=httpx.MockTransport(fail)
    )

    with pytest.raises(TeammateNotFound):
        resolve(directory, "")


def test_api_error_propagates(directory):
    with pytest.raises(httpx.HTTPStatusError):
        resolve(directory, "zzz")
