"""Tests for the cancellation/deadline context."""

import time

import pytest

from buildchecker.core.context import Context
from buildchecker.core.errors import CheckCancelled


def test_background_is_never_done():
    ctx = Context.background()

    assert not ctx.done
    assert ctx.remaining() is None
    assert ctx.reason() == ""
    ctx.raise_if_done()


def test_cancel():
    ctx = Context.background()
    ctx.cancel()

    assert ctx.cancelled
    assert ctx.done
    with pytest.raises(CheckCancelled, match="cancelled"):
        ctx.raise_if_done()


def test_expired_deadline():
    ctx = Context(deadline=time.monotonic() - 1)

    assert ctx.expired
    assert not ctx.cancelled
    assert ctx.remaining() == 0.0
    with pytest.raises(CheckCancelled, match="deadline exceeded"):
        ctx.raise_if_done()


def test_with_timeout_sets_remaining():
    ctx = Context.background().with_timeout(60)

    remaining = ctx.remaining()
    assert remaining is not None
    assert 0 < remaining <= 60
    assert not ctx.done


def test_child_cannot_outlive_parent_deadline():
    parent = Context.background().with_timeout(5)
    child = parent.with_timeout(3600)

    assert child.remaining() <= 5


def test_parent_cancel_propagates_to_child():
    parent = Context.background()
    child = parent.with_timeout(60)

    parent.cancel()

    assert child.done
    assert child.reason() == "context cancelled"


def test_child_cancel_leaves_parent():
    parent = Context.background()
    child = parent.with_timeout(60)

    child.cancel()

    assert child.done
    assert not parent.done
