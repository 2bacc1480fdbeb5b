"""Branch locker interface and the deferred actions it returns."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from buildchecker.core.errors import ActionAlreadyExecuted

if TYPE_CHECKING:
    from buildchecker.core.build import CommitInfo
    from buildchecker.core.context import Context


class ActionKind(str, Enum):
    LOCK = "lock"
    UNLOCK = "unlock"


@runtime_checkable
class BranchAction(Protocol):
    """A constructed but not yet executed lock or unlock."""

    kind: ActionKind
    noop: bool

    def execute(self) -> None:
        """Apply the change. Raises on failure."""
        ...


class Action:
    """Single-shot BranchAction wrapping a zero-argument callable.

    noop marks actions that leave the branch untouched (locking an
    already locked branch, unlocking an unlocked one).
    """

    def __init__(
        self,
        kind: ActionKind,
        fn: Callable[[], None] | None = None,
        description: str = "",
    ):
        self.kind = kind
        self.noop = fn is None
        self.description = description or kind.value
        self._fn = fn
        self._executed = False

    @classmethod
    def nothing(cls, kind: ActionKind, description: str = "") -> Action:
        """Action that does nothing when executed."""
        return cls(kind, None, description)

    @property
    def executed(self) -> bool:
        return self._executed

    def execute(self) -> None:
        if self._executed:
            raise ActionAlreadyExecuted(
                f"{self.kind.value} action already executed"
            )
        self._executed = True
        if self._fn is not None:
            self._fn()

    def __repr__(self) -> str:
        return (
            f"Action(kind={self.kind.value!r}, noop={self.noop}, "
            f"description={self.description!r})"
        )


class BranchLocker(Protocol):
    """Produces idempotent lock/unlock actions for one branch."""

    def lock(
        self,
        ctx: Context,
        commits: Sequence[CommitInfo],
        reason: str,
    ) -> BranchAction:
        """Return an action that locks the branch.

        commits are the failed commits whose authors may still push;
        reason is the owning team allowed to push while locked.
        """
        ...

    def unlock(self, ctx: Context) -> BranchAction:
        """Return an action that unlocks the branch."""
        ...
