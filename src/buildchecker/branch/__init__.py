"""Branch locking: the locker interface and the GitHub implementation."""

from buildchecker.branch.locker import (
    Action,
    ActionKind,
    BranchAction,
    BranchLocker,
)

__all__ = ["Action", "ActionKind", "BranchAction", "BranchLocker"]
