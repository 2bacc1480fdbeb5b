"""Exception types raised by buildchecker."""


class BuildCheckerError(Exception):
    """Base class for all buildchecker errors."""


class BranchLockError(BuildCheckerError):
    """The branch locker refused to produce a lock or unlock action.

    Fatal to the evaluation: no CheckResults are returned.
    """


class CheckCancelled(BuildCheckerError):
    """The evaluation context was cancelled before a decision was made."""


class TeammateNotFound(BuildCheckerError):
    """No teammate matches the author of a commit."""


class ActionAlreadyExecuted(BuildCheckerError):
    """A single-shot branch action was executed a second time."""
