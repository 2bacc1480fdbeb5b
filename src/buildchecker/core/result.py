"""Result of one branch evaluation."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from buildchecker.branch.locker import ActionKind, BranchAction
from buildchecker.core.build import CommitInfo


class CheckResults(BaseModel):
    """Decision produced by check_builds().

    The action has been constructed but not executed; the caller
    executes it exactly once.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    lock_branch: bool = False
    action: BranchAction
    failed_commits: list[CommitInfo] = Field(default_factory=list)

    @model_validator(mode="after")
    def _action_matches_decision(self) -> "CheckResults":
        expected = ActionKind.LOCK if self.lock_branch else ActionKind.UNLOCK
        if self.action.kind is not expected:
            raise ValueError(
                f"lock_branch={self.lock_branch} does not match "
                f"{self.action.kind.value} action"
            )
        return self
