"""Branch model and related enums"""
from enum import Enum
from dataclasses import dataclass, field

from git_worktree_keeper.models.worktree import PullRequestStatus, TrackingStatus


class BranchStatus(Enum):
    """Divergence of a branch from its upstream."""
    GONE = "gone"
    AHEAD = "ahead"
    BEHIND = "behind"
    UP_TO_DATE = "up-to-date"
    LOCAL_ONLY = "local-only"


@dataclass
class BranchRecord:
    """One local branch from the verbose branch listing."""
    name: str
    tracking: TrackingStatus
    status: BranchStatus
    has_worktree: bool = False
    is_current: bool = False
    upstream: str = ""
    head_commit: str = ""
    pr_status: PullRequestStatus = field(default_factory=PullRequestStatus.none)
