"""Data models for git-worktree-keeper."""

from .worktree import DirtyStatus, PRState, PullRequestStatus, TrackingStatus, WorktreeRecord
from .stash import StashRecord, stash_ref
from .branch import BranchRecord, BranchStatus
from .plan import ActionItem, ActionType, ExecutionResult, Outcome, Plan, TargetKind
from .snapshot import AuditSnapshot, CollectionAnomaly

__all__ = [
    "DirtyStatus",
    "PRState",
    "PullRequestStatus",
    "TrackingStatus",
    "WorktreeRecord",
    "StashRecord",
    "stash_ref",
    "BranchRecord",
    "BranchStatus",
    "ActionItem",
    "ActionType",
    "ExecutionResult",
    "Outcome",
    "Plan",
    "TargetKind",
    "AuditSnapshot",
    "CollectionAnomaly",
]
