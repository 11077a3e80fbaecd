"""Worktree data models."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from git_worktree_keeper.constants import DETACHED_SENTINEL


class TrackingStatus(Enum):
    """Upstream relationship of a local branch."""
    NO_REMOTE = "no-remote"
    GONE = "gone"
    AHEAD = "ahead"
    BEHIND = "behind"
    UP_TO_DATE = "up-to-date"
    NOT_APPLICABLE = "n/a"


class PRState(Enum):
    """State of the pull request associated with a branch."""
    NONE = "none"
    NOT_APPLICABLE = "n/a"
    OPEN = "OPEN"
    MERGED = "MERGED"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class PullRequestStatus:
    """PR state plus number, rendered as ``MERGED#12``."""
    state: PRState = PRState.NONE
    number: Optional[int] = None

    @classmethod
    def none(cls) -> "PullRequestStatus":
        return cls(PRState.NONE)

    @classmethod
    def not_applicable(cls) -> "PullRequestStatus":
        return cls(PRState.NOT_APPLICABLE)

    @property
    def is_merged(self) -> bool:
        return self.state == PRState.MERGED

    @property
    def has_pr(self) -> bool:
        return self.state in (PRState.OPEN, PRState.MERGED, PRState.CLOSED)

    def __str__(self) -> str:
        if self.has_pr and self.number is not None:
            return f"{self.state.value}#{self.number}"
        return self.state.value


@dataclass(frozen=True)
class DirtyStatus:
    """Uncommitted change counts of a worktree."""
    modified: int = 0
    untracked: int = 0

    @property
    def is_clean(self) -> bool:
        return self.modified == 0 and self.untracked == 0

    def __str__(self) -> str:
        if self.is_clean:
            return "clean"
        return f"dirty({self.modified}mod,{self.untracked}new)"


@dataclass
class WorktreeRecord:
    """One entry of the repository's worktree listing."""

    path: str
    branch: Optional[str]  # None = detached HEAD
    head_commit: str
    dirty: DirtyStatus = field(default_factory=DirtyStatus)
    tracking: TrackingStatus = TrackingStatus.NOT_APPLICABLE
    pr_status: PullRequestStatus = field(default_factory=PullRequestStatus.not_applicable)
    is_current: bool = False
    is_primary: bool = False
    locked: bool = False
    prunable: bool = False

    @property
    def is_detached(self) -> bool:
        return self.branch is None

    @property
    def branch_label(self) -> str:
        """Branch name, or the detached sentinel."""
        return DETACHED_SENTINEL if self.branch is None else self.branch

    @property
    def name(self) -> str:
        """Short display name (the worktree directory name)."""
        return os.path.basename(self.path.rstrip("/")) or self.path

    def __str__(self) -> str:
        markers = []
        if self.is_primary:
            markers.append("primary")
        if self.is_current:
            markers.append("current")
        suffix = f" ({', '.join(markers)})" if markers else ""
        return f"{self.branch_label} @ {self.path}{suffix} [{self.dirty}]"
