"""Collected repository state."""

from dataclasses import dataclass, field
from typing import List, Optional

from git_worktree_keeper.models.branch import BranchRecord
from git_worktree_keeper.models.stash import StashRecord
from git_worktree_keeper.models.worktree import WorktreeRecord


@dataclass(frozen=True)
class CollectionAnomaly:
    """A record that could not be parsed or fully queried."""
    source: str  # worktrees, stashes, branches
    subject: str
    message: str

    def __str__(self) -> str:
        return f"[{self.source}] {self.subject}: {self.message}"


@dataclass
class AuditSnapshot:
    """Worktrees, stashes and branches collected in one run."""
    worktrees: List[WorktreeRecord] = field(default_factory=list)
    stashes: List[StashRecord] = field(default_factory=list)
    branches: List[BranchRecord] = field(default_factory=list)
    anomalies: List[CollectionAnomaly] = field(default_factory=list)

    @property
    def current_worktree(self) -> Optional[WorktreeRecord]:
        return next((wt for wt in self.worktrees if wt.is_current), None)

    @property
    def primary_worktree(self) -> Optional[WorktreeRecord]:
        return next((wt for wt in self.worktrees if wt.is_primary), None)
