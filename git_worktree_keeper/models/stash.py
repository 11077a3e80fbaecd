"""Stash data model."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from git_worktree_keeper.constants import EMPTY_STASH_STAT


def stash_ref(index: int) -> str:
    """Return the reflog selector for a stash index, e.g. ``stash@{2}``."""
    return f"stash@{{{index}}}"


@dataclass
class StashRecord:
    """One entry of the stash list."""
    index: int
    branch: str
    message: str
    diff_stat: str = EMPTY_STASH_STAT
    commit: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def ref(self) -> str:
        return stash_ref(self.index)

    def age_days(self, now: Optional[datetime] = None) -> Optional[int]:
        """Age of the stash commit in whole days, or None if unknown."""
        if self.created_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return (now - self.created_at).days

    def __str__(self) -> str:
        return f"{self.ref}: {self.branch}: {self.message}"
