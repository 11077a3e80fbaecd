"""Git-related services for git-worktree-keeper."""

from .worktrees import WorktreeService
from .stashes import StashService
from .branch_queries import BranchQueries
from .github import GitHubService

__all__ = [
    "WorktreeService",
    "StashService",
    "BranchQueries",
    "GitHubService",
]
