"""Custom exceptions for git-worktree-keeper"""

from typing import Iterable, Optional


class WorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""
    pass


class RepositoryNotFoundError(WorktreeKeeperError):
    """Exception raised when the path is not inside a Git working tree."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        error_msg = f"Not a git repository: {path}"
        if message:
            error_msg += f" ({message})"
        super().__init__(error_msg)


class WorktreeSupportError(WorktreeKeeperError):
    """Exception raised when the worktree subsystem cannot be used."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Git worktrees unavailable: {message}")


class UnresolvedPlanError(WorktreeKeeperError):
    """Exception raised when a plan still contains ASK items at execution time."""

    def __init__(self, items: Iterable):
        self.items = list(items)
        targets = ", ".join(f"{item.target_kind.value} {item.target_id}" for item in self.items)
        super().__init__(f"Plan has {len(self.items)} unresolved ASK item(s): {targets}")


class PlanFormatError(WorktreeKeeperError):
    """Exception raised when a plan document cannot be read."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Invalid plan document: {message}")
