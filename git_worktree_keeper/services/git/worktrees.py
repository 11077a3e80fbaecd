"""Worktree operations service for git-worktree-keeper."""

import git
import os
from typing import Optional, List, Tuple

from git_worktree_keeper.exceptions import WorktreeSupportError
from git_worktree_keeper.models.snapshot import CollectionAnomaly
from git_worktree_keeper.models.worktree import DirtyStatus
from git_worktree_keeper.services.git.errors import format_git_error
from git_worktree_keeper.services.git.porcelain import (
    WorktreeEntry,
    count_status_porcelain,
    parse_worktree_porcelain,
)
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


class WorktreeService:
    """Service for listing, inspecting and removing git worktrees."""

    def __init__(self, repo_path: str):
        """Initialize the worktree service.

        Args:
            repo_path: Path to the git repository
        """
        self.repo_path = repo_path

    def _get_repo(self):
        """Get a fresh git.Repo instance for the repository."""
        return git.Repo(self.repo_path)

    def list_worktrees(self) -> Tuple[List[WorktreeEntry], List[CollectionAnomaly]]:
        """Parse the porcelain worktree listing.

        Returns:
            Tuple of (entries in listing order, anomalies for skipped entries)

        Raises:
            WorktreeSupportError: the worktree listing itself cannot be produced
        """
        try:
            repo = self._get_repo()
            output = repo.git.worktree("list", "--porcelain")
        except git.exc.GitCommandError as e:
            raise WorktreeSupportError(format_git_error("git worktree list", e))

        entries, anomalies = parse_worktree_porcelain(output)
        for anomaly in anomalies:
            logger.warning(f"Skipping worktree entry: {anomaly}")

        logger.debug(f"Found {len(entries)} worktrees")
        for entry in entries:
            logger.debug(f"  {entry.path} ({entry.branch or 'detached'})")
        return entries, anomalies

    def get_dirty_status(self, worktree_path: str) -> Tuple[DirtyStatus, Optional[str]]:
        """Count uncommitted changes in a worktree.

        Args:
            worktree_path: Path to the worktree directory

        Returns:
            Tuple of (dirty status, error_message). On error the status is clean
            and error_message describes the failure.
        """
        if not os.path.isdir(worktree_path):
            logger.debug(f"Worktree path {worktree_path} doesn't exist (prunable)")
            return DirtyStatus(), None

        try:
            repo = self._get_repo()
            status = repo.git.execute(["git", "-C", worktree_path, "status", "--porcelain"])
            return count_status_porcelain(status), None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error("git status", e)
            logger.warning(f"Could not check worktree status for {worktree_path}: {error_msg}")
            return DirtyStatus(), error_msg

    def remove_worktree(self, path: str, force: bool = True) -> Tuple[bool, Optional[str]]:
        """Remove a worktree at the specified path.

        Args:
            path: Path to the worktree directory
            force: Force removal even if the working tree is dirty

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        try:
            repo = self._get_repo()
            args = ["remove", path]
            if force:
                args.append("--force")

            repo.git.worktree(*args)
            logger.info(f"Removed worktree at {path}")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error("git worktree remove", e)
            logger.error(f"Failed to remove worktree at {path}: {error_msg}")
            return False, error_msg

    def prune_worktrees(self) -> Tuple[bool, Optional[str]]:
        """Prune stale worktree metadata.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        try:
            repo = self._get_repo()
            repo.git.worktree("prune")
            logger.info("Pruned stale worktree metadata")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error("git worktree prune", e)
            logger.error(f"Failed to prune worktrees: {error_msg}")
            return False, error_msg
