"""Stash queries and operations for git-worktree-keeper."""

import git
from datetime import datetime, timezone
from typing import Optional, List, Tuple

from git_worktree_keeper.models.snapshot import CollectionAnomaly
from git_worktree_keeper.models.stash import stash_ref
from git_worktree_keeper.services.git.errors import format_git_error
from git_worktree_keeper.services.git.porcelain import StashLine, parse_stash_list, parse_stash_stat
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


class StashService:
    """Service for reading and dropping stash entries."""

    def __init__(self, repo_path: str):
        self.repo_path = repo_path

    def _get_repo(self):
        """Get a fresh git.Repo instance for the repository."""
        return git.Repo(self.repo_path)

    def list_stashes(self) -> Tuple[List[StashLine], List[CollectionAnomaly]]:
        """Parse ``git stash list``.

        A failing listing degrades to an empty list with one anomaly.
        """
        try:
            repo = self._get_repo()
            output = repo.git.stash("list")
        except git.exc.GitCommandError as e:
            error_msg = format_git_error("git stash list", e)
            logger.warning(f"Could not list stashes: {error_msg}")
            return [], [CollectionAnomaly("stashes", "stash list", error_msg)]

        stashes, anomalies = parse_stash_list(output)
        for anomaly in anomalies:
            logger.warning(f"Skipping stash entry: {anomaly}")
        logger.debug(f"Found {len(stashes)} stashes")
        return stashes, anomalies

    def get_diff_stat(self, index: int) -> Tuple[Optional[str], Optional[str]]:
        """Get the diff-stat summary line of one stash.

        Returns:
            Tuple of (summary or None when the stash has no tracked changes, error_message)
        """
        try:
            repo = self._get_repo()
            output = repo.git.stash("show", "--stat", stash_ref(index))
            return parse_stash_stat(output), None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error("git stash show", e)
            logger.debug(f"Could not read diff stat of {stash_ref(index)}: {error_msg}")
            return None, error_msg

    def get_stash_commit(self, index: int) -> Tuple[Optional[str], Optional[datetime]]:
        """Get the commit hash and creation time of one stash.

        Returns:
            Tuple of (hexsha, commit time in UTC); both None if the stash can't be read
        """
        try:
            repo = self._get_repo()
            output = repo.git.show("-s", "--format=%H %ct", stash_ref(index))
            hexsha, timestamp = output.strip().split()[:2]
            return hexsha, datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
        except git.exc.GitCommandError as e:
            logger.debug(f"Could not resolve {stash_ref(index)}: {format_git_error('git show', e)}")
            return None, None
        except ValueError as e:
            logger.debug(f"Unexpected commit info for {stash_ref(index)}: {e}")
            return None, None

    def drop_stash(self, index: int, expected_commit: Optional[str] = None) -> Tuple[bool, Optional[str]]:
        """Drop one stash entry.

        Args:
            index: Stash index to drop
            expected_commit: If set, the stash at ``index`` must still be this commit

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        ref = stash_ref(index)
        if expected_commit:
            actual, _ = self.get_stash_commit(index)
            if actual is None:
                return False, f"{ref} no longer exists"
            if actual != expected_commit:
                return False, (
                    f"{ref} is now {actual[:8]}, expected {expected_commit[:8]}; "
                    "stash list changed since the audit"
                )

        try:
            repo = self._get_repo()
            repo.git.stash("drop", ref)
            logger.info(f"Dropped {ref}")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error("git stash drop", e)
            logger.error(f"Failed to drop {ref}: {error_msg}")
            return False, error_msg
