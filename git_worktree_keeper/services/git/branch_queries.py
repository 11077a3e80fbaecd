"""Branch query service for git-worktree-keeper."""

import git
from typing import Optional, List, Set, Tuple

from git_worktree_keeper.models.snapshot import CollectionAnomaly
from git_worktree_keeper.models.worktree import TrackingStatus
from git_worktree_keeper.services.git.errors import format_git_error
from git_worktree_keeper.services.git.porcelain import (
    BranchLine,
    parse_branch_listing,
    parse_upstream_track,
)
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


class BranchQueries:
    """Service for querying and deleting local branches."""

    def __init__(self, repo_path: str):
        """Initialize the branch queries service.

        Args:
            repo_path: Path to the git repository
        """
        self.repo_path = repo_path
        logger.debug("Branch queries service initialized")

    def _get_repo(self):
        """Get a fresh git.Repo instance for the repository."""
        return git.Repo(self.repo_path)

    def list_branches(self, cwd: Optional[str] = None) -> Tuple[List[BranchLine], List[CollectionAnomaly]]:
        """Parse the verbose branch listing.

        Args:
            cwd: Directory to run the listing from; the ``*`` marker follows its HEAD

        Returns:
            Tuple of (branches in listing order, anomalies for skipped lines)
        """
        try:
            repo = self._get_repo()
            command = ["git"]
            if cwd:
                command += ["-C", cwd]
            output = repo.git.execute(command + ["branch", "-vv", "--no-color"])
        except git.exc.GitCommandError as e:
            error_msg = format_git_error("git branch -vv", e)
            logger.warning(f"Could not list branches: {error_msg}")
            return [], [CollectionAnomaly("branches", "branch list", error_msg)]

        branches, anomalies = parse_branch_listing(output, self.list_upstreams())
        for anomaly in anomalies:
            logger.warning(f"Skipping branch entry: {anomaly}")
        logger.debug(f"Found {len(branches)} local branches")
        return branches, anomalies

    def list_upstreams(self) -> Optional[Set[str]]:
        """Get the configured upstream names of all local branches.

        Returns:
            Set of upstream short names (local branches included), or None
            when they cannot be read
        """
        try:
            repo = self._get_repo()
            output = repo.git.for_each_ref("--format=%(upstream:short)", "refs/heads")
        except git.exc.GitCommandError as e:
            logger.debug(f"Could not read upstream names: {format_git_error('git for-each-ref', e)}")
            return None
        return {line.strip() for line in output.splitlines() if line.strip()}

    def get_tracking_status(self, branch_name: str) -> Tuple[TrackingStatus, Optional[str]]:
        """Get the upstream relationship of a branch.

        Returns:
            Tuple of (tracking status, error_message). On error the status is
            no-remote and error_message describes the failure.
        """
        try:
            repo = self._get_repo()
            output = repo.git.for_each_ref(
                "--format=%(upstream:short) %(upstream:track)", f"refs/heads/{branch_name}"
            )
            return parse_upstream_track(output), None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error("git for-each-ref", e)
            logger.debug(f"Could not read upstream of {branch_name}: {error_msg}")
            return TrackingStatus.NO_REMOTE, error_msg

    def delete_branch(self, branch_name: str) -> Tuple[bool, Optional[str]]:
        """Force-delete a local branch.

        Squash-merged branches are not recognised as merged by ``git branch -d``,
        so deletion always uses ``-D``.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        try:
            repo = self._get_repo()
            repo.git.branch("-D", branch_name)
            logger.info(f"Deleted branch {branch_name}")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error("git branch -D", e)
            logger.error(f"Failed to delete branch {branch_name}: {error_msg}")
            return False, error_msg
