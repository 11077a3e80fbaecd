"""GitHub pull request lookup for git-worktree-keeper"""

import os
from typing import Optional, Dict, TYPE_CHECKING, Union
from urllib.parse import urlparse
from github import Github, Auth

from git_worktree_keeper.models.worktree import PRState, PullRequestStatus
from git_worktree_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from github.Repository import Repository
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)


def parse_github_repo(remote_url: str) -> Optional[str]:
    """Extract ``owner/repo`` from a GitHub remote URL, None for other hosts."""
    if "github.com" not in remote_url:
        return None
    if remote_url.startswith("git@"):
        # SSH URL format (git@github.com:org/repo.git)
        path = remote_url.split("github.com:", 1)[1]
    else:
        # HTTPS or ssh:// URL format
        path = urlparse(remote_url).path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]
    return path or None


class GitHubService:
    """Best-effort pull request status lookup.

    Every failure degrades to status ``none``; nothing here is fatal.
    """

    def __init__(self, config: Union["Config", dict]):
        self.config = config
        self.debug_mode = config.get("debug", False)
        self.github_token = config.get("github_token") or os.environ.get("GITHUB_TOKEN")
        self.github_repo: Optional[str] = None
        self.github: Optional[Github] = None
        self.gh_repo: Optional["Repository"] = None
        self._pr_cache: Dict[str, PullRequestStatus] = {}

    @property
    def enabled(self) -> bool:
        return self.gh_repo is not None

    def setup_github_api(self, remote_url: str) -> bool:
        """Set up GitHub API access for a remote.

        Returns:
            True if PR lookup is available afterwards
        """
        if self.config.get("bypass_github", False):
            logger.debug("[GitHub] Lookups bypassed by configuration")
            return False

        self.github_repo = parse_github_repo(remote_url)
        if not self.github_repo:
            logger.info(f"Non-GitHub remote ({remote_url}). PR lookup disabled.")
            return False

        if not self.github_token:
            logger.info(
                "GitHub token not found. PR status will be reported as 'none'.\n"
                "  • To enable: set the GITHUB_TOKEN environment variable"
            )
            return False

        try:
            self.github = Github(auth=Auth.Token(self.github_token))
            self.gh_repo = self.github.get_repo(self.github_repo)
            logger.debug(f"[GitHub] GitHub integration enabled for: {self.github_repo}")
            return True
        except Exception as e:
            logger.warning(f"[GitHub] Setup failed - PR lookup disabled: {e}")
            self.gh_repo = None
            return False

    def get_pr_status(self, branch_name: str) -> PullRequestStatus:
        """Get the state of the most recent pull request whose head is this branch."""
        if branch_name in self._pr_cache:
            return self._pr_cache[branch_name]

        status = self._lookup_pr_status(branch_name)
        self._pr_cache[branch_name] = status
        return status

    def _lookup_pr_status(self, branch_name: str) -> PullRequestStatus:
        if not self.enabled or self.github_repo is None:
            return PullRequestStatus.none()

        try:
            owner = self.github_repo.split("/")[0]
            pulls = self.gh_repo.get_pulls(
                state="all", head=f"{owner}:{branch_name}", sort="created", direction="desc"
            )
            latest = next(iter(pulls), None)
            if latest is None:
                return PullRequestStatus.none()

            if latest.merged_at is not None:
                state = PRState.MERGED
            elif latest.state == "closed":
                state = PRState.CLOSED
            else:
                state = PRState.OPEN

            if self.debug_mode:
                logger.debug(f"[GitHub] Branch {branch_name} has {state.value} PR #{latest.number}")
            return PullRequestStatus(state, latest.number)
        except Exception as e:
            logger.debug(f"[GitHub] Error fetching PRs for branch {branch_name}: {e}")
            return PullRequestStatus.none()

    def close(self) -> None:
        """Close the GitHub API connection to clean up resources."""
        if self.github:
            try:
                self.github.close()
                logger.debug("[GitHub] Closed GitHub API connection")
            except Exception as e:
                logger.debug(f"[GitHub] Error closing GitHub API connection: {e}")
