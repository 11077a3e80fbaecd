"""Core functionality for git-worktree-keeper"""

import os
import signal
from contextlib import contextmanager
from typing import Callable, List, Optional, Tuple, Union

import git
from rich.console import Console

from git_worktree_keeper.config import Config
from git_worktree_keeper.exceptions import RepositoryNotFoundError, WorktreeSupportError
from git_worktree_keeper.models.plan import ActionItem, ExecutionResult, Plan
from git_worktree_keeper.models.snapshot import AuditSnapshot
from git_worktree_keeper.services.classifier import Classifier
from git_worktree_keeper.services.executor import Executor
from git_worktree_keeper.services.git import BranchQueries, GitHubService, StashService, WorktreeService
from git_worktree_keeper.services.git.errors import format_git_error
from git_worktree_keeper.services.planner import Planner
from git_worktree_keeper.services.state_collector import StateCollector
from git_worktree_keeper.logging_config import get_logger

console = Console(stderr=True)
logger = get_logger(__name__)


@contextmanager
def _deferred_interrupts():
    """Finish the running batch on Ctrl-C instead of stopping half way."""

    def handler(signum, frame):
        console.print(
            "\n[yellow]Interrupted! Finishing the remaining plan items "
            "(completed actions are not rolled back)...[/yellow]"
        )

    try:
        previous = signal.signal(signal.SIGINT, handler)
    except ValueError:
        # Not the main thread; signals cannot be redirected here
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


class WorktreeKeeper:
    """Audits and cleans up the worktrees, stashes and branches of one repository."""

    def __init__(self, repo_path: str, config: Union[Config, dict], cwd: Optional[str] = None):
        """Initialize WorktreeKeeper.

        Args:
            repo_path: Any path inside the repository
            config: Configuration dict or Config object
            cwd: Directory treated as the working directory when picking the
                current worktree (defaults to the process working directory)

        Raises:
            RepositoryNotFoundError: repo_path is not inside a git working tree
            WorktreeSupportError: the repository cannot use worktrees
        """
        if isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.cwd = cwd or os.getcwd()

        try:
            self.repo = git.Repo(repo_path, search_parent_directories=True)
        except git.exc.NoSuchPathError:
            raise RepositoryNotFoundError(str(repo_path), "path does not exist")
        except git.exc.InvalidGitRepositoryError:
            raise RepositoryNotFoundError(str(repo_path))

        if self.repo.bare or not self.repo.working_tree_dir:
            raise WorktreeSupportError(f"{repo_path} is a bare repository")
        self.repo_path = self.repo.working_tree_dir

        try:
            self.repo.git.worktree("list")
        except git.exc.GitCommandError as e:
            raise WorktreeSupportError(format_git_error("git worktree list", e))

        self.worktree_service = WorktreeService(self.repo_path)
        self.stash_service = StashService(self.repo_path)
        self.branch_queries = BranchQueries(self.repo_path)
        self.github_service = GitHubService(self.config)
        self._setup_github()

        self.collector = StateCollector(
            self.worktree_service, self.stash_service, self.branch_queries, self.github_service
        )
        self.classifier = Classifier(self.config)
        self.planner = Planner()

    def _setup_github(self) -> None:
        """Enable PR lookup when the configured remote is on GitHub."""
        remote_name = self.config.get("remote_name", "origin")
        try:
            remote_url = self.repo.remote(remote_name).url
        except ValueError:
            logger.info(f"No '{remote_name}' remote found. PR lookup disabled.")
            return
        self.github_service.setup_github_api(remote_url)

    def audit(self) -> AuditSnapshot:
        """Collect the current state of worktrees, stashes and branches."""
        return self.collector.collect(cwd=self.cwd)

    def propose(self, snapshot: Optional[AuditSnapshot] = None) -> Tuple[AuditSnapshot, Plan]:
        """Classify a snapshot and order the proposed actions."""
        snapshot = snapshot or self.audit()
        items = self.classifier.classify(snapshot.worktrees, snapshot.stashes, snapshot.branches)
        return snapshot, self.planner.build(items)

    def apply(
        self,
        approved: Union[Plan, List[ActionItem]],
        approve_recommended: bool = False,
        on_result: Optional[Callable[[ExecutionResult], None]] = None,
    ) -> Tuple[List[ExecutionResult], AuditSnapshot]:
        """Execute an approved plan and collect the after-state.

        The plan is re-ordered through the planner, so an edited plan document
        cannot break the stash or worktree-before-branch ordering.

        Args:
            approved: Plan (or items) resolved by the decision-maker
            approve_recommended: Resolve remaining ASK items to their default,
                or KEEP where they have none
            on_result: Progress callback invoked after each item

        Raises:
            UnresolvedPlanError: ASK items remain and approve_recommended is False
        """
        items = list(approved)
        if approve_recommended:
            items = [item.resolve_recommended() for item in items]
        plan = self.planner.build(items)

        before = self.audit()
        executor = Executor(
            self.worktree_service,
            self.stash_service,
            self.branch_queries,
            protected_worktrees=self._protected_worktrees(before),
            protected_branches=self._protected_branches(before),
            dry_run=self.config.get("dry_run", False),
            on_result=on_result,
        )

        with _deferred_interrupts():
            results = executor.execute(plan)

        return results, self.audit()

    def _protected_worktrees(self, snapshot: AuditSnapshot) -> dict:
        protected = {}
        current = snapshot.current_worktree
        if current is not None:
            protected[current.path] = "current worktree"
        primary = snapshot.primary_worktree
        if primary is not None:
            protected[primary.path] = "primary checkout"
        return protected

    def _protected_branches(self, snapshot: AuditSnapshot) -> dict:
        protected = {name: "protected branch" for name in self.config.get("protected_branches", [])}
        current = snapshot.current_worktree
        if current and current.branch:
            protected[current.branch] = "branch of the current worktree"
        for br in snapshot.branches:
            if br.is_current:
                protected[br.name] = "current branch"
        return protected

    def close(self) -> None:
        """Release repository and API resources."""
        self.github_service.close()
        self.repo.close()
