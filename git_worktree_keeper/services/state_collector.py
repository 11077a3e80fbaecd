"""Collects worktree, stash and branch state into uniform records."""

import os
from typing import List, Optional, Sequence, Tuple

from git_worktree_keeper.constants import EMPTY_STASH_STAT
from git_worktree_keeper.models.branch import BranchRecord
from git_worktree_keeper.models.snapshot import AuditSnapshot, CollectionAnomaly
from git_worktree_keeper.models.stash import StashRecord
from git_worktree_keeper.models.worktree import PullRequestStatus, TrackingStatus, WorktreeRecord
from git_worktree_keeper.services.git import BranchQueries, GitHubService, StashService, WorktreeService
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


def _real(path: str) -> str:
    return os.path.realpath(path)


def find_current_index(paths: Sequence[str], cwd: str) -> int:
    """Index of the worktree containing ``cwd``.

    Linked worktrees usually live inside the primary checkout, so the deepest
    containing path wins. Falls back to the primary checkout (index 0).
    """
    cwd = _real(cwd)
    best_index, best_length = 0, -1
    for index, path in enumerate(paths):
        real = _real(path)
        if cwd == real or cwd.startswith(real.rstrip(os.sep) + os.sep):
            if len(real) > best_length:
                best_index, best_length = index, len(real)
    return best_index


class StateCollector:
    """Runs the Git queries for one audit and builds an ``AuditSnapshot``.

    Only the pull request lookup touches the network; it is best-effort.
    Per-record failures are recorded as anomalies and never abort the run.
    """

    def __init__(
        self,
        worktree_service: WorktreeService,
        stash_service: StashService,
        branch_queries: BranchQueries,
        github_service: GitHubService,
    ):
        self.worktree_service = worktree_service
        self.stash_service = stash_service
        self.branch_queries = branch_queries
        self.github_service = github_service

    def collect(self, cwd: Optional[str] = None) -> AuditSnapshot:
        """Collect all three record sets.

        Args:
            cwd: Directory treated as the process working directory when
                deciding which worktree is current (defaults to ``os.getcwd()``)
        """
        cwd = cwd or os.getcwd()
        worktrees, worktree_anomalies = self.collect_worktrees(cwd)
        stashes, stash_anomalies = self.collect_stashes()

        current = next((wt for wt in worktrees if wt.is_current), None)
        branches, branch_anomalies = self.collect_branches(
            worktrees, cwd=current.path if current else None
        )

        snapshot = AuditSnapshot(
            worktrees=worktrees,
            stashes=stashes,
            branches=branches,
            anomalies=worktree_anomalies + stash_anomalies + branch_anomalies,
        )
        logger.info(
            f"Collected {len(worktrees)} worktrees, {len(stashes)} stashes, "
            f"{len(branches)} branches ({len(snapshot.anomalies)} anomalies)"
        )
        return snapshot

    def collect_worktrees(self, cwd: str) -> Tuple[List[WorktreeRecord], List[CollectionAnomaly]]:
        entries, anomalies = self.worktree_service.list_worktrees()
        if not entries:
            return [], anomalies

        current_index = find_current_index([entry.path for entry in entries], cwd)
        records = []
        for index, entry in enumerate(entries):
            missing = not os.path.isdir(entry.path)
            dirty, error = self.worktree_service.get_dirty_status(entry.path)
            if error:
                anomalies.append(CollectionAnomaly("worktrees", entry.path, error))

            if entry.branch is None:
                tracking = TrackingStatus.NOT_APPLICABLE
                pr_status = PullRequestStatus.not_applicable()
            else:
                tracking, error = self.branch_queries.get_tracking_status(entry.branch)
                if error:
                    anomalies.append(CollectionAnomaly("worktrees", entry.path, error))
                pr_status = self.github_service.get_pr_status(entry.branch)

            records.append(
                WorktreeRecord(
                    path=entry.path,
                    branch=entry.branch,
                    head_commit=entry.short_head,
                    dirty=dirty,
                    tracking=tracking,
                    pr_status=pr_status,
                    is_current=index == current_index,
                    is_primary=index == 0,
                    locked=entry.locked,
                    prunable=entry.prunable or missing,
                )
            )
        return records, anomalies

    def collect_stashes(self) -> Tuple[List[StashRecord], List[CollectionAnomaly]]:
        lines, anomalies = self.stash_service.list_stashes()
        records = []
        for line in lines:
            stat, error = self.stash_service.get_diff_stat(line.index)
            if error:
                anomalies.append(CollectionAnomaly("stashes", f"stash@{{{line.index}}}", error))
            commit, created_at = self.stash_service.get_stash_commit(line.index)
            if commit is None:
                anomalies.append(
                    CollectionAnomaly("stashes", f"stash@{{{line.index}}}", "stash commit could not be resolved")
                )
            records.append(
                StashRecord(
                    index=line.index,
                    branch=line.branch,
                    message=line.message,
                    diff_stat=stat or EMPTY_STASH_STAT,
                    commit=commit,
                    created_at=created_at,
                )
            )
        return records, anomalies

    def collect_branches(
        self, worktrees: Sequence[WorktreeRecord], cwd: Optional[str] = None
    ) -> Tuple[List[BranchRecord], List[CollectionAnomaly]]:
        lines, anomalies = self.branch_queries.list_branches(cwd=cwd)
        worktree_branches = {wt.branch: wt for wt in worktrees if wt.branch}

        records = []
        for line in lines:
            worktree = worktree_branches.get(line.name)
            if worktree is not None:
                pr_status = worktree.pr_status
            else:
                pr_status = self.github_service.get_pr_status(line.name)
            records.append(
                BranchRecord(
                    name=line.name,
                    tracking=line.tracking,
                    status=line.status,
                    has_worktree=worktree is not None,
                    is_current=line.is_current,
                    upstream=line.upstream,
                    head_commit=line.head,
                    pr_status=pr_status,
                )
            )
        return records, anomalies
