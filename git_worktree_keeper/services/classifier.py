"""Decision tables that turn collected records into proposed actions."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Set, Union, TYPE_CHECKING

from git_worktree_keeper.models.branch import BranchRecord
from git_worktree_keeper.models.plan import ActionItem, ActionType, TargetKind
from git_worktree_keeper.models.stash import StashRecord
from git_worktree_keeper.models.worktree import PRState, TrackingStatus, WorktreeRecord
from git_worktree_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)


@dataclass
class ClassificationContext:
    """Cross-entity facts the stash and branch tables look up."""

    protected_branches: Set[str] = field(default_factory=set)
    default_branches: Set[str] = field(default_factory=set)
    local_branches: Set[str] = field(default_factory=set)
    gone_branches: Set[str] = field(default_factory=set)
    merged_branches: Set[str] = field(default_factory=set)
    linked_worktree_branches: Set[str] = field(default_factory=set)

    @classmethod
    def build(
        cls,
        worktrees: Sequence[WorktreeRecord],
        branches: Sequence[BranchRecord],
        protected: Sequence[str],
        main_branch: str,
    ) -> "ClassificationContext":
        context = cls(
            protected_branches=set(protected),
            default_branches={main_branch, *protected},
            local_branches={br.name for br in branches},
        )
        for wt in worktrees:
            if wt.is_current and wt.branch:
                context.protected_branches.add(wt.branch)
            if wt.branch and wt.pr_status.is_merged:
                context.merged_branches.add(wt.branch)
            if wt.branch and not wt.is_primary and not wt.prunable:
                context.linked_worktree_branches.add(wt.branch)
        for br in branches:
            if br.is_current:
                context.protected_branches.add(br.name)
            if br.tracking == TrackingStatus.GONE:
                context.gone_branches.add(br.name)
            if br.pr_status.is_merged:
                context.merged_branches.add(br.name)
        return context


class Classifier:
    """Applies the fixed, ordered decision tables; first matching rule wins.

    The current worktree, the primary checkout, the current branch and
    protected branches are forced to KEEP before any table is consulted.
    """

    def __init__(self, config: Union["Config", dict], now: Optional[datetime] = None):
        self.main_branch = config.get("main_branch", "main")
        self.protected_branches = list(config.get("protected_branches", ["main", "master"]))
        self.stash_stale_days = config.get("stash_stale_days", 30)
        self.temp_stash_patterns = [
            re.compile(pattern, re.IGNORECASE)
            for pattern in config.get("temp_stash_patterns", [])
        ]
        self.now = now

    def classify(
        self,
        worktrees: Sequence[WorktreeRecord],
        stashes: Sequence[StashRecord],
        branches: Sequence[BranchRecord],
    ) -> List[ActionItem]:
        """Classify every record. Worktree items come first, then stashes, then branches."""
        context = ClassificationContext.build(
            worktrees, branches, self.protected_branches, self.main_branch
        )

        items: List[ActionItem] = []
        for wt in worktrees:
            items.extend(self.classify_worktree(wt, context))

        for stash in stashes:
            items.append(self.classify_stash(stash, context))

        covered = {item.target_id for item in items if item.target_kind == TargetKind.BRANCH}
        for br in branches:
            if br.name in covered:
                continue
            items.append(self.classify_branch(br, context))

        logger.debug(f"Classified {len(items)} actions")
        return items

    # -- worktrees -------------------------------------------------------

    def classify_worktree(
        self, wt: WorktreeRecord, context: ClassificationContext
    ) -> List[ActionItem]:
        def worktree_item(action, reason, recommendation=None):
            return ActionItem(
                TargetKind.WORKTREE, wt.path, action, reason,
                recommendation=recommendation, branch=wt.branch,
            )

        def branch_item(action, reason, recommendation=None):
            if wt.branch in context.protected_branches:
                return ActionItem(TargetKind.BRANCH, wt.branch, ActionType.KEEP, "protected branch")
            return ActionItem(
                TargetKind.BRANCH, wt.branch, action, reason, recommendation=recommendation
            )

        if wt.is_current:
            return [worktree_item(ActionType.KEEP, "current worktree")]
        if wt.is_primary:
            return [worktree_item(ActionType.KEEP, "primary checkout")]

        pr = wt.pr_status
        pr_label = f"PR #{pr.number}" if pr.number is not None else "PR"

        if wt.tracking == TrackingStatus.GONE and pr.is_merged and wt.dirty.is_clean:
            return [
                worktree_item(ActionType.REMOVE, f"{pr_label} merged, clean"),
                branch_item(ActionType.DELETE, f"{pr_label} merged"),
            ]

        if wt.tracking == TrackingStatus.GONE and pr.is_merged:
            return [
                worktree_item(
                    ActionType.ASK,
                    f"{pr_label} merged but worktree is {wt.dirty}; review the diff",
                ),
                branch_item(ActionType.ASK, f"{pr_label} merged; worktree has uncommitted changes"),
            ]

        if wt.is_detached:
            return [
                worktree_item(
                    ActionType.ASK,
                    f"detached HEAD at {wt.head_commit}; default: discard",
                    recommendation=ActionType.REMOVE,
                )
            ]

        if pr.state == PRState.OPEN and wt.tracking in (TrackingStatus.UP_TO_DATE, TrackingStatus.AHEAD):
            return [worktree_item(ActionType.KEEP, f"{pr_label} open, {wt.tracking.value}")]

        if wt.tracking == TrackingStatus.NO_REMOTE and pr.state == PRState.NONE:
            return [
                worktree_item(
                    ActionType.ASK,
                    "no remote and no pull request; default: delete",
                    recommendation=ActionType.REMOVE,
                ),
                branch_item(
                    ActionType.ASK,
                    "local-only branch with no pull request; default: delete",
                    recommendation=ActionType.DELETE,
                ),
            ]

        return [worktree_item(ActionType.KEEP, f"no cleanup rule matched ({wt.tracking.value}, {pr})")]

    # -- stashes ---------------------------------------------------------

    def is_temp_stash(self, message: str) -> bool:
        return any(pattern.search(message) for pattern in self.temp_stash_patterns)

    def classify_stash(self, stash: StashRecord, context: ClassificationContext) -> ActionItem:
        def stash_item(action, reason, recommendation=None):
            return ActionItem(
                TargetKind.STASH, stash.ref, action, reason,
                recommendation=recommendation, stash_commit=stash.commit,
            )

        branch = stash.branch
        if branch in context.gone_branches:
            return stash_item(ActionType.DROP, f"branch {branch} is gone")
        if branch in context.merged_branches:
            return stash_item(ActionType.DROP, f"branch {branch} was merged")
        if not branch.startswith("(") and branch not in context.local_branches:
            return stash_item(
                ActionType.ASK,
                f"branch {branch} no longer exists; default: drop",
                recommendation=ActionType.DROP,
            )

        if self.is_temp_stash(stash.message):
            return stash_item(
                ActionType.DROP, "temporary branch-switch stash; verify content before dropping"
            )

        if branch in context.linked_worktree_branches:
            return stash_item(ActionType.KEEP, f"branch {branch} has an active worktree")

        if branch in context.default_branches:
            age = stash.age_days(self.now or datetime.now(timezone.utc))
            if age is not None and age > self.stash_stale_days:
                return stash_item(
                    ActionType.DROP,
                    f"stash on {branch} is {age} days old (threshold {self.stash_stale_days})",
                )
            if age is not None:
                return stash_item(
                    ActionType.ASK,
                    f"stash on {branch} is {age} days old, under the {self.stash_stale_days}-day threshold",
                )

        return stash_item(ActionType.ASK, "no cleanup rule matched")

    # -- branches --------------------------------------------------------

    def classify_branch(self, br: BranchRecord, context: ClassificationContext) -> ActionItem:
        def branch_item(action, reason, recommendation=None):
            return ActionItem(
                TargetKind.BRANCH, br.name, action, reason, recommendation=recommendation
            )

        if br.is_current:
            return branch_item(ActionType.KEEP, "current branch")
        if br.name in context.protected_branches:
            return branch_item(ActionType.KEEP, "protected branch")
        if br.has_worktree:
            return branch_item(ActionType.KEEP, "checked out in a worktree")

        if br.tracking == TrackingStatus.GONE:
            return branch_item(
                ActionType.ASK,
                "upstream branch is gone; default: delete",
                recommendation=ActionType.DELETE,
            )

        if br.tracking == TrackingStatus.NO_REMOTE and not br.pr_status.has_pr:
            return branch_item(
                ActionType.ASK,
                "local-only branch with no pull request; default: delete",
                recommendation=ActionType.DELETE,
            )

        return branch_item(ActionType.KEEP, f"no cleanup rule matched ({br.tracking.value})")
