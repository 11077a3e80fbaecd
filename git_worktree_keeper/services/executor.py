"""Applies an approved plan to the repository."""

import os
from typing import Callable, Dict, List, Optional, Set

from git_worktree_keeper.exceptions import PlanFormatError, UnresolvedPlanError
from git_worktree_keeper.models.plan import ActionItem, ActionType, ExecutionResult, Outcome, Plan
from git_worktree_keeper.services.git import BranchQueries, StashService, WorktreeService
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


class Executor:
    """Runs plan items in order.

    The batch is not atomic: each failure is recorded against its item and
    execution continues. Completed removals are never rolled back.
    """

    def __init__(
        self,
        worktree_service: WorktreeService,
        stash_service: StashService,
        branch_queries: BranchQueries,
        protected_worktrees: Optional[Dict[str, str]] = None,
        protected_branches: Optional[Dict[str, str]] = None,
        dry_run: bool = False,
        on_result: Optional[Callable[[ExecutionResult], None]] = None,
    ):
        """
        Args:
            protected_worktrees: worktree path -> reason it must never be removed
            protected_branches: branch name -> reason it must never be deleted
            dry_run: record what would happen without touching the repository
            on_result: called after each item, e.g. for console progress
        """
        self.worktree_service = worktree_service
        self.stash_service = stash_service
        self.branch_queries = branch_queries
        self.protected_worktrees = {
            os.path.realpath(path): reason for path, reason in (protected_worktrees or {}).items()
        }
        self.protected_branches = dict(protected_branches or {})
        self.dry_run = dry_run
        self.on_result = on_result

    def execute(self, plan: Plan) -> List[ExecutionResult]:
        """Apply every item of the plan.

        Raises:
            UnresolvedPlanError: the plan still has ASK items; nothing is executed
            PlanFormatError: the plan breaks the stash or worktree-before-branch ordering
        """
        pending = plan.pending_items
        if pending:
            raise UnresolvedPlanError(pending)
        violations = plan.ordering_violations()
        if violations:
            raise PlanFormatError("; ".join(violations))

        results: List[ExecutionResult] = []
        failed_worktree_branches: Set[str] = set()
        removed_any = False

        for item in plan:
            result = self._execute_item(item, failed_worktree_branches)
            if item.action == ActionType.REMOVE:
                if result.outcome == Outcome.DONE:
                    removed_any = True
                elif result.outcome == Outcome.FAILED and item.branch:
                    failed_worktree_branches.add(item.branch)
            results.append(result)
            if self.on_result:
                self.on_result(result)

        if removed_any:
            success, error = self.worktree_service.prune_worktrees()
            if not success:
                logger.warning(f"Worktree prune failed after removals: {error}")

        failed = sum(1 for r in results if r.outcome == Outcome.FAILED)
        done = sum(1 for r in results if r.outcome == Outcome.DONE)
        logger.info(f"Executed plan: {done} done, {failed} failed, {len(results) - done - failed} skipped")
        return results

    def _execute_item(self, item: ActionItem, failed_worktree_branches: Set[str]) -> ExecutionResult:
        if item.action == ActionType.KEEP:
            return ExecutionResult(item, Outcome.SKIPPED, "kept")

        refusal = self._refusal(item)
        if refusal:
            logger.warning(f"Refusing {item.action.value} {item.target_id}: {refusal}")
            return ExecutionResult(item, Outcome.FAILED, refusal)

        if item.action == ActionType.DELETE and item.target_id in failed_worktree_branches:
            return ExecutionResult(
                item, Outcome.SKIPPED, "worktree removal failed; branch still checked out"
            )

        if self.dry_run:
            return ExecutionResult(item, Outcome.SKIPPED, f"would {item.action.value.lower()}")

        if item.action == ActionType.REMOVE:
            success, error = self.worktree_service.remove_worktree(item.target_id, force=True)
        elif item.action == ActionType.DROP:
            success, error = self.stash_service.drop_stash(item.stash_index, item.stash_commit)
        else:
            success, error = self.branch_queries.delete_branch(item.target_id)

        if success:
            return ExecutionResult(item, Outcome.DONE)
        return ExecutionResult(item, Outcome.FAILED, error or "Unknown error")

    def _refusal(self, item: ActionItem) -> Optional[str]:
        if item.action == ActionType.REMOVE:
            reason = self.protected_worktrees.get(os.path.realpath(item.target_id))
            if reason:
                return f"refusing to remove the {reason}"
        elif item.action == ActionType.DELETE:
            reason = self.protected_branches.get(item.target_id)
            if reason:
                return f"refusing to delete the {reason}"
        return None
