"""Action and result formatting utilities."""

import os

from git_worktree_keeper.constants import NO_DEFAULT
from git_worktree_keeper.models.plan import ActionItem, ExecutionResult, TargetKind


def format_target(item: ActionItem) -> str:
    """
    Short display name of an action's target.

    Worktrees are shown by directory name, stashes by ``stash@{i}`` and
    branches by name.
    """
    if item.target_kind == TargetKind.WORKTREE:
        return os.path.basename(item.target_id.rstrip("/")) or item.target_id
    return item.target_id


def format_recommendation(item: ActionItem) -> str:
    """Default resolution of an ASK item, ``-`` when there is none."""
    if not item.is_pending or item.recommendation is None:
        return NO_DEFAULT
    return item.recommendation.value


def format_action_item(item: ActionItem) -> str:
    """
    Format an action as a one-line sentence.

    Example:
        "REMOVE worktree feat-x (reason: PR #12 merged, clean)"
    """
    text = f"{item.action.value} {item.target_kind.value} {format_target(item)} (reason: {item.reason})"
    if item.is_pending and item.recommendation is not None:
        text += f" [default: {item.recommendation.value}]"
    return text


def format_execution_result(result: ExecutionResult) -> str:
    """Format one execution result for console narration."""
    item = result.item
    text = f"{result.outcome.value}: {item.action.value} {item.target_kind.value} {format_target(item)}"
    if result.detail:
        text += f" ({result.detail})"
    return text
