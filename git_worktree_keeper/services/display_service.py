"""Rich table presentation of snapshots, plans and results"""
from rich.console import Console
from rich.table import Table
from rich.text import Text
from typing import Optional, Sequence

from git_worktree_keeper.constants import (
    ACTION_COLORS,
    BRANCH_COLUMNS,
    OUTCOME_COLORS,
    PLAN_COLUMNS,
    RESULT_COLUMNS,
    STASH_COLUMNS,
    WORKTREE_COLUMNS,
)
from git_worktree_keeper.formatters import format_recommendation, format_yes_no
from git_worktree_keeper.models.plan import ExecutionResult, Plan
from git_worktree_keeper.models.snapshot import AuditSnapshot
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


def _cells(*values) -> list:
    """Wrap values as plain Text so brackets in messages are not read as markup."""
    return [Text(str(value)) for value in values]


def _table(title: str, columns) -> Table:
    table = Table(title=title, title_justify="left")
    for col in columns:
        table.add_column(col.label, max_width=col.width or None, overflow="fold")
    return table


class DisplayService:
    """Human-oriented renderer; the text protocol stays the data contract."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def display_snapshot(self, snapshot: AuditSnapshot) -> None:
        worktrees = _table("Worktrees", WORKTREE_COLUMNS)
        for wt in snapshot.worktrees:
            style = "bold" if wt.is_current else None
            path = wt.path + (" (current)" if wt.is_current else "")
            worktrees.add_row(
                *_cells(
                    path,
                    wt.branch_label,
                    wt.head_commit,
                    wt.dirty,
                    wt.tracking.value,
                    wt.pr_status,
                ),
                style=style,
            )
        self.console.print(worktrees)

        stashes = _table("Stashes", STASH_COLUMNS)
        for stash in snapshot.stashes:
            stashes.add_row(*_cells(stash.ref, stash.branch, stash.message, stash.diff_stat))
        self.console.print(stashes)

        branches = _table("Branches", BRANCH_COLUMNS)
        for br in snapshot.branches:
            branches.add_row(
                *_cells(
                    br.name + (" *" if br.is_current else ""),
                    br.tracking.value,
                    br.status.value,
                    format_yes_no(br.has_worktree),
                ),
                style="bold" if br.is_current else None,
            )
        self.console.print(branches)

        if snapshot.anomalies:
            self.console.print(f"\n[yellow]{len(snapshot.anomalies)} collection anomalies:[/yellow]")
            for anomaly in snapshot.anomalies:
                self.console.print(f"  • {anomaly}", markup=False)

    def display_plan(self, plan: Plan) -> None:
        table = _table("Plan", PLAN_COLUMNS)
        for order, item in enumerate(plan, start=1):
            table.add_row(
                *_cells(
                    order,
                    item.target_kind.value,
                    item.target_id,
                    item.action.value,
                    format_recommendation(item),
                    item.reason,
                ),
                style=ACTION_COLORS.get(item.action.value),
            )
        self.console.print(table)

        pending = len(plan.pending_items)
        if pending:
            self.console.print(
                f"\n[yellow]{pending} item(s) need a decision before the plan can be applied[/yellow]"
            )

    def display_results(self, results: Sequence[ExecutionResult]) -> None:
        table = _table("Results", RESULT_COLUMNS)
        for order, result in enumerate(results, start=1):
            table.add_row(
                *_cells(
                    order,
                    result.item.target_kind.value,
                    result.item.target_id,
                    result.item.action.value,
                    result.outcome.value,
                    result.detail,
                ),
                style=OUTCOME_COLORS.get(result.outcome.value),
            )
        self.console.print(table)
