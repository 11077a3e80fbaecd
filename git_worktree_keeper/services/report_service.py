"""Renders and parses the pipe-delimited report protocol.

The protocol is the contract with the decision-maker::

    === WORKTREES ===
    PATH | BRANCH | COMMIT | DIRTY | TRACKING | PR_STATUS

    === STASHES ===
    INDEX | BRANCH | MESSAGE | STAT

    === BRANCHES ===
    NAME | TRACKING | STATUS | HAS_WORKTREE

Fields are escaped so they never contain a bare ``|`` or line break.
"""

import re
from typing import Dict, Iterable, List, Sequence

from git_worktree_keeper.constants import (
    CURRENT_BRANCH_MARKER,
    NO_STASHES_ROW,
    SECTION_BRANCHES,
    SECTION_COLUMNS,
    SECTION_PLAN,
    SECTION_RESULTS,
    SECTION_STASHES,
    SECTION_WORKTREES,
    ColumnDefinition,
)
from git_worktree_keeper.formatters import format_recommendation, format_yes_no, join_fields, split_fields
from git_worktree_keeper.models.plan import ExecutionResult, Plan
from git_worktree_keeper.models.snapshot import AuditSnapshot

_HEADER_RE = re.compile(r"^=== (?P<name>[A-Z_]+) ===$")


def _section(name: str, rows: Iterable[Sequence], empty_row: str = None) -> List[str]:
    columns: List[ColumnDefinition] = SECTION_COLUMNS[name]
    lines = [f"=== {name} ===", join_fields([col.label for col in columns])]
    body = [join_fields(row) for row in rows]
    if not body and empty_row:
        body = [empty_row]
    return lines + body


class ReportService:
    """Text renderer for snapshots, plans and execution results."""

    def render_snapshot(self, snapshot: AuditSnapshot) -> str:
        """Render the three state sections."""
        worktree_rows = [
            (wt.path, wt.branch_label, wt.head_commit, wt.dirty, wt.tracking.value, wt.pr_status)
            for wt in snapshot.worktrees
        ]
        stash_rows = [
            (stash.ref, stash.branch, stash.message, stash.diff_stat)
            for stash in snapshot.stashes
        ]
        branch_rows = [
            (
                (CURRENT_BRANCH_MARKER if br.is_current else "") + br.name,
                br.tracking.value,
                br.status.value,
                format_yes_no(br.has_worktree),
            )
            for br in snapshot.branches
        ]

        lines = _section(SECTION_WORKTREES, worktree_rows)
        lines.append("")
        lines += _section(SECTION_STASHES, stash_rows, empty_row=NO_STASHES_ROW)
        lines.append("")
        lines += _section(SECTION_BRANCHES, branch_rows)
        return "\n".join(lines) + "\n"

    def render_plan(self, plan: Plan) -> str:
        rows = [
            (
                order,
                item.target_kind.value,
                item.target_id,
                item.action.value,
                format_recommendation(item),
                item.reason,
            )
            for order, item in enumerate(plan, start=1)
        ]
        return "\n".join(_section(SECTION_PLAN, rows)) + "\n"

    def render_results(self, results: Sequence[ExecutionResult]) -> str:
        rows = [
            (
                order,
                result.item.target_kind.value,
                result.item.target_id,
                result.item.action.value,
                result.outcome.value,
                result.detail,
            )
            for order, result in enumerate(results, start=1)
        ]
        return "\n".join(_section(SECTION_RESULTS, rows)) + "\n"


def parse_report(text: str) -> Dict[str, List[Dict[str, str]]]:
    """Parse report text back into rows keyed by column label.

    Returns:
        Mapping of section name to its rows; the ``(no stashes)`` marker
        yields an empty list.
    """
    sections: Dict[str, List[Dict[str, str]]] = {}
    current = None
    columns: List[str] = []

    for line in text.splitlines():
        header = _HEADER_RE.match(line.strip())
        if header:
            current = header.group("name")
            sections[current] = []
            columns = []
            continue
        if current is None or not line.strip():
            continue
        if not columns:
            columns = split_fields(line)
            continue
        if current == SECTION_STASHES and line.strip() == NO_STASHES_ROW:
            continue
        values = split_fields(line)
        if len(values) != len(columns):
            raise ValueError(
                f"{current} row has {len(values)} fields, expected {len(columns)}: {line!r}"
            )
        sections[current].append(dict(zip(columns, values)))

    return sections
