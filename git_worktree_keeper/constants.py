"""Shared constants for git-worktree-keeper."""

from dataclasses import dataclass
from typing import List


@dataclass
class ColumnDefinition:
    """Definition of a report column."""

    label: str
    width: int = 0  # 0 means auto-width


# Report protocol sections, in output order
SECTION_WORKTREES = "WORKTREES"
SECTION_STASHES = "STASHES"
SECTION_BRANCHES = "BRANCHES"
SECTION_PLAN = "PLAN"
SECTION_RESULTS = "RESULTS"

FIELD_SEPARATOR = " | "

WORKTREE_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("PATH", 40),
    ColumnDefinition("BRANCH", 24),
    ColumnDefinition("COMMIT", 8),
    ColumnDefinition("DIRTY", 16),
    ColumnDefinition("TRACKING", 10),
    ColumnDefinition("PR_STATUS", 10),
]

STASH_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("INDEX", 10),
    ColumnDefinition("BRANCH", 24),
    ColumnDefinition("MESSAGE", 40),
    ColumnDefinition("STAT", 30),
]

BRANCH_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("NAME", 30),
    ColumnDefinition("TRACKING", 10),
    ColumnDefinition("STATUS", 10),
    ColumnDefinition("HAS_WORKTREE", 12),
]

PLAN_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("ORDER", 5),
    ColumnDefinition("KIND", 8),
    ColumnDefinition("TARGET", 40),
    ColumnDefinition("ACTION", 6),
    ColumnDefinition("DEFAULT", 7),
    ColumnDefinition("REASON", 50),
]

RESULT_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("ORDER", 5),
    ColumnDefinition("KIND", 8),
    ColumnDefinition("TARGET", 40),
    ColumnDefinition("ACTION", 6),
    ColumnDefinition("OUTCOME", 7),
    ColumnDefinition("DETAIL", 50),
]

SECTION_COLUMNS = {
    SECTION_WORKTREES: WORKTREE_COLUMNS,
    SECTION_STASHES: STASH_COLUMNS,
    SECTION_BRANCHES: BRANCH_COLUMNS,
    SECTION_PLAN: PLAN_COLUMNS,
    SECTION_RESULTS: RESULT_COLUMNS,
}


# Sentinel values
DETACHED_SENTINEL = "detached"
EMPTY_STASH_STAT = "empty"
NO_STASHES_ROW = "(no stashes)"
CURRENT_BRANCH_MARKER = "*"
NO_DEFAULT = "-"


# Stash messages that indicate a throwaway stash made to switch branches
DEFAULT_TEMP_STASH_PATTERNS: List[str] = [
    r"\btemp(orary)?\b",
    r"\btmp\b",
    r"\bbranch[- ]switch",
    r"\bswitch(ing)? (to )?branch",
    r"\bautostash\b",
]


# Branches that are never deleted
DEFAULT_PROTECTED_BRANCHES: List[str] = ["main", "master"]


# Rich colors per action, used by the table renderer
ACTION_COLORS = {
    "REMOVE": "red",
    "DROP": "red",
    "DELETE": "red",
    "ASK": "yellow",
    "KEEP": None,
}

OUTCOME_COLORS = {
    "done": "green",
    "failed": "red",
    "skipped": "yellow",
}
