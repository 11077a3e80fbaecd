"""Parsers for Git's script-oriented listings.

Each parser is a pure function over command output. Lines that cannot be
parsed are reported back as ``CollectionAnomaly`` entries instead of raising,
so one odd line never hides the rest of the listing.
"""

import re
from dataclasses import dataclass
from typing import AbstractSet, Callable, Dict, List, Optional, Tuple

from git_worktree_keeper.models.branch import BranchStatus
from git_worktree_keeper.models.snapshot import CollectionAnomaly
from git_worktree_keeper.models.worktree import DirtyStatus, TrackingStatus

HEADS_PREFIX = "refs/heads/"
SHORT_HASH_LENGTH = 8

_HEX_RE = re.compile(r"^[0-9a-f]{4,64}$")


class PorcelainParseError(ValueError):
    """Raised for a single record that cannot be turned into a model."""

    def __init__(self, subject: str, message: str):
        self.subject = subject
        super().__init__(message)


# ---------------------------------------------------------------------------
# git worktree list --porcelain
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WorktreeEntry:
    """A validated entry of the porcelain worktree listing."""
    path: str
    head: str
    branch: Optional[str]  # None = detached HEAD
    locked: bool = False
    prunable: bool = False

    @property
    def short_head(self) -> str:
        return self.head[:SHORT_HASH_LENGTH]


class WorktreeEntryBuilder:
    """Accumulates the attribute lines of one worktree entry.

    Each attribute keyword is dispatched to a handler that mutates the
    in-progress entry; ``build`` validates and returns it once the
    terminating blank line is seen.
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[[str], None]] = {
            "worktree": self._on_worktree,
            "HEAD": self._on_head,
            "branch": self._on_branch,
            "detached": self._on_detached,
            "bare": self._on_bare,
            "locked": self._on_locked,
            "prunable": self._on_prunable,
        }
        self.reset()

    def reset(self) -> None:
        self.path: Optional[str] = None
        self.head: str = ""
        self.branch_ref: Optional[str] = None
        self.detached = False
        self.bare = False
        self.locked = False
        self.prunable = False

    @property
    def has_path(self) -> bool:
        return bool(self.path)

    def feed(self, line: str) -> None:
        """Apply one non-blank attribute line. Unknown attributes are ignored."""
        keyword, _, value = line.partition(" ")
        handler = self._handlers.get(keyword)
        if handler:
            handler(value)

    def _on_worktree(self, value: str) -> None:
        self.path = value

    def _on_head(self, value: str) -> None:
        self.head = value.strip()

    def _on_branch(self, value: str) -> None:
        self.branch_ref = value.strip()

    def _on_detached(self, value: str) -> None:
        self.detached = True

    def _on_bare(self, value: str) -> None:
        self.bare = True

    def _on_locked(self, value: str) -> None:
        self.locked = True

    def _on_prunable(self, value: str) -> None:
        self.prunable = True

    def build(self) -> Optional[WorktreeEntry]:
        """Return the finished entry, None for bare or empty entries.

        Raises:
            PorcelainParseError: the entry has a path but is incomplete.
        """
        if not self.has_path or self.bare:
            return None
        if not _HEX_RE.match(self.head):
            raise PorcelainParseError(self.path, f"missing or invalid HEAD '{self.head}'")
        if self.detached:
            branch = None
        elif self.branch_ref and self.branch_ref.startswith(HEADS_PREFIX):
            branch = self.branch_ref[len(HEADS_PREFIX):]
        elif self.branch_ref:
            raise PorcelainParseError(self.path, f"unexpected branch ref '{self.branch_ref}'")
        else:
            raise PorcelainParseError(self.path, "entry has neither a branch nor 'detached'")
        return WorktreeEntry(
            path=self.path,
            head=self.head,
            branch=branch,
            locked=self.locked,
            prunable=self.prunable,
        )


def parse_worktree_porcelain(output: str) -> Tuple[List[WorktreeEntry], List[CollectionAnomaly]]:
    """Parse ``git worktree list --porcelain`` output.

    The final entry is flushed even when the output lacks a trailing blank line.
    """
    entries: List[WorktreeEntry] = []
    anomalies: List[CollectionAnomaly] = []
    builder = WorktreeEntryBuilder()

    for line in output.splitlines() + [""]:
        line = line.rstrip("\r")
        if line.strip():
            builder.feed(line)
            continue

        try:
            entry = builder.build()
        except PorcelainParseError as e:
            anomalies.append(CollectionAnomaly("worktrees", e.subject, str(e)))
            entry = None
        builder.reset()
        if entry is not None:
            entries.append(entry)

    return entries, anomalies


# ---------------------------------------------------------------------------
# git status --porcelain
# ---------------------------------------------------------------------------

def count_status_porcelain(output: str) -> DirtyStatus:
    """Count changed-tracked and untracked lines of ``git status --porcelain``."""
    modified = 0
    untracked = 0
    for line in output.splitlines():
        if len(line) < 2:
            continue
        code = line[:2]
        if code == "??":
            untracked += 1
        elif code != "!!":
            modified += 1
    return DirtyStatus(modified=modified, untracked=untracked)


# ---------------------------------------------------------------------------
# git for-each-ref --format='%(upstream:short) %(upstream:track)'
# ---------------------------------------------------------------------------

def parse_upstream_track(output: str) -> TrackingStatus:
    """Map an upstream/track pair to a tracking status."""
    info = output.strip()
    if not info:
        return TrackingStatus.NO_REMOTE
    if "[gone]" in info:
        return TrackingStatus.GONE
    if "[ahead" in info:
        return TrackingStatus.AHEAD
    if "[behind" in info:
        return TrackingStatus.BEHIND
    return TrackingStatus.UP_TO_DATE


# ---------------------------------------------------------------------------
# git stash list
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StashLine:
    index: int
    branch: str
    message: str


_STASH_LINE_RE = re.compile(
    r"^stash@\{(?P<index>\d+)\}: (?:WIP on|On) (?P<branch>[^:]+): ?(?P<message>.*)$"
)


def parse_stash_line(line: str) -> StashLine:
    """Parse ``stash@{i}: WIP on <branch>: <message>``.

    Raises:
        PorcelainParseError: the line does not have the stash list structure.
    """
    match = _STASH_LINE_RE.match(line.rstrip("\r\n"))
    if not match:
        raise PorcelainParseError(line.strip(), "unrecognised stash list entry")
    return StashLine(
        index=int(match.group("index")),
        branch=match.group("branch").strip(),
        message=match.group("message").strip(),
    )


def parse_stash_list(output: str) -> Tuple[List[StashLine], List[CollectionAnomaly]]:
    stashes: List[StashLine] = []
    anomalies: List[CollectionAnomaly] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            stashes.append(parse_stash_line(line))
        except PorcelainParseError as e:
            anomalies.append(CollectionAnomaly("stashes", e.subject, str(e)))
    return stashes, anomalies


def parse_stash_stat(output: str) -> Optional[str]:
    """Return the summary (last) line of ``git stash show --stat``, None if empty."""
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    return lines[-1] if lines else None


# ---------------------------------------------------------------------------
# git branch -vv
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BranchLine:
    name: str
    head: str
    is_current: bool
    upstream: str
    tracking: TrackingStatus
    status: BranchStatus
    worktree_path: Optional[str] = None


_BRANCH_LINE_RE = re.compile(
    r"^(?P<marker>[*+ ]) (?P<name>\S+)\s+(?P<head>[0-9a-f]{4,64})(?:\s+(?P<rest>.*))?$"
)
_ANNOTATION_RE = re.compile(
    r"^\[(?P<upstream>[^\s:\[\]]+)(?:: (?P<track>gone|ahead \d+(?:, behind \d+)?|behind \d+))?\]\s?"
)


def _split_annotation(
    rest: str, upstreams: Optional[AbstractSet[str]] = None
) -> Tuple[str, Optional[str]]:
    """Split ``[origin/x: gone] subject`` into (upstream, track).

    A bracketed subject such as ``[WIP] fix`` is not an annotation. A bare
    annotation must be one of the configured ``upstreams`` when they are known,
    otherwise it must name a remote-tracking ref (contain a slash).
    """
    match = _ANNOTATION_RE.match(rest)
    if not match:
        return "", None
    upstream, track = match.group("upstream"), match.group("track")
    if track is None:
        known = upstream in upstreams if upstreams is not None else "/" in upstream
        if not known:
            return "", None
    return upstream, track


def parse_branch_line(line: str, upstreams: Optional[AbstractSet[str]] = None) -> Optional[BranchLine]:
    """Parse one line of ``git branch -vv``.

    Returns None for the detached-HEAD pseudo branch. ``upstreams`` is the set
    of configured upstream names, which may include local branches.

    Raises:
        PorcelainParseError: the line does not have the verbose branch structure.
    """
    line = line.rstrip("\r\n")
    if line[2:3] == "(":
        return None
    match = _BRANCH_LINE_RE.match(line)
    if not match:
        raise PorcelainParseError(line.strip(), "unrecognised branch listing entry")

    marker = match.group("marker")
    rest = match.group("rest") or ""
    worktree_path = None
    if marker == "+" and rest.startswith("("):
        closing = rest.find(") ")
        if closing == -1 and rest.endswith(")"):
            closing = len(rest) - 1
        if closing != -1:
            worktree_path = rest[1:closing]
            rest = rest[closing + 1:].lstrip()

    upstream, track = _split_annotation(rest, upstreams)
    if not upstream:
        tracking, status = TrackingStatus.NO_REMOTE, BranchStatus.LOCAL_ONLY
    elif track == "gone":
        tracking, status = TrackingStatus.GONE, BranchStatus.GONE
    elif track and track.startswith("ahead"):
        tracking, status = TrackingStatus.AHEAD, BranchStatus.AHEAD
    elif track and track.startswith("behind"):
        tracking, status = TrackingStatus.BEHIND, BranchStatus.BEHIND
    else:
        tracking, status = TrackingStatus.UP_TO_DATE, BranchStatus.UP_TO_DATE

    return BranchLine(
        name=match.group("name"),
        head=match.group("head")[:SHORT_HASH_LENGTH],
        is_current=marker == "*",
        upstream=upstream,
        tracking=tracking,
        status=status,
        worktree_path=worktree_path,
    )


def parse_branch_listing(
    output: str, upstreams: Optional[AbstractSet[str]] = None
) -> Tuple[List[BranchLine], List[CollectionAnomaly]]:
    branches: List[BranchLine] = []
    anomalies: List[CollectionAnomaly] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            parsed = parse_branch_line(line, upstreams)
        except PorcelainParseError as e:
            anomalies.append(CollectionAnomaly("branches", e.subject, str(e)))
            continue
        if parsed is not None:
            branches.append(parsed)
    return branches, anomalies
