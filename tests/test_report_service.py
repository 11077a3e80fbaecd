"""Tests for the text report protocol"""
import pytest

from git_worktree_keeper.formatters import escape_field, split_fields, unescape_field
from git_worktree_keeper.models.branch import BranchRecord, BranchStatus
from git_worktree_keeper.models.plan import (
    ActionItem,
    ActionType,
    ExecutionResult,
    Outcome,
    Plan,
    TargetKind,
)
from git_worktree_keeper.models.snapshot import AuditSnapshot
from git_worktree_keeper.models.stash import StashRecord
from git_worktree_keeper.models.worktree import (
    DirtyStatus,
    PRState,
    PullRequestStatus,
    TrackingStatus,
    WorktreeRecord,
)
from git_worktree_keeper.services.report_service import ReportService, parse_report


@pytest.fixture
def snapshot():
    return AuditSnapshot(
        worktrees=[
            WorktreeRecord("/repo", "main", "1a2b3c4d", DirtyStatus(), TrackingStatus.UP_TO_DATE,
                           PullRequestStatus.none(), is_current=True, is_primary=True),
            WorktreeRecord("/repo/wt/feat-x", "feat-x", "2b3c4d5e", DirtyStatus(2, 1),
                           TrackingStatus.GONE, PullRequestStatus(PRState.MERGED, 12)),
            WorktreeRecord("/tmp/scratch", None, "3c4d5e6f", DirtyStatus(), TrackingStatus.NOT_APPLICABLE,
                           PullRequestStatus.not_applicable()),
        ],
        stashes=[
            StashRecord(0, "feat-x", "fix a|b", "1 file changed, 2 insertions(+)"),
        ],
        branches=[
            BranchRecord("main", TrackingStatus.UP_TO_DATE, BranchStatus.UP_TO_DATE, is_current=True),
            BranchRecord("feat-x", TrackingStatus.GONE, BranchStatus.GONE, has_worktree=True),
        ],
    )


class TestRenderSnapshot:
    """Test the three state sections."""

    def test_sections_and_headers(self, snapshot):
        text = ReportService().render_snapshot(snapshot)
        lines = text.splitlines()

        assert lines[0] == "=== WORKTREES ==="
        assert lines[1] == "PATH | BRANCH | COMMIT | DIRTY | TRACKING | PR_STATUS"
        assert "=== STASHES ===" in lines
        assert "INDEX | BRANCH | MESSAGE | STAT" in lines
        assert "=== BRANCHES ===" in lines
        assert "NAME | TRACKING | STATUS | HAS_WORKTREE" in lines

    def test_worktree_rows(self, snapshot):
        lines = ReportService().render_snapshot(snapshot).splitlines()

        assert "/repo | main | 1a2b3c4d | clean | up-to-date | none" in lines
        assert "/repo/wt/feat-x | feat-x | 2b3c4d5e | dirty(2mod,1new) | gone | MERGED#12" in lines
        assert "/tmp/scratch | detached | 3c4d5e6f | clean | n/a | n/a" in lines

    def test_stash_message_pipe_is_escaped(self, snapshot):
        lines = ReportService().render_snapshot(snapshot).splitlines()
        assert "stash@{0} | feat-x | fix a\\|b | 1 file changed, 2 insertions(+)" in lines

    def test_branch_rows(self, snapshot):
        lines = ReportService().render_snapshot(snapshot).splitlines()
        assert "*main | up-to-date | up-to-date | no" in lines
        assert "feat-x | gone | gone | yes" in lines

    def test_empty_stash_section(self, snapshot):
        snapshot.stashes = []
        lines = ReportService().render_snapshot(snapshot).splitlines()
        header = lines.index("INDEX | BRANCH | MESSAGE | STAT")
        assert lines[header + 1] == "(no stashes)"

    def test_only_state_sections(self, snapshot):
        text = ReportService().render_snapshot(snapshot)
        headers = [line for line in text.splitlines() if line.startswith("===")]
        assert headers == ["=== WORKTREES ===", "=== STASHES ===", "=== BRANCHES ==="]


class TestRenderPlanAndResults:
    """Test the PLAN and RESULTS sections."""

    def test_plan_rows(self):
        plan = Plan([
            ActionItem(TargetKind.WORKTREE, "/wt/x", ActionType.REMOVE, "PR #12 merged, clean", branch="x"),
            ActionItem(TargetKind.BRANCH, "y", ActionType.ASK, "local-only", ActionType.DELETE),
        ])
        lines = ReportService().render_plan(plan).splitlines()

        assert lines[0] == "=== PLAN ==="
        assert lines[1] == "ORDER | KIND | TARGET | ACTION | DEFAULT | REASON"
        assert lines[2] == "1 | worktree | /wt/x | REMOVE | - | PR #12 merged, clean"
        assert lines[3] == "2 | branch | y | ASK | DELETE | local-only"

    def test_result_rows(self):
        item = ActionItem(TargetKind.STASH, "stash@{1}", ActionType.DROP, "stale")
        results = [ExecutionResult(item, Outcome.FAILED, "stash list changed\nsince audit")]
        lines = ReportService().render_results(results).splitlines()

        assert lines[0] == "=== RESULTS ==="
        assert lines[2] == "1 | stash | stash@{1} | DROP | failed | stash list changed\\nsince audit"


class TestParseReport:
    """Test reading reports back."""

    def test_parse_snapshot(self, snapshot):
        sections = parse_report(ReportService().render_snapshot(snapshot))

        assert set(sections) == {"WORKTREES", "STASHES", "BRANCHES"}
        assert len(sections["WORKTREES"]) == 3
        assert sections["WORKTREES"][1]["PR_STATUS"] == "MERGED#12"
        assert sections["STASHES"][0]["MESSAGE"] == "fix a|b"
        assert sections["BRANCHES"][0]["NAME"] == "*main"

    def test_parse_empty_stashes(self, snapshot):
        snapshot.stashes = []
        sections = parse_report(ReportService().render_snapshot(snapshot))
        assert sections["STASHES"] == []

    def test_row_with_wrong_field_count_raises(self):
        text = "=== BRANCHES ===\nNAME | TRACKING | STATUS | HAS_WORKTREE\nmain | up-to-date\n"
        with pytest.raises(ValueError):
            parse_report(text)

    def test_row_field_count_matches_header(self, snapshot):
        text = ReportService().render_snapshot(snapshot)
        for line in text.splitlines():
            if line and not line.startswith("===") and line != "(no stashes)":
                section_width = len(split_fields(line))
                assert section_width in (4, 6)


class TestFieldEscaping:
    """Test field escaping."""

    @pytest.mark.parametrize("raw,escaped", [
        ("plain", "plain"),
        ("a|b", "a\\|b"),
        ("line1\nline2", "line1\\nline2"),
        ("back\\slash", "back\\\\slash"),
        (None, ""),
    ])
    def test_escape(self, raw, escaped):
        assert escape_field(raw) == escaped

    def test_unescape_reverses_escape(self):
        raw = "C:\\temp|x\nnext"
        assert unescape_field(escape_field(raw)) == raw

    def test_split_ignores_escaped_pipes(self):
        assert split_fields("a\\|b | c | d\\\\") == ["a|b", "c", "d\\"]
