"""Tests for models, configuration and plan documents"""
import json
from datetime import datetime, timedelta, timezone

import pytest

from git_worktree_keeper.config import Config
from git_worktree_keeper.exceptions import PlanFormatError
from git_worktree_keeper.formatters import format_action_item, format_execution_result
from git_worktree_keeper.models.plan import ActionItem, ActionType, ExecutionResult, Outcome, Plan, TargetKind
from git_worktree_keeper.models.stash import StashRecord
from git_worktree_keeper.models.worktree import DirtyStatus, PRState, PullRequestStatus
from git_worktree_keeper.services.plan_io import load_plan, save_plan


class TestActionItem:
    """Test action validation and resolution."""

    def test_action_must_fit_target_kind(self):
        with pytest.raises(ValueError):
            ActionItem(TargetKind.STASH, "stash@{0}", ActionType.DELETE, "wrong")
        with pytest.raises(ValueError):
            ActionItem(TargetKind.BRANCH, "x", ActionType.REMOVE, "wrong")

    def test_stash_target_format(self):
        with pytest.raises(ValueError):
            ActionItem(TargetKind.STASH, "stash-0", ActionType.DROP, "bad")
        assert ActionItem(TargetKind.STASH, "stash@{7}", ActionType.DROP, "ok").stash_index == 7

    def test_resolve_recommended(self):
        ask = ActionItem(TargetKind.BRANCH, "x", ActionType.ASK, "local", ActionType.DELETE)
        no_default = ActionItem(TargetKind.WORKTREE, "/wt/x", ActionType.ASK, "dirty")
        keep = ActionItem(TargetKind.BRANCH, "y", ActionType.KEEP, "fine")

        assert ask.resolve_recommended().action == ActionType.DELETE
        assert no_default.resolve_recommended().action == ActionType.KEEP
        assert keep.resolve_recommended() is keep

    def test_resolve_returns_copy(self):
        item = ActionItem(TargetKind.BRANCH, "x", ActionType.DELETE, "gone")
        assert item.resolve(ActionType.KEEP).action == ActionType.KEEP
        assert item.action == ActionType.DELETE

    def test_format(self):
        remove = ActionItem(TargetKind.WORKTREE, "/repo/wt/feat-x", ActionType.REMOVE, "PR #12 merged, clean")
        ask = ActionItem(TargetKind.BRANCH, "y", ActionType.ASK, "local-only", ActionType.DELETE)

        assert format_action_item(remove) == "REMOVE worktree feat-x (reason: PR #12 merged, clean)"
        assert format_action_item(ask) == "ASK branch y (reason: local-only) [default: DELETE]"
        assert format_execution_result(ExecutionResult(remove, Outcome.DONE)) == "done: REMOVE worktree feat-x"


class TestPlanDocument:
    """Test plan serialization."""

    def test_save_and_load(self, temp_dir):
        plan = Plan([
            ActionItem(TargetKind.STASH, "stash@{1}", ActionType.DROP, "temp", stash_commit="c" * 40),
            ActionItem(TargetKind.WORKTREE, "/wt/x", ActionType.ASK, "no remote", ActionType.REMOVE, branch="x"),
        ])
        path = save_plan(plan, temp_dir / "out" / "plan.json")

        assert load_plan(path).items == plan.items

    def test_lowercase_actions_are_accepted(self):
        plan = Plan.from_dict({"actions": [
            {"kind": "branch", "target": "x", "action": "delete", "reason": "gone"}
        ]})
        assert plan.items[0].action == ActionType.DELETE

    @pytest.mark.parametrize("document", [
        [],
        {"version": 2, "actions": []},
        {"actions": [{"kind": "branch", "target": "x"}]},
        {"actions": [{"kind": "tag", "target": "x", "action": "KEEP"}]},
        {"actions": [{"kind": "stash", "target": "x", "action": "DROP"}]},
        {"actions": ["DROP stash@{0}"]},
    ])
    def test_invalid_documents(self, document):
        with pytest.raises(PlanFormatError):
            Plan.from_dict(document)

    def test_load_missing_file(self, temp_dir):
        with pytest.raises(PlanFormatError):
            load_plan(temp_dir / "missing.json")

    def test_load_invalid_json(self, temp_dir):
        path = temp_dir / "plan.json"
        path.write_text("{not json")
        with pytest.raises(PlanFormatError):
            load_plan(path)

    def test_document_shape(self, temp_dir):
        plan = Plan([ActionItem(TargetKind.BRANCH, "x", ActionType.KEEP, "fine")])
        data = json.loads(save_plan(plan, temp_dir / "plan.json").read_text())
        assert data == {"version": 1, "actions": [{
            "kind": "branch", "target": "x", "action": "KEEP", "reason": "fine",
            "recommendation": None, "branch": None, "stash_commit": None,
        }]}


class TestStatusModels:
    """Test status value objects."""

    def test_pr_status_rendering(self):
        assert str(PullRequestStatus(PRState.MERGED, 12)) == "MERGED#12"
        assert str(PullRequestStatus.not_applicable()) == "n/a"
        assert str(PullRequestStatus(PRState.OPEN)) == "OPEN"

    def test_dirty_status_rendering(self):
        assert str(DirtyStatus(2, 1)) == "dirty(2mod,1new)"
        assert str(DirtyStatus()) == "clean"

    def test_stash_age(self):
        now = datetime(2026, 6, 1, tzinfo=timezone.utc)
        stash = StashRecord(0, "main", "x", created_at=now - timedelta(days=31, hours=2))
        assert stash.age_days(now) == 31
        assert StashRecord(0, "main", "x").age_days(now) is None


class TestConfig:
    """Test configuration validation."""

    def test_defaults(self):
        config = Config()
        assert config.stash_stale_days == 30
        assert "main" in config.protected_branches
        assert config.output_format == "text"

    def test_main_branch_is_protected(self):
        config = Config(main_branch="trunk", protected_branches=["release"])
        assert config.protected_branches == ["release", "trunk"]

    @pytest.mark.parametrize("overrides", [
        {"stash_stale_days": 0},
        {"main_branch": "  "},
        {"output_format": "json"},
        {"temp_stash_patterns": ["(unclosed"]},
        {"protected_branches": "main"},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            Config(**overrides)

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"stash_stale_days": 10, "unknown": True})
        assert config.stash_stale_days == 10
        assert config.get("unknown", "default") == "default"
