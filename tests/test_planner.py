"""Tests for plan ordering"""
from git_worktree_keeper.models.plan import ActionItem, ActionType, Plan, TargetKind
from git_worktree_keeper.services.planner import Planner


def remove(path, branch):
    return ActionItem(TargetKind.WORKTREE, path, ActionType.REMOVE, "merged", branch=branch)


def delete(branch):
    return ActionItem(TargetKind.BRANCH, branch, ActionType.DELETE, "merged")


def drop(index):
    return ActionItem(TargetKind.STASH, f"stash@{{{index}}}", ActionType.DROP, "stale")


def keep(kind, target):
    return ActionItem(kind, target, ActionType.KEEP, "keep")


def targets(plan):
    return [(item.action.value, item.target_id) for item in plan]


class TestPlannerOrdering:
    """Test that plans stay valid while they execute."""

    def test_drops_run_highest_index_first(self):
        plan = Planner().build([drop(0), drop(3), drop(2)])
        assert targets(plan) == [("DROP", "stash@{3}"), ("DROP", "stash@{2}"), ("DROP", "stash@{0}")]

    def test_branch_delete_follows_its_worktree_removal(self):
        plan = Planner().build([delete("feat-x"), remove("/wt/feat-x", "feat-x")])
        assert targets(plan) == [("REMOVE", "/wt/feat-x"), ("DELETE", "feat-x")]

    def test_delete_waits_for_every_worktree_on_the_branch(self):
        plan = Planner().build([
            remove("/wt/a", "shared"),
            delete("shared"),
            remove("/wt/other", "other"),
            remove("/wt/b", "shared"),
        ])
        assert targets(plan) == [
            ("REMOVE", "/wt/a"),
            ("REMOVE", "/wt/other"),
            ("REMOVE", "/wt/b"),
            ("DELETE", "shared"),
        ]

    def test_full_ordering(self):
        items = [
            keep(TargetKind.WORKTREE, "/repo"),
            remove("/wt/feat-x", "feat-x"),
            delete("feat-x"),
            drop(0),
            delete("orphan"),
            drop(1),
            ActionItem(TargetKind.BRANCH, "scratch", ActionType.ASK, "local", ActionType.DELETE),
        ]
        plan = Planner().build(items)

        assert targets(plan) == [
            ("DROP", "stash@{1}"),
            ("DROP", "stash@{0}"),
            ("REMOVE", "/wt/feat-x"),
            ("DELETE", "feat-x"),
            ("DELETE", "orphan"),
            ("KEEP", "/repo"),
            ("ASK", "scratch"),
        ]
        assert plan.ordering_violations() == []

    def test_duplicate_targets_keep_first_action(self):
        plan = Planner().build([delete("feat-x"), keep(TargetKind.BRANCH, "feat-x")])
        assert targets(plan) == [("DELETE", "feat-x")]

    def test_empty(self):
        plan = Planner().build([])
        assert len(plan) == 0
        assert plan.executable_items == []


class TestOrderingViolations:
    """Test detection of hand-edited plans that break ordering."""

    def test_ascending_drops_are_flagged(self):
        plan = Plan([drop(0), drop(2)])
        violations = plan.ordering_violations()
        assert violations == ["DROP stash@{0} precedes DROP stash@{2}"]

    def test_delete_before_remove_is_flagged(self):
        plan = Plan([delete("feat-x"), remove("/wt/feat-x", "feat-x")])
        assert len(plan.ordering_violations()) == 1

    def test_planned_order_is_valid(self):
        plan = Planner().build([drop(0), drop(5), delete("b"), remove("/wt/b", "b")])
        assert plan.ordering_violations() == []
