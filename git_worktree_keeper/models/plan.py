"""Action, plan and execution result models."""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

from git_worktree_keeper.exceptions import PlanFormatError


class TargetKind(Enum):
    """Kind of entity an action applies to."""
    WORKTREE = "worktree"
    STASH = "stash"
    BRANCH = "branch"


class ActionType(Enum):
    """What to do with an entity."""
    REMOVE = "REMOVE"
    DROP = "DROP"
    DELETE = "DELETE"
    KEEP = "KEEP"
    ASK = "ASK"


# Destructive action valid for each target kind
DESTRUCTIVE_ACTIONS = {
    TargetKind.WORKTREE: ActionType.REMOVE,
    TargetKind.STASH: ActionType.DROP,
    TargetKind.BRANCH: ActionType.DELETE,
}

_STASH_REF_RE = re.compile(r"^stash@\{(\d+)\}$")


@dataclass(frozen=True)
class ActionItem:
    """A proposed (or approved) action on one worktree, stash or branch."""

    target_kind: TargetKind
    target_id: str
    action: ActionType
    reason: str
    recommendation: Optional[ActionType] = None  # default resolution of an ASK
    branch: Optional[str] = None  # branch bound to a worktree target
    stash_commit: Optional[str] = None

    def __post_init__(self):
        allowed = {ActionType.KEEP, ActionType.ASK, DESTRUCTIVE_ACTIONS[self.target_kind]}
        if self.action not in allowed:
            raise ValueError(
                f"{self.action.value} is not valid for a {self.target_kind.value} target"
            )
        if self.target_kind == TargetKind.STASH and not _STASH_REF_RE.match(self.target_id):
            raise ValueError(f"Invalid stash target '{self.target_id}'")

    @property
    def is_destructive(self) -> bool:
        return self.action in (ActionType.REMOVE, ActionType.DROP, ActionType.DELETE)

    @property
    def is_pending(self) -> bool:
        return self.action == ActionType.ASK

    @property
    def stash_index(self) -> Optional[int]:
        if self.target_kind != TargetKind.STASH:
            return None
        return int(_STASH_REF_RE.match(self.target_id).group(1))

    def resolve(self, action: ActionType) -> "ActionItem":
        """Return a copy with the action replaced."""
        return replace(self, action=action)

    def resolve_recommended(self) -> "ActionItem":
        """Resolve an ASK to its recommendation, or KEEP when it has none."""
        if not self.is_pending:
            return self
        return self.resolve(self.recommendation or ActionType.KEEP)

    def to_dict(self) -> dict:
        return {
            "kind": self.target_kind.value,
            "target": self.target_id,
            "action": self.action.value,
            "reason": self.reason,
            "recommendation": self.recommendation.value if self.recommendation else None,
            "branch": self.branch,
            "stash_commit": self.stash_commit,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ActionItem":
        if not isinstance(data, dict):
            raise PlanFormatError(f"action entry must be an object, got {type(data).__name__}")
        try:
            recommendation = data.get("recommendation")
            return cls(
                target_kind=TargetKind(data["kind"]),
                target_id=str(data["target"]),
                action=ActionType(str(data["action"]).upper()),
                reason=str(data.get("reason", "")),
                recommendation=ActionType(recommendation.upper()) if recommendation else None,
                branch=data.get("branch"),
                stash_commit=data.get("stash_commit"),
            )
        except KeyError as e:
            raise PlanFormatError(f"action entry missing field {e}")
        except (ValueError, AttributeError) as e:
            raise PlanFormatError(f"invalid action entry: {e}")


@dataclass
class Plan:
    """Ordered sequence of actions consumed once by the executor."""

    items: List[ActionItem] = field(default_factory=list)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def executable_items(self) -> List[ActionItem]:
        return [item for item in self.items if item.is_destructive]

    @property
    def pending_items(self) -> List[ActionItem]:
        return [item for item in self.items if item.is_pending]

    def ordering_violations(self) -> List[str]:
        """Describe every breach of the stash and worktree-before-branch orderings."""
        violations = []
        for pos, item in enumerate(self.items):
            if item.action == ActionType.DELETE:
                for later in self.items[pos + 1:]:
                    if later.action == ActionType.REMOVE and later.branch == item.target_id:
                        violations.append(
                            f"DELETE branch {item.target_id} precedes REMOVE worktree {later.target_id}"
                        )
            elif item.action == ActionType.DROP:
                for later in self.items[pos + 1:]:
                    if later.action == ActionType.DROP and later.stash_index > item.stash_index:
                        violations.append(
                            f"DROP {item.target_id} precedes DROP {later.target_id}"
                        )
        return violations

    def to_dict(self) -> dict:
        return {"version": 1, "actions": [item.to_dict() for item in self.items]}

    @classmethod
    def from_dict(cls, data: dict) -> "Plan":
        if not isinstance(data, dict) or not isinstance(data.get("actions"), list):
            raise PlanFormatError("plan document must be an object with an 'actions' list")
        if data.get("version", 1) != 1:
            raise PlanFormatError(f"unsupported plan version {data.get('version')!r}")
        return cls([ActionItem.from_dict(entry) for entry in data["actions"]])


class Outcome(Enum):
    """Result of applying one action."""
    DONE = "done"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class ExecutionResult:
    """Outcome of one plan item."""
    item: ActionItem
    outcome: Outcome
    detail: str = ""
