"""Orders classified actions into an executable plan."""

from typing import Dict, Iterable, List, Tuple

from git_worktree_keeper.models.plan import ActionItem, ActionType, Plan, TargetKind
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


class Planner:
    """Builds a plan whose order keeps every step valid mid-batch.

    1. stash DROPs, highest index first (dropping shifts lower indices up)
    2. worktree REMOVEs, each followed by
    3. the DELETE of the branch bound to it
    4. remaining branch DELETEs
    5. KEEP and ASK items, in input order
    """

    def build(self, items: Iterable[ActionItem]) -> Plan:
        unique = self._dedupe(items)

        drops = sorted(
            (item for item in unique if item.action == ActionType.DROP),
            key=lambda item: item.stash_index,
            reverse=True,
        )
        removes = [item for item in unique if item.action == ActionType.REMOVE]
        deletes: Dict[str, ActionItem] = {
            item.target_id: item for item in unique if item.action == ActionType.DELETE
        }
        rest = [item for item in unique if not item.is_destructive]

        # A branch DELETE follows the last REMOVE of a worktree bound to it
        last_remove_for_branch = {
            item.branch: position for position, item in enumerate(removes) if item.branch
        }

        ordered: List[ActionItem] = list(drops)
        placed = set()
        for position, remove in enumerate(removes):
            ordered.append(remove)
            branch = remove.branch
            if branch in deletes and last_remove_for_branch[branch] == position:
                ordered.append(deletes[branch])
                placed.add(branch)

        ordered.extend(item for name, item in deletes.items() if name not in placed)
        ordered.extend(rest)

        plan = Plan(ordered)
        logger.debug(
            f"Planned {len(plan.executable_items)} destructive actions, "
            f"{len(plan.pending_items)} pending, {len(plan)} total"
        )
        return plan

    @staticmethod
    def _dedupe(items: Iterable[ActionItem]) -> List[ActionItem]:
        """Keep the first action per target."""
        seen: set = set()
        unique = []
        for item in items:
            key: Tuple[TargetKind, str] = (item.target_kind, item.target_id)
            if key in seen:
                logger.warning(
                    f"Ignoring duplicate action {item.action.value} for "
                    f"{item.target_kind.value} {item.target_id}"
                )
                continue
            seen.add(key)
            unique.append(item)
        return unique
