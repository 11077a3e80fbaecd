"""Reading and writing plan documents exchanged with the decision-maker."""
import json
from pathlib import Path
from typing import Union

from git_worktree_keeper.exceptions import PlanFormatError
from git_worktree_keeper.models.plan import Plan
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


def save_plan(plan: Plan, path: Union[str, Path]) -> Path:
    """Write a plan as JSON.

    Args:
        plan: Plan to write
        path: Destination file

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(plan.to_dict(), f, indent=2)
        f.write("\n")
    logger.debug(f"Wrote plan with {len(plan)} actions to {path}")
    return path


def load_plan(path: Union[str, Path]) -> Plan:
    """Read an approved plan.

    Raises:
        PlanFormatError: the file is missing, is not JSON, or has invalid actions
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise PlanFormatError(f"plan file not found: {path}")
    except json.JSONDecodeError as e:
        raise PlanFormatError(f"{path} is not valid JSON: {e}")

    plan = Plan.from_dict(data)
    logger.debug(f"Loaded plan with {len(plan)} actions from {path}")
    return plan
