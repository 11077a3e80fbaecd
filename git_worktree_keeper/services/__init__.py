"""Services for git-worktree-keeper: collection, classification, planning, execution, reporting."""

from .state_collector import StateCollector
from .classifier import Classifier
from .planner import Planner
from .executor import Executor
from .report_service import ReportService, parse_report
from .display_service import DisplayService
from .plan_io import load_plan, save_plan

__all__ = [
    "StateCollector",
    "Classifier",
    "Planner",
    "Executor",
    "ReportService",
    "parse_report",
    "DisplayService",
    "load_plan",
    "save_plan",
]
