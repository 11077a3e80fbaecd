"""
git-worktree-keeper - Audit and consolidate git worktrees, stashes and branches
"""

from .__version__ import __version__
from .core import WorktreeKeeper
from .cli.main import main

__all__ = ["WorktreeKeeper", "main", "__version__"]
