"""Formatting utilities for git-worktree-keeper.

- fields: escaping and splitting for the pipe-delimited report protocol
- actions: one-line descriptions of plan items and execution results
"""

# Protocol field formatters
from .fields import (
    escape_field,
    unescape_field,
    join_fields,
    split_fields,
    format_yes_no,
)

# Action formatters
from .actions import (
    format_target,
    format_recommendation,
    format_action_item,
    format_execution_result,
)

__all__ = [
    # Fields
    "escape_field",
    "unescape_field",
    "join_fields",
    "split_fields",
    "format_yes_no",
    # Actions
    "format_target",
    "format_recommendation",
    "format_action_item",
    "format_execution_result",
]
