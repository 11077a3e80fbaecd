"""Helpers for turning GitPython failures into readable messages."""

import git


def format_git_error(operation: str, error: git.exc.GitCommandError) -> str:
    """Describe a failed git command using its exit status and stderr."""
    stderr = (error.stderr if getattr(error, "stderr", None) else str(error)).strip()
    status = error.status if getattr(error, "status", None) is not None else "unknown"

    # GitPython wraps stderr as "stderr: '...'"
    if stderr.startswith("stderr: "):
        stderr = stderr[len("stderr: "):].strip("'").strip()

    if stderr:
        return f"{operation} failed (exit {status}): {stderr}"
    return f"{operation} failed with exit code {status}"
