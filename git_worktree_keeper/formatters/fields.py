"""Field escaping for the pipe-delimited report protocol."""

from typing import List, Sequence

from git_worktree_keeper.constants import FIELD_SEPARATOR


def escape_field(value) -> str:
    """
    Escape a value so it never contains a bare delimiter or line break.

    Backslash becomes ``\\\\``, ``|`` becomes ``\\|`` and newlines become ``\\n``.
    """
    text = "" if value is None else str(value)
    return (
        text.replace("\\", "\\\\")
        .replace("|", "\\|")
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )


def unescape_field(text: str) -> str:
    """Reverse ``escape_field``."""
    out = []
    chars = iter(text)
    for char in chars:
        if char != "\\":
            out.append(char)
            continue
        following = next(chars, "")
        if following == "n":
            out.append("\n")
        elif following == "r":
            out.append("\r")
        else:
            out.append(following)
    return "".join(out)


def join_fields(values: Sequence) -> str:
    """Render one report row."""
    return FIELD_SEPARATOR.join(escape_field(value) for value in values)


def split_fields(line: str) -> List[str]:
    """
    Split one report row on unescaped pipes.

    Returns:
        Unescaped, whitespace-trimmed field values
    """
    fields = []
    current = []
    escaped = False
    for char in line:
        if escaped:
            current.append("\\" + char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "|":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    if escaped:
        current.append("\\")
    fields.append("".join(current))
    return [unescape_field(field.strip()) for field in fields]


def format_yes_no(value: bool) -> str:
    return "yes" if value else "no"
