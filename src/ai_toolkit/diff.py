"""Unified diff between an installed file and its replacement."""

from __future__ import annotations

import difflib

from rich.text import Text

LINE_STYLES = {
    "+": "green",
    "-": "red",
    "@": "cyan",
}


def generate_diff(old_content: str, new_content: str, filename: str = "file") -> str:
    """Generate a unified diff.

    Args:
        old_content: Content currently installed.
        new_content: Content about to be installed.
        filename: Label used in the diff headers.

    Returns:
        Unified diff text, empty when the contents are equal.
    """
    lines = difflib.unified_diff(
        old_content.splitlines(keepends=True),
        new_content.splitlines(keepends=True),
        fromfile=f"{filename} (existing)",
        tofile=f"{filename} (new)",
    )
    return "".join(line if line.endswith("\n") else f"{line}\n" for line in lines)


def format_diff(diff_text: str) -> Text:
    """Color a unified diff for the console.

    Additions are green, removals red and hunk headers cyan. The two
    file header lines (``---``/``+++``) are left unstyled.
    """
    text = Text()
    for index, line in enumerate(diff_text.splitlines(keepends=True)):
        style = None
        if not (index < 2 and line.startswith(("---", "+++"))):
            style = LINE_STYLES.get(line[:1])
        text.append(line, style=style)
    return text
