"""Label-aligned, word-wrapped rendering of story fields.

Every field is printed as a right-aligned ``"Label: "`` column of
``LABEL_WIDTH`` characters followed by its value. Values are packed greedily
into lines of at most ``terminal_width - LABEL_WIDTH`` characters without ever
splitting a word; continuation lines are indented by ``LABEL_WIDTH`` blanks.
"""

import re
from typing import Any, Optional

from pivotal_story.domain.models import UNESTIMATED, UNESTIMATED_LABEL

LABEL_DESCRIPTION = "Description"
LABEL_TITLE = "Title"

# Widest label plus ": "
LABEL_WIDTH = len(LABEL_DESCRIPTION) + 2


def content_width(terminal_width: int) -> int:
    """Return the columns left for a value once the label column is taken."""
    return terminal_width - LABEL_WIDTH


def format_label(label: str) -> str:
    return f"{label}: ".rjust(LABEL_WIDTH)


def _line_pattern(width: int) -> re.Pattern[str]:
    if width < 2:
        # Nothing wider than one character fits: one word per line
        return re.compile(r"\S+")
    # A run starting and ending on non-space that stops at a word boundary,
    # or failing that a single word longer than the line.
    return re.compile(r"\S.{0,%d}\S(?=\s|$)|\S+" % (width - 2), re.MULTILINE)


def wrap_value(value: Any, width: int) -> list[str]:
    """Wrap a value into lines no wider than ``width``.

    Args:
        value: Any value; it is rendered with ``str()``. ``None`` is blank.
        width: Maximum number of characters per line

    Returns:
        list[str]: The wrapped lines. Blank values yield a single empty line.
            A word longer than ``width`` is kept whole on its own line.
    """
    text = "" if value is None else str(value)
    if not text.strip():
        return [""]
    return _line_pattern(width).findall(text)


def format_field(label: str, value: Any, terminal_width: int) -> list[str]:
    """Render one labelled field as output lines."""
    lines = wrap_value(value, content_width(terminal_width))
    rendered = [format_label(label) + lines[0]]
    rendered.extend(" " * LABEL_WIDTH + line for line in lines[1:])
    return rendered


def format_estimate(estimate: Optional[int]) -> str:
    if estimate is None:
        return ""
    return UNESTIMATED_LABEL if estimate == UNESTIMATED else str(estimate)
