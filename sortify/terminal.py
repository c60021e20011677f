"""
Terminal width and text fitting helpers.

The whole UI is laid out for a narrow column so album art and the playlist
grid line up on any terminal.
"""

import shutil
from typing import Optional

MAX_WIDTH = 48


def screen_width() -> int:
    """Usable width: the terminal width capped at MAX_WIDTH."""
    columns = shutil.get_terminal_size((MAX_WIDTH, 24)).columns
    return min(MAX_WIDTH, columns)


def center_string(text: str, width: Optional[int] = None) -> str:
    width = screen_width() if width is None else width
    pad = " " * (max(width - len(text), 0) // 2)
    return f"{pad}{text}{pad}"


def pad_string_right(text: str, n: int) -> str:
    return text + " " * max(n - len(text), 0)


def clip_string(text: str, n: int) -> str:
    return text[:max(n - 3, 0)] + "..."


def string_to_half_screen(text: str, width: Optional[int] = None) -> str:
    """Fit text into exactly half the screen width.

    Longer strings are clipped with an ellipsis, shorter ones are padded.
    """
    half = (screen_width() if width is None else width) // 2
    if len(text) > half:
        return clip_string(text, half)
    return pad_string_right(text, half)


def wrap_text_to_screen(text: str, width: Optional[int] = None) -> str:
    """Greedy word wrap at the screen width."""
    max_len = screen_width() if width is None else width
    lines = []
    line = ""

    for word in text.split():
        if line and len(line) + len(word) + 1 > max_len:
            lines.append(line)
            line = word
        elif line:
            line = f"{line} {word}"
        else:
            line = word

    if line:
        lines.append(line)
    return "\n".join(lines)
