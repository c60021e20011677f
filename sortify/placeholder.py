"""Stand-in album art for when the real cover can't be fetched or rendered."""

_NOTE = [
    "   ▄▄▄▄▄▄▄▄▄▄   ",
    "   █▀▀▀▀▀▀▀▀█   ",
    "   █        █   ",
    "   █        █   ",
    " ▄▄█      ▄▄█   ",
    "████     ████   ",
    " ▀▀       ▀▀    ",
]


def _framed(width: int, height: int) -> str:
    inner = width - 2
    top_pad = (height - 2 - len(_NOTE)) // 2
    rows = ["╭" + "─" * inner + "╮"]
    for i in range(height - 2):
        j = i - top_pad
        content = _NOTE[j] if 0 <= j < len(_NOTE) else ""
        rows.append("│" + content.center(inner) + "│")
    rows.append("╰" + "─" * inner + "╯")
    return "\n".join(rows)


IMAGE_48 = _framed(48, 24)
IMAGE_32 = _framed(32, 16)


def placeholder_for(width: int) -> str:
    """Pick the placeholder that fits a screen of the given width."""
    return IMAGE_48 if width >= 48 else IMAGE_32
