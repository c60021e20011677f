"""
Album art rendered as colored text.

Covers are downloaded once, drawn with upper-half block characters (two
pixel rows per line of text) and memoized by URL for the rest of the
session.
"""

from io import BytesIO
from typing import Callable, Dict, Optional
import logging

import requests
from PIL import Image

from sortify.placeholder import placeholder_for
from sortify.terminal import screen_width

logger = logging.getLogger(__name__)

HALF_BLOCK = "▀"


def render_image(url: str, width: int, timeout: float = 10) -> str:
    """Download an image and draw it as rich-markup text, `width` columns wide.

    Raises:
        requests.RequestException: download failed
        OSError: the bytes are not an image Pillow can read
    """
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()

    image = Image.open(BytesIO(response.content)).convert("RGB")
    # Each text row covers two pixel rows
    height = max(2, round(width * image.height / image.width))
    height += height % 2
    image = image.resize((width, height))
    pixels = image.load()

    lines = []
    for y in range(0, height, 2):
        cells = []
        for x in range(width):
            top = "rgb({},{},{})".format(*pixels[x, y])
            bottom = "rgb({},{},{})".format(*pixels[x, y + 1])
            cells.append(f"[{top} on {bottom}]{HALF_BLOCK}[/]")
        lines.append("".join(cells))
    return "\n".join(lines)


class ImageCache:
    """Rendered album art keyed by image URL.

    Only successful renders are stored. A failed URL gets a placeholder and
    is tried again the next time it is asked for.
    """

    def __init__(self, renderer: Optional[Callable[[str, int], str]] = None):
        self._entries: Dict[str, str] = {}
        self._render = renderer or render_image

    def __contains__(self, url: str) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_render(self, url: Optional[str], width: Optional[int] = None) -> str:
        """Return the cached text block for `url`, rendering it on a miss.

        Args:
            url: Album art URL, may be None for tracks without artwork
            width: Render width, defaults to the current screen width

        Returns:
            The rendered art, or a placeholder if rendering failed
        """
        if url and url in self._entries:
            return self._entries[url]

        width = screen_width() if width is None else width
        if not url:
            return placeholder_for(width)

        try:
            block = self._render(url, width)
        except (requests.RequestException, OSError, ValueError, Image.DecompressionBombError) as e:
            logger.info("Could not render album art %s: %s", url, e)
            return placeholder_for(width)

        self._entries[url] = block
        return block
