#!/usr/bin/env python3
"""Test script for album art rendering, the image cache and text fitting."""

from io import BytesIO

import requests
from PIL import Image

from sortify import art
from sortify.art import ImageCache, render_image
from sortify.placeholder import IMAGE_32, IMAGE_48, placeholder_for
from sortify.terminal import center_string, string_to_half_screen, wrap_text_to_screen


class CountingRenderer:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def __call__(self, url, width):
        self.calls.append((url, width))
        if self.fail:
            raise requests.HTTPError("404")
        return f"art for {url} at {width}"


def test_cache_hit_renders_once():
    print("Testing: Image cache hits...")

    renderer = CountingRenderer()
    cache = ImageCache(renderer)

    first = cache.get_or_render("https://img/a", width=48)
    second = cache.get_or_render("https://img/a", width=48)

    assert first == second == "art for https://img/a at 48"
    assert renderer.calls == [("https://img/a", 48)]
    assert "https://img/a" in cache
    assert len(cache) == 1

    print("✓ Image cache hits work!")


def test_failures_are_not_cached():
    """A failed render gives a placeholder and is retried next time."""
    print("Testing: Image cache failures...")

    renderer = CountingRenderer(fail=True)
    cache = ImageCache(renderer)

    assert cache.get_or_render("https://img/b", width=48) == IMAGE_48
    assert cache.get_or_render("https://img/b", width=40) == IMAGE_32
    assert len(renderer.calls) == 2
    assert len(cache) == 0

    renderer.fail = False
    assert cache.get_or_render("https://img/b", width=48) == "art for https://img/b at 48"
    assert len(cache) == 1

    print("✓ Image cache failures work!")


def test_oversized_image_uses_placeholder():
    """Pillow refusing a huge image is a render failure like any other."""
    def renderer(url, width):
        raise Image.DecompressionBombError("too many pixels")

    cache = ImageCache(renderer)
    assert cache.get_or_render("https://img/huge", width=48) == IMAGE_48
    assert "https://img/huge" not in cache
    assert len(cache) == 0


def test_missing_url_uses_placeholder():
    cache = ImageCache(CountingRenderer())
    assert cache.get_or_render(None, width=32) == IMAGE_32


def test_placeholders_have_fixed_size():
    print("Testing: Placeholders...")

    for block, width, height in ((IMAGE_48, 48, 24), (IMAGE_32, 32, 16)):
        lines = block.split("\n")
        assert len(lines) == height
        assert all(len(line) == width for line in lines)

    assert placeholder_for(80) is IMAGE_48
    assert placeholder_for(47) is IMAGE_32

    print("✓ Placeholders work!")


def test_render_image(monkeypatch):
    """A 4x4 image becomes two rows of four half-block cells."""
    print("Testing: Image rendering...")

    image = Image.new("RGB", (4, 4), (255, 0, 0))
    buffer = BytesIO()
    image.save(buffer, format="PNG")

    class FakeResponse:
        content = buffer.getvalue()

        def raise_for_status(self):
            pass

    monkeypatch.setattr(art.requests, "get", lambda url, timeout: FakeResponse())

    block = render_image("https://img/red", 4)
    lines = block.split("\n")

    assert len(lines) == 2
    assert lines[0].count(art.HALF_BLOCK) == 4
    assert "[rgb(255,0,0) on rgb(255,0,0)]" in lines[0]

    print("✓ Image rendering works!")


def test_text_fitting():
    print("Testing: Text fitting...")

    assert center_string("ab", width=10) == "    ab    "
    assert string_to_half_screen("short", width=20) == "short     "
    assert string_to_half_screen("a much longer playlist name", width=20) == "a much ..."
    assert wrap_text_to_screen("one two three four", width=9) == "one two\nthree\nfour"

    print("✓ Text fitting works!")


if __name__ == '__main__':
    print("=" * 60)
    print("Album Art Tests")
    print("=" * 60)

    test_cache_hit_renders_once()
    test_failures_are_not_cached()
    test_oversized_image_uses_placeholder()
    test_missing_url_uses_placeholder()
    test_placeholders_have_fixed_size()
    test_text_fitting()

    print("\n✓ All tests passed!")
