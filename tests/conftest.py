"""Shared pytest fixtures for xsppack tests."""

import pytest
from PIL import Image

from xsppack.image import IndexedImage

# 16 distinct colors; index 0 is magenta so tests can see it get forced to 0.
PALETTE = [(255, 0, 255, 255)] + [(i * 16, 255 - i * 16, i * 8, 255) for i in range(1, 16)]


def blank_rows(w, h):
    return [[0] * w for _ in range(h)]


def fill(rows, x0, y0, w, h, value):
    for y in range(y0, y0 + h):
        for x in range(x0, x0 + w):
            rows[y][x] = value
    return rows


@pytest.fixture
def make_image():
    """Build an IndexedImage from a size plus (x, y, w, h, value) fills."""
    def _make(w, h, *fills, palette=PALETTE):
        rows = blank_rows(w, h)
        for f in fills:
            fill(rows, *f)
        return IndexedImage.from_rows(rows, palette)
    return _make


@pytest.fixture
def write_png(tmp_path):
    """Save an IndexedImage as an indexed PNG and return its path."""
    def _write(image, name="sheet.png"):
        img = Image.new("P", (image.width, image.height), 0)
        flat = []
        for r, g, b, _a in image.palette:
            flat.extend((r, g, b))
        img.putpalette(flat)
        img.putdata(list(image.pixels))
        path = tmp_path / name
        img.save(path)
        return path
    return _write
