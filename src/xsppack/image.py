# Decoded indexed images, loaded with Pillow.
import logging
import pathlib
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from .errors import ImageError

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]
PALETTE_SIZE = 16


@dataclass
class IndexedImage:
    """One byte per pixel (palette index), row-major, plus an RGBA palette."""

    width: int
    height: int
    pixels: bytes
    palette: List[RGBA] = field(default_factory=list)

    def __post_init__(self):
        if len(self.pixels) != self.width * self.height:
            raise ImageError(
                f"pixel buffer is {len(self.pixels)} bytes, expected {self.width * self.height}"
            )

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], palette=None) -> "IndexedImage":
        h = len(rows)
        w = len(rows[0]) if h else 0
        data = bytearray()
        for row in rows:
            if len(row) != w:
                raise ImageError("rows must all have the same width")
            data.extend(row)
        return cls(w, h, bytes(data), list(palette or []))


def _palette_entries(img: Image.Image) -> List[RGBA]:
    flat = img.getpalette() or []
    # Alpha is always opaque; index 0 is the transparent color on the target.
    entries = [(flat[i], flat[i + 1], flat[i + 2], 255) for i in range(0, len(flat) - 2, 3)]
    if len(entries) < PALETTE_SIZE:
        logger.debug("palette has %d entries, padding to %d", len(entries), PALETTE_SIZE)
        entries.extend([(0, 0, 0, 255)] * (PALETTE_SIZE - len(entries)))
    return entries


def load_indexed_image(path) -> IndexedImage:
    path = pathlib.Path(path)
    try:
        with Image.open(path) as img:
            if img.mode != "P":
                raise ImageError(f"{path.name}: expected an indexed (palette) image, got mode {img.mode}")
            w, h = img.size
            pixels = img.tobytes()
            palette = _palette_entries(img)
    except (OSError, UnidentifiedImageError) as e:
        raise ImageError(f"couldn't load {path}: {e}") from e
    return IndexedImage(w, h, pixels, palette)
