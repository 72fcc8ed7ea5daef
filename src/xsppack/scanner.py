"""
Locating and clipping sprite tiles out of a frame.

Both functions work on a flat, row-major buffer of palette indices where 0 is
transparent. clip_quadrant() clears what it consumes, so repeated claim()
calls over the same frame eventually find nothing.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import TILE_PX
from .errors import ScanError

QUADRANT_PX = 8
QUADRANT_BYTES = QUADRANT_PX * QUADRANT_PX // 2
TILE_BYTES = QUADRANT_BYTES * 4


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom


def claim(buf, stride: int, area: Rect) -> Optional[Tuple[int, int]]:
    """
    Find the next occupied 16x16 block in area.
    Returns (col, row) of its top-left corner, or None if area is empty.
    """
    row = -1
    for y in range(area.y, area.bottom):
        start = y * stride
        if any(buf[start + area.x:start + area.right]):
            row = y
            break
    if row < 0:
        return None

    # Left edge: first column with data in the 16 rows below the top edge.
    ylim = min(row + TILE_PX, area.bottom)
    for x in range(area.x, area.right):
        for y in range(row, ylim):
            if buf[x + y * stride]:
                return x, row

    raise ScanError(f"Unexpectedly empty strip from row {row}")


def clip_quadrant(buf, stride: int, col: int, row: int, bounds: Rect) -> bytes:
    """
    Cut one 8x8 block at (col, row) as 4bpp, left pixel in the high nibble.
    Pixels outside bounds read as transparent; consumed pixels are cleared.
    """
    out = bytearray(QUADRANT_BYTES)
    i = 0
    for y in range(row, row + QUADRANT_PX):
        for x in range(col, col + QUADRANT_PX, 2):
            hi = lo = 0
            if bounds.contains(x, y):
                hi = buf[x + y * stride] & 0x0F
                buf[x + y * stride] = 0
            if bounds.contains(x + 1, y):
                lo = buf[x + 1 + y * stride] & 0x0F
                buf[x + 1 + y * stride] = 0
            out[i] = (hi << 4) | lo
            i += 1
    return bytes(out)


def clip_tile(buf, stride: int, col: int, row: int, bounds: Rect) -> bytes:
    """Clip the 16x16 tile at (col, row): quadrants in TL, BL, TR, BR order."""
    half = QUADRANT_PX
    return b"".join((
        clip_quadrant(buf, stride, col, row, bounds),
        clip_quadrant(buf, stride, col, row + half, bounds),
        clip_quadrant(buf, stride, col + half, row, bounds),
        clip_quadrant(buf, stride, col + half, row + half, bounds),
    ))
