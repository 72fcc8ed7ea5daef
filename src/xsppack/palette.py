# RGBA palette -> 16 packed 15-bit colors (GGGGG RRRRR BBBBB I) for the X68000.
import struct
from typing import List, Sequence

PALETTE_SIZE = 16


def rgba_to_grb555(r: int, g: int, b: int, a: int = 255) -> int:
    """Top 5 bits of each channel; the low (intensity) bit stays 0."""
    return ((g >> 3) << 11) | ((r >> 3) << 6) | ((b >> 3) << 1)


def convert_palette(src: Sequence[Sequence[int]]) -> List[int]:
    out = [0] * PALETTE_SIZE
    # Index 0 is always transparent, whatever the source says.
    for i in range(1, min(PALETTE_SIZE, len(src))):
        r, g, b = src[i][:3]
        out[i] = rgba_to_grb555(r, g, b)
    return out


def palette_bytes(pal: Sequence[int]) -> bytes:
    return struct.pack(f">{PALETTE_SIZE}H", *pal)
