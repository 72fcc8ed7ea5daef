# Ordered store of unique 128-byte tiles; a tile's position is its pattern id.
from typing import Dict, Iterator, List, Optional

from .errors import CapacityError
from .scanner import TILE_BYTES

PATTERN_MAX_COUNT = 32768


class PatternStore:
    def __init__(self, limit: int = PATTERN_MAX_COUNT):
        self.limit = limit
        self._tiles: List[bytes] = []
        # Content index; first stored occurrence wins.
        self._index: Dict[bytes, int] = {}

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._tiles)

    def __getitem__(self, idx: int) -> bytes:
        return self._tiles[idx]

    @property
    def full(self) -> bool:
        return len(self._tiles) >= self.limit

    def find(self, tile: bytes) -> Optional[int]:
        """Pattern id of a byte-identical stored tile, or None."""
        return self._index.get(bytes(tile))

    def append(self, tile: bytes) -> int:
        """Store tile unconditionally and return its id."""
        if len(tile) != TILE_BYTES:
            raise ValueError(f"tile must be {TILE_BYTES} bytes, got {len(tile)}")
        if self.full:
            raise CapacityError("pattern table", self.limit)
        tile = bytes(tile)
        idx = len(self._tiles)
        self._tiles.append(tile)
        self._index.setdefault(tile, idx)
        return idx

    def intern(self, tile: bytes) -> int:
        idx = self.find(tile)
        if idx is None:
            idx = self.append(tile)
        return idx

    def to_bytes(self) -> bytes:
        return b"".join(self._tiles)
