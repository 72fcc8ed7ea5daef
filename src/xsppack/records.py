"""
Binary records for the sprite tables, and the per-conversion session that
accumulates them. Everything is big-endian, matching the 68000 that consumes it.
"""
import struct
from dataclasses import dataclass, field
from typing import List

from .config import Mode
from .errors import CapacityError
from .patterns import PATTERN_MAX_COUNT, PatternStore

FRM_STRUCT = struct.Struct(">hhhH")
REF_STRUCT = struct.Struct(">HIH")
FRM_ENTRY_BYTES = FRM_STRUCT.size
REF_ENTRY_BYTES = REF_STRUCT.size

FRM_MAX_COUNT = 32768
# The bundle header stores the composition byte length and REF count as uint16.
BUNDLE_FRM_MAX_BYTES = 0xFFFF
BUNDLE_FRM_MAX_COUNT = BUNDLE_FRM_MAX_BYTES // FRM_ENTRY_BYTES
REF_MAX_COUNT = 0xFFFF


def wrap_int16(v: int) -> int:
    return ((v + 0x8000) & 0xFFFF) - 0x8000


@dataclass(frozen=True)
class CompositionEntry:
    dx: int
    dy: int
    pattern: int
    reserved: int = 0

    def pack(self) -> bytes:
        return FRM_STRUCT.pack(self.dx, self.dy, self.pattern, self.reserved)

    @classmethod
    def unpack(cls, data: bytes) -> "CompositionEntry":
        return cls(*FRM_STRUCT.unpack(data))


@dataclass(frozen=True)
class ReferenceEntry:
    count: int
    offset: int
    reserved: int = 0

    def pack(self) -> bytes:
        return REF_STRUCT.pack(self.count, self.offset, self.reserved)

    @classmethod
    def unpack(cls, data: bytes) -> "ReferenceEntry":
        return cls(*REF_STRUCT.unpack(data))


@dataclass
class Session:
    """All state for one conversion run."""

    mode: Mode
    patterns: PatternStore = field(default_factory=lambda: PatternStore(PATTERN_MAX_COUNT))
    frames: List[CompositionEntry] = field(default_factory=list)
    refs: List[ReferenceEntry] = field(default_factory=list)
    # Raw tiles in SINGLE mode, where nothing is deduplicated.
    sprites: List[bytes] = field(default_factory=list)
    palette: List[int] = field(default_factory=lambda: [0] * 16)
    frm_limit: int = FRM_MAX_COUNT
    ref_limit: int = REF_MAX_COUNT

    @property
    def composite(self) -> bool:
        return self.mode == Mode.COMPOSITE

    @property
    def composition_offset(self) -> int:
        return len(self.frames) * FRM_ENTRY_BYTES

    @property
    def tile_count(self) -> int:
        return len(self.patterns) if self.composite else len(self.sprites)

    def check_frm_room(self):
        if len(self.frames) >= self.frm_limit:
            raise CapacityError("composition table", self.frm_limit)

    def check_ref_room(self):
        if len(self.refs) >= self.ref_limit:
            raise CapacityError("reference table", self.ref_limit)

    def add_sprite(self, tile: bytes) -> int:
        if len(self.sprites) >= self.patterns.limit:
            raise CapacityError("pattern table", self.patterns.limit)
        self.sprites.append(bytes(tile))
        return len(self.sprites) - 1

    def add_frame_entry(self, dx: int, dy: int, pattern: int) -> CompositionEntry:
        self.check_frm_room()
        entry = CompositionEntry(dx, dy, pattern, 0)
        self.frames.append(entry)
        return entry

    def add_ref_entry(self, count: int, offset: int) -> ReferenceEntry:
        self.check_ref_room()
        entry = ReferenceEntry(count, offset, 0)
        self.refs.append(entry)
        return entry

    def tile_bytes(self) -> bytes:
        if self.composite:
            return self.patterns.to_bytes()
        return b"".join(self.sprites)

    def frm_bytes(self) -> bytes:
        return b"".join(e.pack() for e in self.frames)

    def ref_bytes(self) -> bytes:
        return b"".join(e.pack() for e in self.refs)
