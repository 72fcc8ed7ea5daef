"""
Serializes a conversion result as split files or as one .xsb bundle.

Bundle layout (big-endian):
    uint16 mode, uint16 ref_count, uint16 frm_bytes, uint16 pcg_count,
    uint16 pal[16], uint32 ref_offs, uint32 frm_offs, uint32 pcg_offs
followed by the REF, FRM and PCG sections in that order.
"""
import logging
import os
import pathlib
import struct
import tempfile
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .assembler import ConversionResult
from .config import Layout, Mode
from .errors import OutputError
from .palette import PALETTE_SIZE, palette_bytes
from .records import REF_ENTRY_BYTES

logger = logging.getLogger(__name__)

HEADER_STRUCT = struct.Struct(f">4H{PALETTE_SIZE}H3I")
HEADER_BYTES = HEADER_STRUCT.size


@dataclass(frozen=True)
class BundleHeader:
    mode: int
    ref_count: int
    frm_bytes: int
    pcg_count: int
    palette: Tuple[int, ...]
    ref_offset: int
    frm_offset: int
    pcg_offset: int

    def pack(self) -> bytes:
        return HEADER_STRUCT.pack(
            self.mode, self.ref_count, self.frm_bytes, self.pcg_count,
            *self.palette,
            self.ref_offset, self.frm_offset, self.pcg_offset,
        )


def parse_bundle_header(data: bytes) -> BundleHeader:
    if len(data) < HEADER_BYTES:
        raise ValueError(f"bundle is {len(data)} bytes, shorter than its {HEADER_BYTES} byte header")
    v = HEADER_STRUCT.unpack_from(data)
    return BundleHeader(v[0], v[1], v[2], v[3], tuple(v[4:4 + PALETTE_SIZE]), *v[4 + PALETTE_SIZE:])


def pcg_suffix(mode: Mode) -> str:
    return ".xsp" if mode == Mode.COMPOSITE else ".sp"


def output_paths(base, mode: Mode, layout: Layout) -> List[pathlib.Path]:
    base = pathlib.Path(base)
    if layout == Layout.BUNDLE:
        suffixes = [".xsb"]
    elif mode == Mode.COMPOSITE:
        suffixes = [".xsp", ".frm", ".ref", ".pal"]
    else:
        suffixes = [".sp", ".pal"]
    return [base.with_name(base.name + s) for s in suffixes]


def pack_split(result: ConversionResult) -> Dict[str, bytes]:
    s = result.session
    out = {pcg_suffix(s.mode): s.tile_bytes()}
    if s.composite:
        out[".frm"] = s.frm_bytes()
        out[".ref"] = s.ref_bytes()
    out[".pal"] = palette_bytes(s.palette)
    return out


def pack_bundle(result: ConversionResult) -> bytes:
    s = result.session
    if s.composite:
        ref, frm = s.ref_bytes(), s.frm_bytes()
        ref_count = len(s.refs)
    else:
        ref, frm = b"", b""
        ref_count = 0
    pcg = s.tile_bytes()

    ref_offs = HEADER_BYTES
    frm_offs = ref_offs + ref_count * REF_ENTRY_BYTES
    pcg_offs = frm_offs + len(frm)
    header = BundleHeader(
        int(s.mode), ref_count, len(frm), s.tile_count, tuple(s.palette),
        ref_offs, frm_offs, pcg_offs,
    )
    return header.pack() + ref + frm + pcg


def _write_bytes(path: pathlib.Path, data: bytes):
    try:
        path.write_bytes(data)
    except OSError as e:
        raise OutputError(path, e.strerror or e) from e


def _write_atomic(path: pathlib.Path, data: bytes):
    tmp = None
    try:
        fd, tmp = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except OSError as e:
        if tmp is not None and os.path.exists(tmp):
            os.unlink(tmp)
        raise OutputError(path, e.strerror or e) from e


def write_output(result: ConversionResult, base, layout: Layout) -> List[pathlib.Path]:
    """Write result next to base; returns the paths written."""
    base = pathlib.Path(base)
    try:
        base.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(base.parent, e.strerror or e) from e

    written = []
    if layout == Layout.BUNDLE:
        path = output_paths(base, result.mode, layout)[0]
        data = pack_bundle(result)
        _write_atomic(path, data)
        logger.info("wrote %s (%d bytes)", path, len(data))
        written.append(path)
        return written

    for suffix, data in pack_split(result).items():
        path = base.with_name(base.name + suffix)
        _write_bytes(path, data)
        logger.info("wrote %s (%d bytes)", path, len(data))
        written.append(path)
    return written
