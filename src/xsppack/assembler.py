"""
Chops a sprite sheet into hardware sprites.

Every frame of the sheet (row-major) is scanned for occupied 16x16 blocks.
In COMPOSITE mode each block becomes a deduplicated pattern plus a
composition entry placing it relative to the previous one, and each frame
gets one reference entry. In SINGLE mode the blocks are just collected.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .config import ConversionConfig, Layout, Mode
from .errors import CapacityError, ScanError
from .image import IndexedImage
from .palette import convert_palette
from .records import BUNDLE_FRM_MAX_COUNT, FRM_MAX_COUNT, Session, wrap_int16
from .scanner import Rect, claim, clip_tile

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    session: Session
    frame_rows: int
    frame_columns: int
    truncated: bool = False
    error: Optional[str] = None

    @property
    def mode(self) -> Mode:
        return self.session.mode

    @property
    def frame_count(self) -> int:
        return self.frame_rows * self.frame_columns


def chop_frame(session: Session, buf: bytearray, stride: int, frame: Rect, origin) -> int:
    """
    Extract every sprite in frame from buf (clearing it as it goes).
    Returns the number of sprites placed.
    """
    ox, oy = origin
    sp_count = 0
    last_vx = last_vy = 0
    frm_offs = session.composition_offset
    if session.composite:
        session.check_ref_room()

    try:
        while True:
            try:
                hit = claim(buf, stride, frame)
            except ScanError as e:
                logger.error("%s; ending frame at (%d, %d)", e, frame.x, frame.y)
                break
            if hit is None:
                break
            col, row = hit
            if session.composite:
                session.check_frm_room()
            tile = clip_tile(buf, stride, col, row, frame)

            if not session.composite:
                session.add_sprite(tile)
                sp_count += 1
                continue

            pt = session.patterns.intern(tile)
            vx = (col % frame.w) - ox
            vy = (row % frame.h) - oy
            dx, dy = vx - last_vx, vy - last_vy
            if wrap_int16(dx) != dx or wrap_int16(dy) != dy:
                logger.warning("delta (%d, %d) at (%d, %d) doesn't fit in 16 bits; wrapping",
                               dx, dy, col, row)
            session.add_frame_entry(wrap_int16(dx), wrap_int16(dy), pt)
            logger.debug("frm: %d %d pt=%d", dx, dy, pt)
            last_vx, last_vy = vx, vy
            sp_count += 1
    finally:
        # Even an interrupted frame keeps a valid reference to what it placed.
        if session.composite and len(session.refs) < session.ref_limit:
            session.add_ref_entry(sp_count, frm_offs)
    return sp_count


def convert(image: IndexedImage, config: ConversionConfig) -> ConversionResult:
    config.validate(image.width, image.height)
    frm_limit = BUNDLE_FRM_MAX_COUNT if config.layout == Layout.BUNDLE else FRM_MAX_COUNT
    session = Session(mode=config.effective_mode, frm_limit=frm_limit)
    session.palette = convert_palette(image.palette)

    fw, fh = config.frame_width, config.frame_height
    rows = image.height // fh
    cols = image.width // fw
    result = ConversionResult(session, rows, cols)
    origin = config.origin.offset(fw, fh)

    # Work on a copy; the caller's pixels stay intact.
    buf = bytearray(image.pixels)
    try:
        for y in range(rows):
            for x in range(cols):
                n = chop_frame(session, buf, image.width, Rect(x * fw, y * fh, fw, fh), origin)
                logger.debug("frame (%d, %d): %d sprites", x, y, n)
    except CapacityError as e:
        logger.error("%s; stopping extraction", e)
        result.truncated = True
        result.error = str(e)
    return result
