# Conversion settings: frame size, origin, mode and output layout.
import enum
from dataclasses import dataclass, field
from typing import Optional

from .errors import ConfigError

TILE_PX = 16
HALF_TILE_PX = TILE_PX // 2


class Mode(enum.IntEnum):
    # Values are the mode tag written to the bundle header.
    COMPOSITE = 0
    SINGLE = 1

    @classmethod
    def for_frame(cls, frame_w: int, frame_h: int) -> "Mode":
        if frame_w <= TILE_PX and frame_h <= TILE_PX:
            return cls.SINGLE
        return cls.COMPOSITE


class Layout(enum.Enum):
    SPLIT = "split"
    BUNDLE = "bundle"


_H_ANCHORS = "lcr"
_V_ANCHORS = "tcb"


@dataclass(frozen=True)
class Origin:
    """Where (0, 0) lies within a frame, e.g. Origin("c", "b") for center-bottom."""

    horizontal: str = "c"
    vertical: str = "c"

    @classmethod
    def parse(cls, text: str) -> "Origin":
        """Accepts two anchor letters in either order: "cc", "lt", "tl", "cb"."""
        s = text.strip().lower()
        if len(s) != 2:
            raise ConfigError(f"origin must be two characters, got {text!r}")
        a, b = s
        if a in _H_ANCHORS and b in _V_ANCHORS:
            return cls(a, b)
        if a in _V_ANCHORS and b in _H_ANCHORS:
            return cls(b, a)
        raise ConfigError(f"invalid origin {text!r} (use l/c/r and t/c/b)")

    def point(self, frame_w: int, frame_h: int):
        x = {"l": 0, "c": frame_w // 2, "r": frame_w}[self.horizontal]
        y = {"t": 0, "c": frame_h // 2, "b": frame_h}[self.vertical]
        return x, y

    def offset(self, frame_w: int, frame_h: int):
        # Hardware sprite positions name the tile's center, not its corner.
        x, y = self.point(frame_w, frame_h)
        return x - HALF_TILE_PX, y - HALF_TILE_PX


@dataclass
class ConversionConfig:
    frame_width: int
    frame_height: int
    origin: Origin = field(default_factory=Origin)
    layout: Layout = Layout.SPLIT
    mode: Optional[Mode] = None

    @property
    def effective_mode(self) -> Mode:
        if self.mode is not None:
            return self.mode
        return Mode.for_frame(self.frame_width, self.frame_height)

    def validate(self, image_w: int, image_h: int) -> None:
        if self.frame_width <= 0 or self.frame_height <= 0:
            raise ConfigError(f"Invalid frame size {self.frame_width} x {self.frame_height}")
        if self.frame_width > image_w or self.frame_height > image_h:
            raise ConfigError(
                f"Frame size ({self.frame_width} x {self.frame_height}) exceeds "
                f"source image ({image_w} x {image_h})"
            )


def parse_dimension(text: str) -> int:
    """Frame sizes may be given in decimal or 0x-prefixed hex."""
    try:
        return int(text, 0)
    except ValueError:
        raise ConfigError(f"not a number: {text!r}") from None
