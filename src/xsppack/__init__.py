"""Sprite sheet to XSP (X68000 sprite library) data converter."""
from .assembler import ConversionResult, chop_frame, convert
from .config import ConversionConfig, Layout, Mode, Origin
from .errors import CapacityError, ConfigError, ImageError, OutputError, ScanError, XspError
from .image import IndexedImage, load_indexed_image
from .packer import pack_bundle, pack_split, parse_bundle_header, write_output
from .palette import convert_palette
from .patterns import PatternStore
from .records import CompositionEntry, ReferenceEntry, Session

__version__ = "0.1.0"
