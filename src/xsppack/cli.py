#!/usr/bin/env python3
# Convert an indexed PNG sprite sheet into XSP sprite data.
#
#   xsppack player.png 32 48 out/player cb
#
# chops player.png into 32x48 XOBJ sprites with the origin at the center-bottom.
import argparse
import logging
import pathlib
import sys

from .assembler import convert
from .config import ConversionConfig, Layout, Mode, Origin, parse_dimension
from .errors import XspError
from .image import load_indexed_image
from .packer import write_output

ORIGIN_HELP = """origin as two letters (default "cc"):
  t/l: top/left, c: center, b/r: bottom/right
  e.g. "lt" uses the left-top of each frame as (0, 0)"""


def dimension(text: str) -> int:
    try:
        return parse_dimension(text)
    except XspError as e:
        raise argparse.ArgumentTypeError(str(e))


def origin(text: str) -> Origin:
    try:
        return Origin.parse(text)
    except XspError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="xsppack",
        description="Convert an indexed PNG sprite sheet to XSP PCG/FRM/REF data",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    ap.add_argument("sheet", type=pathlib.Path, help="indexed-color sprite sheet")
    ap.add_argument("width", type=dimension, help="frame width within the sheet (decimal or hex)")
    ap.add_argument("height", type=dimension, help="frame height within the sheet (decimal or hex)")
    ap.add_argument("outname", type=pathlib.Path, help="base file path and name for output")
    ap.add_argument("origin", nargs="?", type=origin, default=Origin(), help=ORIGIN_HELP)
    ap.add_argument("-b", "--bundle", action="store_true", help="write a single .xsb bundle")
    ap.add_argument("-m", "--mode", choices=["composite", "single"],
                    help="force XOBJ (composite) or SP (single) output; "
                         "default is single for frames up to 16x16")
    ap.add_argument("-v", "--verbose", action="store_true", help="log every frame and tile")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(message)s")

    config = ConversionConfig(
        frame_width=args.width,
        frame_height=args.height,
        origin=args.origin,
        layout=Layout.BUNDLE if args.bundle else Layout.SPLIT,
        mode={"composite": Mode.COMPOSITE, "single": Mode.SINGLE}.get(args.mode),
    )

    try:
        image = load_indexed_image(args.sheet)
        print(f'Loaded "{args.sheet}": {image.width} x {image.height}')
        result = convert(image, config)
        session = result.session
        if session.composite:
            print(f"{session.tile_count} XSP.")
            print(f"{len(session.frames)} FRM.")
            print(f"{len(session.refs)} REF.")
        else:
            print(f"{session.tile_count} SP.")
        written = write_output(result, args.outname, config.layout)
    except XspError as e:
        print(f"ERROR: {e}")
        return 1

    for path in written:
        print(f"ok: {path}")
    if result.truncated:
        print(f"ERROR: output is incomplete: {result.error}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
