import logging

import pytest

from xsppack import assembler, records
from xsppack.assembler import chop_frame, convert
from xsppack.config import ConversionConfig, Layout, Mode, Origin
from xsppack.errors import ConfigError, ScanError
from xsppack.patterns import PatternStore
from xsppack.records import CompositionEntry, ReferenceEntry, Session
from xsppack.scanner import Rect


def composite(w, h, **kw):
    return ConversionConfig(w, h, mode=Mode.COMPOSITE, **kw)


def test_single_filled_frame_in_grid(make_image):
    image = make_image(32, 32, (0, 0, 16, 16, 5))
    result = convert(image, composite(16, 16))
    s = result.session

    assert list(s.patterns) == [b"\x55" * 128]
    assert s.frames == [CompositionEntry(0, 0, 0, 0)]
    assert s.refs == [
        ReferenceEntry(1, 0),
        ReferenceEntry(0, 8),
        ReferenceEntry(0, 8),
        ReferenceEntry(0, 8),
    ]
    assert not result.truncated


def test_reference_per_frame_even_when_empty(make_image):
    image = make_image(96, 64)
    result = convert(image, composite(32, 32))
    assert result.frame_count == 6
    assert len(result.session.refs) == 6
    assert all(r.count == 0 for r in result.session.refs)
    assert result.session.frames == []


def test_partial_cells_are_ignored(make_image):
    image = make_image(40, 40, (32, 32, 8, 8, 1))
    result = convert(image, composite(32, 32))
    assert result.frame_count == 1
    assert result.session.refs == [ReferenceEntry(0, 0)]


def test_caller_pixels_are_not_mutated(make_image):
    image = make_image(32, 32, (0, 0, 32, 32, 3))
    before = bytes(image.pixels)
    convert(image, composite(32, 32))
    assert image.pixels == before


def test_deltas_accumulate_to_placements(make_image):
    image = make_image(32, 32, (0, 0, 32, 32, 1))
    result = convert(image, composite(32, 32))
    s = result.session

    deltas = [(e.dx, e.dy) for e in s.frames]
    assert deltas == [(-8, -8), (16, 0), (-16, 16), (16, 0)]
    assert all(e.pattern == 0 for e in s.frames)
    assert len(s.patterns) == 1

    x = y = 0
    placed = []
    for dx, dy in deltas:
        x, y = x + dx, y + dy
        placed.append((x, y))
    # Tile corners (0,0), (16,0), (0,16), (16,16) relative to center minus 8.
    assert placed == [(-8, -8), (8, -8), (-8, 8), (8, 8)]


def test_placement_is_relative_to_frame(make_image):
    image = make_image(64, 32, (40, 5, 1, 1, 2))
    result = convert(image, composite(32, 32))
    assert result.session.frames == [CompositionEntry(0, -3, 0)]
    assert result.session.refs == [ReferenceEntry(0, 0), ReferenceEntry(1, 0)]


def test_origin_left_top(make_image):
    image = make_image(32, 32, (0, 0, 16, 16, 1))
    result = convert(image, composite(32, 32, origin=Origin("l", "t")))
    assert result.session.frames == [CompositionEntry(8, 8, 0)]


def test_identical_tiles_dedup_across_frames(make_image):
    image = make_image(64, 32, (2, 3, 10, 10, 6), (34, 3, 10, 10, 6), (40, 20, 4, 4, 7))
    s = convert(image, composite(32, 32)).session
    assert len(s.patterns) == 2
    assert s.frames[0].pattern == s.frames[1].pattern == 0
    assert s.frames[2].pattern == 1
    assert [r.count for r in s.refs] == [1, 2]
    assert [r.offset for r in s.refs] == [0, 8]


def test_single_mode_never_dedups(make_image):
    image = make_image(32, 16, (0, 0, 16, 16, 4), (16, 0, 16, 16, 4))
    result = convert(image, ConversionConfig(16, 16))
    s = result.session
    assert s.mode == Mode.SINGLE
    assert s.sprites == [b"\x44" * 128, b"\x44" * 128]
    assert s.frames == []
    assert s.refs == []
    assert len(s.patterns) == 0


def test_clip_stays_inside_frame(make_image):
    image = make_image(48, 24, (20, 0, 1, 1, 3), (24, 0, 24, 24, 9))
    s = convert(image, composite(24, 24)).session
    assert s.patterns[0] == b"\x30" + bytes(127)
    frame1 = [s.patterns[e.pattern] for e in s.frames[1:]]
    assert frame1[0] == b"\x99" * 128


def test_palette_converted(make_image):
    image = make_image(32, 32)
    pal = convert(image, composite(32, 32)).session.palette
    assert len(pal) == 16
    assert pal[0] == 0


def test_invalid_config_rejected_before_extraction(make_image):
    image = make_image(32, 32, (0, 0, 32, 32, 1))
    with pytest.raises(ConfigError):
        convert(image, composite(64, 32))


def test_capacity_exhaustion_salvages(make_image, monkeypatch):
    monkeypatch.setattr(records, "PATTERN_MAX_COUNT", 1)
    image = make_image(64, 32, (0, 0, 16, 16, 1), (32, 0, 16, 16, 2), (32, 16, 16, 16, 3))
    result = convert(image, composite(32, 32))
    s = result.session

    assert result.truncated
    assert "pattern table" in result.error
    assert len(s.patterns) == 1
    assert s.frames == [CompositionEntry(-8, -8, 0)]
    # The interrupted frame still gets its (empty) reference.
    assert s.refs == [ReferenceEntry(1, 0), ReferenceEntry(0, 8)]


def test_chop_frame_stops_when_composition_full():
    buf = bytearray(b"\x01" * (32 * 32))
    s = Session(Mode.COMPOSITE, frm_limit=2)
    with pytest.raises(records.CapacityError):
        chop_frame(s, buf, 32, Rect(0, 0, 32, 32), (8, 8))
    assert len(s.frames) == 2
    assert len(s.patterns) == 1
    assert s.refs == [ReferenceEntry(2, 0)]


def test_chop_frame_reference_table_full():
    buf = bytearray(32 * 32)
    s = Session(Mode.COMPOSITE, ref_limit=0)
    with pytest.raises(records.CapacityError):
        chop_frame(s, buf, 32, Rect(0, 0, 32, 32), (8, 8))
    assert s.refs == []


def test_delta_overflow_wraps_with_warning(caplog):
    buf = bytearray(16 * 16)
    buf[0] = 1
    s = Session(Mode.COMPOSITE, patterns=PatternStore())
    with caplog.at_level(logging.WARNING, logger="xsppack.assembler"):
        chop_frame(s, buf, 16, Rect(0, 0, 16, 16), (-40000, 0))
    assert s.frames[0].dx == 40000 - 65536
    assert "wrapping" in caplog.text


@pytest.mark.parametrize("layout,limit", [(Layout.SPLIT, 32768), (Layout.BUNDLE, 8191)])
def test_composition_limit_depends_on_layout(make_image, layout, limit):
    image = make_image(32, 32)
    result = convert(image, composite(32, 32, layout=layout))
    assert result.session.frm_limit == limit


def test_scan_failure_ends_only_that_frame(make_image, monkeypatch):
    real_claim = assembler.claim

    def failing_claim(buf, stride, area):
        if area.x == 0:
            raise ScanError("Unexpectedly empty strip from row 0")
        return real_claim(buf, stride, area)

    monkeypatch.setattr(assembler, "claim", failing_claim)
    image = make_image(64, 32, (0, 0, 16, 16, 1), (32, 0, 16, 16, 2))
    result = convert(image, composite(32, 32))
    s = result.session

    assert not result.truncated
    assert s.refs == [ReferenceEntry(0, 0), ReferenceEntry(1, 0)]
    assert s.frames == [CompositionEntry(-8, -8, 0)]
    assert list(s.patterns) == [b"\x22" * 128]
