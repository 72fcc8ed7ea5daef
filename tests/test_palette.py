from xsppack.palette import convert_palette, palette_bytes, rgba_to_grb555


def test_channel_layout():
    assert rgba_to_grb555(0, 255, 0) == 0xF800
    assert rgba_to_grb555(255, 0, 0) == 0x07C0
    assert rgba_to_grb555(0, 0, 255) == 0x003E
    assert rgba_to_grb555(255, 255, 255, 0) == 0xFFFE


def test_uses_top_five_bits():
    assert rgba_to_grb555(7, 7, 7) == 0
    assert rgba_to_grb555(8, 8, 8) == (1 << 11) | (1 << 6) | (1 << 1)


def test_entry_zero_forced_transparent():
    src = [(255, 255, 255, 255)] * 16
    pal = convert_palette(src)
    assert pal[0] == 0
    assert pal[1:] == [0xFFFE] * 15


def test_only_first_sixteen_entries():
    src = [(0, 0, 0, 255)] + [(255, 0, 0, 255)] * 255
    pal = convert_palette(src)
    assert len(pal) == 16
    assert pal[15] == 0x07C0


def test_short_palette_leaves_zeros():
    pal = convert_palette([(0, 0, 0, 255), (0, 255, 0, 255)])
    assert pal == [0, 0xF800] + [0] * 14


def test_palette_bytes_big_endian():
    pal = [0] * 16
    pal[1] = 0x1234
    data = palette_bytes(pal)
    assert len(data) == 32
    assert data[2:4] == b"\x12\x34"
