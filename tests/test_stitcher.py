"""
Tests for the output buffer.
"""

import io

import pytest
from PIL import Image

from map_saver.capture.stitcher import EncodingError, Stitcher


def solid(width, height, colour=(255, 0, 0, 255)):
    return Image.new('RGBA', (width, height), colour)


def test_buffer_starts_transparent():
    """New buffer is fully transparent."""
    stitcher = Stitcher(20, 10)

    assert stitcher.image.size == (20, 10)
    assert stitcher.image.getpixel((5, 5)) == (0, 0, 0, 0)


def test_draw_tile_at_origin():
    """Tiles land at their origin; overflow past the buffer is clipped."""
    stitcher = Stitcher(30, 20)

    dest = stitcher.draw_tile(20, 10, solid(20, 20))

    assert dest == (20, 10)
    assert stitcher.image.getpixel((20, 10)) == (255, 0, 0, 255)
    assert stitcher.image.getpixel((29, 19)) == (255, 0, 0, 255)
    assert stitcher.image.getpixel((19, 10)) == (0, 0, 0, 0)


def test_draw_tile_applies_correction():
    """Chrome correction shifts the destination, floored to integers."""
    stitcher = Stitcher(30, 30, correction=(2.7, 1.2))

    dest = stitcher.draw_tile(10, 10, solid(5, 5))

    assert dest == (12, 11)
    assert stitcher.image.getpixel((12, 11)) == (255, 0, 0, 255)


def test_transparent_redraw_keeps_earlier_pixels():
    """Compositing is source-over: transparent pixels do not erase."""
    stitcher = Stitcher(10, 10)
    stitcher.draw_tile(0, 0, solid(10, 10))

    stitcher.draw_tile(0, 0, solid(10, 10, (0, 0, 0, 0)))

    assert stitcher.image.getpixel((3, 3)) == (255, 0, 0, 255)


def test_rgb_contents_are_converted():
    """Non-RGBA captures are accepted."""
    stitcher = Stitcher(10, 10)

    stitcher.draw_tile(0, 0, Image.new('RGB', (10, 10), (0, 255, 0)))

    assert stitcher.image.getpixel((0, 0)) == (0, 255, 0, 255)


def test_edge_rows_clip_width_and_bottom():
    """Sampled rows are clipped to the map's right and bottom edges."""
    stitcher = Stitcher(250, 130)

    top, bottom = stitcher.edge_rows((200, 100), 100, 100)

    assert top.size == (50, 1)
    assert bottom.size == (50, 1)


def test_edge_rows_sample_tile_extremes():
    """Rows come from the first and last line of the tile."""
    stitcher = Stitcher(10, 10)
    tile = solid(10, 10)
    tile.putpixel((4, 9), (0, 0, 0, 0))
    stitcher.draw_tile(0, 0, tile)

    top, bottom = stitcher.edge_rows((0, 0), 10, 10)

    assert top.getchannel('A').getextrema() == (255, 255)
    assert bottom.getchannel('A').getextrema() == (0, 255)


def test_edge_rows_outside_buffer():
    """Nothing to sample when the tile is off the buffer."""
    stitcher = Stitcher(10, 10)

    assert stitcher.edge_rows((10, 0), 5, 5) is None
    assert stitcher.edge_rows((0, 10), 5, 5) is None


def test_encode_png():
    """Encoding produces a PNG of the full buffer."""
    stitcher = Stitcher(40, 30)
    stitcher.draw_tile(0, 0, solid(40, 30))

    data = stitcher.encode()

    with Image.open(io.BytesIO(data)) as img:
        assert img.format == 'PNG'
        assert img.size == (40, 30)


def test_encode_empty_buffer_fails():
    """A zero-area map cannot be encoded."""
    with pytest.raises(EncodingError):
        Stitcher(0, 100).encode()
