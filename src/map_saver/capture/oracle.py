"""
Decide whether a freshly drawn tile finished rendering.

Only the top and bottom pixel rows of a tile are sampled. A fully rendered
map tile is opaque at its vertical extremes, so any fully transparent pixel
there means the frame was read before the renderer finished (or it never
painted). This costs O(width) instead of comparing whole tiles.

Known approximation: transparency confined to interior rows is not seen,
and maps that are legitimately transparent at a tile edge are rejected on
every attempt (they end up exhausted and kept as-is).
"""

from PIL import Image


def has_transparent_pixels(row: Image.Image) -> bool:
    """True if any pixel in `row` has alpha == 0."""
    if row.width == 0 or row.height == 0:
        return False
    if 'A' not in row.getbands():
        return False
    low, _ = row.getchannel('A').getextrema()
    return low == 0


def is_tile_ready(top_row: Image.Image, bottom_row: Image.Image) -> bool:
    """Accept a tile only if neither sampled edge row has transparent pixels."""
    return not has_transparent_pixels(top_row) and not has_transparent_pixels(bottom_row)
