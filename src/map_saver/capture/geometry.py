"""
Tile grid geometry for viewport-sized captures.

Key requirements:
- Count the viewport-sized tiles needed to cover the scaled map
- Enumerate tile origins in row-major order (used for progress reporting)
- Clip tiles at the right/bottom edge of the map
"""

from dataclasses import dataclass
from typing import Iterator
import math


@dataclass(frozen=True)
class TileOrigin:
    """Top-left pixel offset of a tile in output-buffer coordinates."""
    ox: int
    oy: int
    row: int = 0
    column: int = 0
    index: int = 0


@dataclass(frozen=True)
class LogicalCanvas:
    """The full map at a given scale."""
    cells_wide: float
    cells_high: float
    cell_size: int
    scale: float

    @property
    def width(self) -> int:
        """Pixel width; fractional sizes are truncated like a canvas element."""
        return int(self.cells_wide * self.cell_size * self.scale)

    @property
    def height(self) -> int:
        return int(self.cells_high * self.cell_size * self.scale)


class TileGrid:
    """Cover a W x H pixel area with vw x vh tiles."""

    def __init__(self, width: int, height: int, tile_width: int, tile_height: int):
        if tile_width <= 0 or tile_height <= 0:
            raise ValueError(f"Invalid tile size: {tile_width}x{tile_height}")
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self.tile_width = int(tile_width)
        self.tile_height = int(tile_height)

    @property
    def columns(self) -> int:
        return math.ceil(self.width / self.tile_width)

    @property
    def rows(self) -> int:
        return math.ceil(self.height / self.tile_height)

    @property
    def count(self) -> int:
        return self.columns * self.rows

    def origins(self) -> Iterator[TileOrigin]:
        """Yield tile origins, outer loop over oy, inner over ox."""
        index = 0
        for row, oy in enumerate(range(0, self.height, self.tile_height)):
            for column, ox in enumerate(range(0, self.width, self.tile_width)):
                yield TileOrigin(ox=ox, oy=oy, row=row, column=column, index=index)
                index += 1

    def clipped_size(self, origin: TileOrigin) -> tuple[int, int]:
        """Return (width, height) of the part of a tile inside the grid."""
        return (
            min(self.tile_width, self.width - origin.ox),
            min(self.tile_height, self.height - origin.oy),
        )

    @classmethod
    def for_canvas(cls, canvas: LogicalCanvas, viewport: tuple[int, int]) -> "TileGrid":
        return cls(canvas.width, canvas.height, viewport[0], viewport[1])


def progress_percent(completed: int, total: int) -> int:
    """floor(completed / total * 100); an empty grid counts as done."""
    if total <= 0:
        return 100
    return completed * 100 // total
