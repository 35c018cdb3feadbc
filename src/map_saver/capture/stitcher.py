"""
Output buffer for the stitched map.

The buffer is a single RGBA image the size of the whole scaled map. It
starts fully transparent and every captured viewport is composited into it
at the tile's destination, the same way a 2D canvas drawImage would.
"""

import io
import math

from PIL import Image


class EncodingError(Exception):
    """Raised when the stitched map cannot be encoded."""
    pass


class Stitcher:
    """Own the output buffer and draw tiles into it."""

    def __init__(self, width: int, height: int, correction: tuple[float, float] = (0, 0)):
        """
        Args:
            width: Full map width in pixels
            height: Full map height in pixels
            correction: (x, y) offset of the visible drawing surface relative
                to the map origin, already multiplied by the scale
        """
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self.correction = correction
        self.image = Image.new('RGBA', (self.width, self.height), (0, 0, 0, 0))

    def destination(self, ox: float, oy: float) -> tuple[int, int]:
        """Integer buffer position where a tile at (ox, oy) is drawn."""
        return (
            math.floor(ox + self.correction[0]),
            math.floor(oy + self.correction[1]),
        )

    def draw_tile(self, ox: float, oy: float, contents: Image.Image) -> tuple[int, int]:
        """
        Composite the viewport contents at the tile's destination.

        Returns:
            The (x, y) destination the contents were drawn at
        """
        dest = self.destination(ox, oy)
        if contents.mode != 'RGBA':
            contents = contents.convert('RGBA')
        self.image.alpha_composite(contents, dest=dest)
        return dest

    def edge_rows(
        self,
        dest: tuple[int, int],
        tile_width: int,
        tile_height: int,
    ) -> tuple[Image.Image, Image.Image] | None:
        """
        Cut the top and bottom rows of a drawn tile out of the buffer.

        The width is clipped at the right edge of the map and the bottom row
        index at its last row. Returns None when the tile lies entirely
        outside the buffer.
        """
        x, y = dest
        width = min(self.width - x, tile_width)
        if width <= 0 or y >= self.height or y < 0 or x < 0:
            return None

        bottom = min(self.height - 1, y + tile_height - 1)
        top_row = self.image.crop((x, y, x + width, y + 1))
        bottom_row = self.image.crop((x, bottom, x + width, bottom + 1))
        return top_row, bottom_row

    def encode(self, format: str = 'PNG') -> bytes:
        """
        Serialize the buffer.

        Raises:
            EncodingError: empty map or encoder failure
        """
        if self.width == 0 or self.height == 0:
            raise EncodingError(
                f"Cannot encode an empty {self.width}x{self.height} image. "
                "The map may be too large or have no size."
            )

        buffer = io.BytesIO()
        try:
            self.image.save(buffer, format=format)
        except (OSError, ValueError, MemoryError) as e:
            raise EncodingError(f"Failed to encode {self.width}x{self.height} image: {e}") from e

        data = buffer.getvalue()
        if not data:
            raise EncodingError("Encoder produced no data")
        return data
