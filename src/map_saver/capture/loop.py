"""
Capture one tile with bounded, escalating retries.

Per tile: position the viewport, let one frame pass, then up to
`frame_retries` attempts of force-redraw -> wait -> draw -> check. Attempt
`i` waits `i + 1` frames so later attempts give the renderer more time; the
last of those is waited on by `Scene.grab()` itself so pixels are read in
the frame the wait ended on. A tile that never passes the check keeps
whatever was drawn last; this is logged and the capture moves on.
"""

from dataclasses import dataclass

from ..config import CaptureConfig
from .environment import Scene
from .geometry import TileGrid, TileOrigin
from .oracle import is_tile_ready
from .stitcher import Stitcher
from .viewport import ViewportController
from .waiting import wait_frames


@dataclass
class TileOutcome:
    """Result of capturing a single tile."""
    origin: TileOrigin
    accepted: bool
    attempts: int  # attempts made, 1-based
    destination: tuple[int, int] | None = None
    frames_waited: list[int] | None = None  # settle frames per attempt

    @property
    def exhausted(self) -> bool:
        return not self.accepted


def frames_for_attempt(attempt: int) -> int:
    """Frame boundaries to wait on a 0-based attempt."""
    return attempt + 1


class TileCaptureLoop:
    """Position, redraw, draw and verify tiles."""

    def __init__(
        self,
        scene: Scene,
        viewport: ViewportController,
        stitcher: Stitcher,
        grid: TileGrid,
        config: CaptureConfig,
        padding: tuple[float, float] = (0, 0),
    ):
        self.scene = scene
        self.viewport = viewport
        self.stitcher = stitcher
        self.grid = grid
        self.config = config
        self.padding_top, self.padding_left = padding

    async def capture(self, origin: TileOrigin) -> TileOutcome:
        """Capture the tile at `origin` into the stitcher."""
        scale = self.config.scale

        await self.viewport.position(origin.ox, origin.oy, scale, self.padding_top, self.padding_left)
        await wait_frames(self.scene, 1)

        retries = self.config.frame_retries
        frames_waited: list[int] = []
        dest = None

        for attempt in range(retries):
            await self.viewport.force_redraw()

            frames = frames_for_attempt(attempt)
            # grab() waits the final frame boundary.
            await wait_frames(self.scene, frames - 1)
            frames_waited.append(frames)

            contents = await self.scene.grab()
            dest = self.stitcher.draw_tile(origin.ox, origin.oy, contents)

            rows = self.stitcher.edge_rows(dest, self.grid.tile_width, self.grid.tile_height)
            if rows is None:
                print(
                    f"[Capture] Warning: tile [{origin.ox}, {origin.oy}] was drawn at {dest}, "
                    f"outside the {self.stitcher.width}x{self.stitcher.height} image. Nothing to check.",
                    flush=True,
                )
            if rows is None or is_tile_ready(*rows):
                return TileOutcome(
                    origin=origin,
                    accepted=True,
                    attempts=attempt + 1,
                    destination=dest,
                    frames_waited=frames_waited,
                )

        print(
            f"[Capture] Warning: tile [{origin.ox}, {origin.oy}] did not render completely "
            f"after {retries} attempts. The result may have artifacts.",
            flush=True,
        )
        return TileOutcome(
            origin=origin,
            accepted=False,
            attempts=retries,
            destination=dest,
            frames_waited=frames_waited,
        )
