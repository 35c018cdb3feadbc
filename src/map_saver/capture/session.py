"""
Capture session: the top-level orchestration.

A session:
1. Finds the page collaborators and fails fast if any is missing
2. Records the original zoom and hides the sidebar to enlarge the viewport
3. Pads the editor so every tile, including the far edges, can be reached
4. Captures the whole tile grid and encodes the stitched image
5. Hands the image to a sink
6. Always restores zoom, padding and sidebar, whether or not it succeeded
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from ..config import CaptureConfig
from .environment import Collaborators, CollaboratorSource, Sink
from .geometry import LogicalCanvas, TileGrid, progress_percent
from .loop import TileCaptureLoop, TileOutcome
from .stitcher import Stitcher
from .viewport import PositioningMode, ViewportController
from .zoom import ZoomSelector


class MissingCollaboratorError(Exception):
    """Raised when required page elements cannot be found."""
    pass


ProgressCallback = Callable[[int, int, int], None]  # (completed, total, percent)


@dataclass
class SaveResult:
    """Outcome of a capture session."""
    success: bool
    png: bytes | None = None
    width: int = 0
    height: int = 0
    zoom: int = 100
    mode: str | None = None
    tiles: list[TileOutcome] = field(default_factory=list)
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def tile_count(self) -> int:
        return len(self.tiles)

    @property
    def accepted_count(self) -> int:
        return sum(1 for t in self.tiles if t.accepted)

    @property
    def exhausted_count(self) -> int:
        return sum(1 for t in self.tiles if t.exhausted)


class CaptureSession:
    """Capture a whole map through the viewport and stitch it."""

    def __init__(
        self,
        source: CollaboratorSource,
        config: CaptureConfig | None = None,
        sink: Sink | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        self.source = source
        self.config = config or CaptureConfig.for_zoom()
        self.sink = sink
        self.progress_callback = progress_callback

        self.collaborators: Collaborators | None = None
        self.zoom_selector: ZoomSelector | None = None
        self.original_zoom = self.config.fallback_zoom
        self.mode = PositioningMode.SCROLL
        self.restore_sidebar = False

    async def run(self) -> SaveResult:
        """
        Run the session.

        Fatal errors are caught here, logged and reported in the result;
        cleanup runs on every path.
        """
        result = SaveResult(success=False, zoom=self.config.zoom)

        try:
            print("[Session] Initializing map capture...", flush=True)
            await self.initialize()
            result.mode = self.mode.value

            print(f"[Session] Capturing map tiles at {self.config.zoom}%...", flush=True)
            result.png = await self.capture_map(result)

            if self.sink is not None:
                print("[Session] Presenting final image...", flush=True)
                await self.sink.present(result.png)

            result.success = True
            print(
                f"[Session] Map saved: {result.width}x{result.height}px, "
                f"{result.accepted_count}/{result.tile_count} tiles clean",
                flush=True,
            )

        except Exception as e:
            result.error = f"{type(e).__name__}: {e}"
            print(f"[Session] Error while saving map: {result.error}", flush=True)

        finally:
            print("[Session] Cleaning up and restoring settings...", flush=True)
            result.warnings.extend(await self.cleanup())

        return result

    async def initialize(self) -> None:
        """Discover collaborators and prepare the page."""
        self.collaborators = await self.source.discover()

        missing = self.collaborators.missing()
        if missing:
            raise MissingCollaboratorError(
                f"Required page elements not found: {', '.join(missing)}. "
                "Make sure a Roll20 game is open and the zoom controls are visible."
            )

        scene = self.collaborators.scene
        self.zoom_selector = ZoomSelector(self.collaborators.zoom, self.config)
        self.original_zoom = await self.zoom_selector.current_snapped()
        self.mode = PositioningMode.CAMERA if await scene.has_camera() else PositioningMode.SCROLL
        print(f"[Session] Original zoom {self.original_zoom}%, positioning by {self.mode.value}", flush=True)

        # Hide the sidebar to maximize the capture area.
        sidebar = self.collaborators.sidebar
        if self.mode is PositioningMode.CAMERA:
            if sidebar is None:
                print("[Session] Warning: sidebar toggle not found, capturing with sidebar visible", flush=True)
            elif not await sidebar.is_hidden():
                await sidebar.toggle()
                self.restore_sidebar = True
                await asyncio.sleep(self.config.sidebar_settle)

    async def capture_map(self, result: SaveResult) -> bytes:
        """Capture every tile and return the encoded PNG."""
        config = self.config
        scene = self.collaborators.scene
        editor = self.collaborators.editor
        scale = config.scale

        cells_wide, cells_high = await scene.page_size()
        canvas = LogicalCanvas(cells_wide, cells_high, config.grid_cell_size, scale)
        result.width, result.height = canvas.width, canvas.height

        await self.zoom_selector.set_zoom(config.zoom)

        viewport_size = await scene.canvas_size()
        # Extra padding lets even the bottom-right corner scroll to the top-left.
        await editor.set_extra_padding(
            viewport_size[0] / scale * config.padding_factor,
            viewport_size[1] / scale * config.padding_factor,
        )

        if self.mode is PositioningMode.CAMERA:
            padding = (0, 0)
        else:
            padding = await editor.padding()

        offset_left, offset_top = await scene.canvas_offset()
        stitcher = Stitcher(canvas.width, canvas.height, correction=(offset_left * scale, offset_top * scale))
        grid = TileGrid.for_canvas(canvas, viewport_size)
        viewport = ViewportController(self.mode, scene, editor, self.zoom_selector, config)
        loop = TileCaptureLoop(scene, viewport, stitcher, grid, config, padding=padding)

        total = grid.count
        print(
            f"[Capture] {canvas.width}x{canvas.height}px in {total} tiles "
            f"({grid.columns}x{grid.rows} of {grid.tile_width}x{grid.tile_height})",
            flush=True,
        )

        for completed, origin in enumerate(grid.origins(), start=1):
            outcome = await loop.capture(origin)
            result.tiles.append(outcome)

            percent = progress_percent(completed, total)
            print(f"[Capture] Progress: {percent}%", flush=True)
            if self.progress_callback:
                self.progress_callback(completed, total, percent)

        print("[Capture] Encoding final image...", flush=True)
        return stitcher.encode()

    async def cleanup(self) -> list[str]:
        """
        Restore everything the session changed.

        Each step runs even if an earlier one fails; failures are returned
        as warnings.
        """
        warnings: list[str] = []
        collaborators = self.collaborators
        if collaborators is None:
            return warnings

        if collaborators.editor is not None:
            await self._guarded("remove editor padding", collaborators.editor.clear_extra_padding, warnings)

        if self.zoom_selector is not None:
            zoom_selector = self.zoom_selector

            async def restore_zoom():
                await zoom_selector.set_zoom(self.original_zoom)

            await self._guarded(f"restore zoom to {self.original_zoom}%", restore_zoom, warnings)
            await self._guarded("close zoom menu", zoom_selector.close_menu, warnings)

        if self.restore_sidebar and collaborators.sidebar is not None:
            await self._guarded("restore sidebar", collaborators.sidebar.toggle, warnings)
            self.restore_sidebar = False

        return warnings

    async def _guarded(self, description: str, action: Callable[[], Awaitable[None]], warnings: list[str]) -> None:
        try:
            await action()
        except Exception as e:
            message = f"Failed to {description}: {e}"
            print(f"[Session] Warning: {message}", flush=True)
            warnings.append(message)
