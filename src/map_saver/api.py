"""
Public API for map-saver.

This is the primary interface for programmatic use. The CLI and any
scripts should use these functions rather than importing internal modules
directly.

Example usage:
    from map_saver.api import save_map

    result = save_map(output_path=Path("map.png"), zoom=150)
    print(f"Captured {result.tile_count} tiles, {result.exhausted_count} with artifacts")
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pyppeteer.page import Page

from .config import CaptureConfig
from .capture.environment import Sink
from .capture.geometry import LogicalCanvas, TileGrid, TileOrigin
from .capture.session import CaptureSession, ProgressCallback, SaveResult
from .browser.roll20 import Roll20Page, connect_browser, find_roll20_page, launch_browser
from .browser.sinks import FileSink, MultiSink, PageThumbnailSink


# ============================================================================
# Public Data Classes
# ============================================================================


class CaptureError(Exception):
    """Raised by save_map(raise_on_error=True) when a session fails."""

    def __init__(self, result: SaveResult):
        super().__init__(result.error or "Map capture failed")
        self.result = result


@dataclass
class GridPlan:
    """Dry-run description of a capture."""
    zoom: int
    redraw_zoom: int
    width: int
    height: int
    tile_width: int
    tile_height: int
    columns: int
    rows: int
    origins: list[TileOrigin] = field(default_factory=list)

    @property
    def tile_count(self) -> int:
        return self.columns * self.rows


# ============================================================================
# Main Public API Functions
# ============================================================================


def plan_grid(
    cells_wide: float,
    cells_high: float,
    viewport: tuple[int, int],
    zoom: float = 100,
    cell_size: int = 70,
) -> GridPlan:
    """
    Compute the tile grid a capture would use, without a browser.

    Args:
        cells_wide: Map width in grid cells
        cells_high: Map height in grid cells
        viewport: Canvas (width, height) in pixels
        zoom: Requested zoom percentage (snapped to a supported level)
        cell_size: Pixels per grid cell at 100%

    Returns:
        GridPlan with the scaled map size and tile origins
    """
    config = CaptureConfig.for_zoom(zoom, grid_cell_size=cell_size)
    canvas = LogicalCanvas(cells_wide, cells_high, config.grid_cell_size, config.scale)
    grid = TileGrid.for_canvas(canvas, viewport)

    return GridPlan(
        zoom=config.zoom,
        redraw_zoom=config.redraw_zoom,
        width=canvas.width,
        height=canvas.height,
        tile_width=grid.tile_width,
        tile_height=grid.tile_height,
        columns=grid.columns,
        rows=grid.rows,
        origins=list(grid.origins()),
    )


async def save_map_async(
    page: Page,
    output_path: Optional[Path] = None,
    zoom: float = 100,
    thumbnail: bool = False,
    progress_callback: Optional[ProgressCallback] = None,
    **config_overrides,
) -> SaveResult:
    """
    Capture the map shown in a Roll20 page.

    Args:
        page: Pyppeteer page with the Roll20 game open
        output_path: Where to write the PNG (optional)
        zoom: Requested zoom percentage
        thumbnail: Also show the result as a thumbnail in the page
        progress_callback: Called with (completed, total, percent) per tile
        **config_overrides: Other CaptureConfig fields

    Returns:
        SaveResult (check .success)
    """
    config = CaptureConfig.for_zoom(zoom, **config_overrides)

    sinks: list[Sink] = []
    if output_path is not None:
        sinks.append(FileSink(output_path))
    if thumbnail:
        sinks.append(PageThumbnailSink(page))

    session = CaptureSession(
        Roll20Page(page),
        config=config,
        sink=MultiSink(*sinks) if sinks else None,
        progress_callback=progress_callback,
    )
    return await session.run()


async def save_map_from_browser(
    browser_url: str = 'http://127.0.0.1:9222',
    launch: bool = False,
    headless: bool = False,
    url: Optional[str] = None,
    executable_path: Optional[str] = None,
    **kwargs,
) -> SaveResult:
    """
    Attach to (or launch) a browser, find the Roll20 tab and capture it.

    Remaining keyword arguments are passed to save_map_async.
    """
    if launch:
        browser = await launch_browser(headless=headless, executable_path=executable_path)
    else:
        browser = await connect_browser(browser_url)

    try:
        page = await find_roll20_page(browser, url=url)
        return await save_map_async(page, **kwargs)
    finally:
        # Never close a browser we only attached to.
        if launch:
            await browser.close()
        else:
            await browser.disconnect()


def save_map(raise_on_error: bool = False, **kwargs) -> SaveResult:
    """
    Synchronous wrapper for save_map_from_browser.

    Raises:
        CaptureError: the session failed and raise_on_error is set
    """
    result = asyncio.run(save_map_from_browser(**kwargs))
    if raise_on_error and not result.success:
        raise CaptureError(result)
    return result
