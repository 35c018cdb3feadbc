"""
Map Saver - Capture a whole Roll20 map as one image.

Usage:
    from map_saver import save_map

    result = save_map(output_path=Path("map.png"), zoom=150)
"""

__version__ = "0.2.0"

# Public API exports
from .api import (
    save_map,
    save_map_async,
    save_map_from_browser,
    plan_grid,
    CaptureError,
    GridPlan,
)

from .config import CaptureConfig, ZOOM_LEVELS, snap_zoom, redraw_zoom_for
from .capture.session import CaptureSession, SaveResult, MissingCollaboratorError
from .capture.stitcher import EncodingError
from .capture.waiting import UITimeoutError
from .capture.zoom import ZoomChangeError
from .browser.sinks import PresentationError

__all__ = [
    # Version
    "__version__",
    # Main functions
    "save_map",
    "save_map_async",
    "save_map_from_browser",
    "plan_grid",
    # Configuration
    "CaptureConfig",
    "ZOOM_LEVELS",
    "snap_zoom",
    "redraw_zoom_for",
    # Result types
    "CaptureSession",
    "SaveResult",
    "GridPlan",
    # Exceptions
    "CaptureError",
    "MissingCollaboratorError",
    "EncodingError",
    "UITimeoutError",
    "ZoomChangeError",
    "PresentationError",
]
