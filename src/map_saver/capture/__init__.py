"""Tiled capture-and-stitch engine."""

from .environment import (
    Scene,
    ZoomControl,
    EditorContainer,
    SidebarToggle,
    Sink,
    Collaborators,
    CollaboratorSource,
)
from .geometry import TileGrid, TileOrigin, LogicalCanvas, progress_percent
from .oracle import has_transparent_pixels, is_tile_ready
from .stitcher import Stitcher, EncodingError
from .viewport import ViewportController, PositioningMode
from .waiting import UITimeoutError, wait_for_ui
from .zoom import ZoomSelector, ZoomChangeError
from .loop import TileCaptureLoop, TileOutcome
from .session import CaptureSession, SaveResult, MissingCollaboratorError

__all__ = [
    'Scene',
    'ZoomControl',
    'EditorContainer',
    'SidebarToggle',
    'Sink',
    'Collaborators',
    'CollaboratorSource',
    'TileGrid',
    'TileOrigin',
    'LogicalCanvas',
    'progress_percent',
    'has_transparent_pixels',
    'is_tile_ready',
    'Stitcher',
    'EncodingError',
    'ViewportController',
    'PositioningMode',
    'UITimeoutError',
    'wait_for_ui',
    'ZoomSelector',
    'ZoomChangeError',
    'TileCaptureLoop',
    'TileOutcome',
    'CaptureSession',
    'SaveResult',
    'MissingCollaboratorError',
]
