"""
Capture configuration.

A CaptureConfig is built once per session and never mutated. The requested
zoom is snapped to the nearest supported level at or above it, and the
redraw zoom is the neighbouring level used to force the renderer to repaint.
"""

from dataclasses import dataclass, field


ZOOM_LEVELS: tuple[int, ...] = (10, 50, 75, 100, 150, 200, 250)
DEFAULT_ZOOM = 100


def snap_zoom(requested: float, levels: tuple[int, ...] = ZOOM_LEVELS, fallback: int = DEFAULT_ZOOM) -> int:
    """Return the first supported zoom level >= requested, or fallback."""
    for level in levels:
        if level >= requested:
            return level
    return fallback


def redraw_zoom_for(zoom: int, levels: tuple[int, ...] = ZOOM_LEVELS) -> int:
    """
    Pick the detour zoom used to force a redraw.

    This is the next larger supported level, or one step down when the
    zoom is already the largest.
    """
    ordered = sorted(levels)
    if zoom >= ordered[-1]:
        return ordered[-2] if len(ordered) > 1 else ordered[-1]
    for level in ordered:
        if level > zoom:
            return level
    return ordered[-1]


@dataclass(frozen=True)
class CaptureConfig:
    """Immutable settings for one capture session."""
    zoom: int = DEFAULT_ZOOM
    redraw_zoom: int = 150
    grid_cell_size: int = 70
    zoom_levels: tuple[int, ...] = field(default=ZOOM_LEVELS)
    frame_retries: int = 10
    ui_wait_timeout: float = 2.0    # seconds
    ui_poll_interval: float = 0.05  # seconds
    sidebar_settle: float = 0.1     # seconds, sidebar slide animation
    fallback_zoom: int = DEFAULT_ZOOM
    padding_factor: float = 2.0

    @property
    def scale(self) -> float:
        return self.zoom / 100

    @classmethod
    def for_zoom(cls, requested: float = DEFAULT_ZOOM, **overrides) -> "CaptureConfig":
        """
        Build a config for a requested zoom percentage.

        Args:
            requested: Desired zoom percentage (snapped to a supported level)
            **overrides: Any other CaptureConfig field

        Returns:
            CaptureConfig with zoom and redraw_zoom derived from requested
        """
        levels = tuple(overrides.pop('zoom_levels', ZOOM_LEVELS))
        fallback = overrides.get('fallback_zoom', DEFAULT_ZOOM)
        zoom = snap_zoom(requested, levels, fallback)
        return cls(
            zoom=zoom,
            redraw_zoom=redraw_zoom_for(zoom, levels),
            zoom_levels=levels,
            **overrides,
        )

    def __post_init__(self):
        if self.frame_retries < 1:
            raise ValueError("frame_retries must be at least 1")
        if self.zoom <= 0:
            raise ValueError(f"Invalid zoom: {self.zoom}")
