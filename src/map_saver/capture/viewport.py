"""
Position the visible window over the map.

Two positioning mechanisms exist and exactly one is used per session:

- scroll: the editor container is scrolled so the tile origin sits at
  the top-left of the viewport;
- camera: the engine's camera transform is moved. The camera is anchored
  at the viewport centre and its y axis points up, so the position is the
  centred, y-negated counterpart of the scroll offsets.
"""

from dataclasses import dataclass
from enum import Enum

from ..config import CaptureConfig
from .environment import EditorContainer, Scene
from .zoom import ZoomSelector


class PositioningMode(str, Enum):
    """How the viewport is moved."""
    SCROLL = "scroll"
    CAMERA = "camera"


@dataclass
class ViewportState:
    """Logical offset the viewport was last moved to."""
    ox: float = 0
    oy: float = 0


def scroll_offsets(ox: float, oy: float, scale: float,
                   padding_top: float, padding_left: float) -> tuple[float, float]:
    """Return (scroll_top, scroll_left) that put (ox, oy) at the top-left."""
    return (oy + padding_top * scale, ox + padding_left * scale)


def camera_position(ox: float, oy: float, scale: float,
                    padding_top: float, padding_left: float,
                    canvas_width: float, canvas_height: float) -> tuple[float, float]:
    """Return camera (x, y) that put (ox, oy) at the top-left of the viewport."""
    x = ox / scale + padding_left * scale + canvas_width / scale / 2
    y = -oy / scale + padding_top * scale - canvas_height / scale / 2
    return (x, y)


class ViewportController:
    """Move the viewport and force the scene to repaint."""

    def __init__(
        self,
        mode: PositioningMode,
        scene: Scene,
        editor: EditorContainer,
        zoom: ZoomSelector,
        config: CaptureConfig,
    ):
        self.mode = PositioningMode(mode)
        self.scene = scene
        self.editor = editor
        self.zoom = zoom
        self.config = config
        self.state = ViewportState()

    async def position(self, ox: float, oy: float, scale: float,
                       padding_top: float = 0, padding_left: float = 0) -> None:
        """
        Move the viewport so logical offset (ox, oy) is at its top-left.

        Does not wait for the move to take effect; callers must wait at
        least one frame boundary before reading pixels.
        """
        if self.mode is PositioningMode.CAMERA:
            width, height = await self.scene.canvas_size()
            x, y = camera_position(ox, oy, scale, padding_top, padding_left, width, height)
            await self.scene.set_camera_position(x, y)
        else:
            top, left = scroll_offsets(ox, oy, scale, padding_top, padding_left)
            await self.editor.set_scroll(top, left)

        self.state = ViewportState(ox=ox, oy=oy)

    async def force_redraw(self) -> None:
        """
        Make the renderer repaint the current view.

        The scene does not always redraw after a scroll or camera move, so
        the zoom is switched to a neighbouring level and back before an
        explicit render pass is requested.
        """
        await self.zoom.set_zoom(self.config.redraw_zoom)
        await self.zoom.set_zoom(self.config.zoom)
        await self.scene.render()
