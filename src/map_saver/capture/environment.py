"""
Collaborator interfaces consumed by the capture engine.

The engine never touches a page directly. Everything it needs from the
environment (the rendered scene, the zoom widget, the scrollable editor,
the sidebar, and wherever the finished image goes) is reached through
these classes. `map_saver.browser.roll20` implements them for a Roll20
tab driven over Chrome DevTools; the test suite implements them in memory.
"""

from dataclasses import dataclass, fields

from PIL import Image


class Scene:
    """The rendered map: dimensions, render trigger, pixels, camera."""

    async def page_size(self) -> tuple[float, float]:
        """Map size in grid cells (width, height)."""
        raise NotImplementedError

    async def canvas_size(self) -> tuple[int, int]:
        """Visible drawing surface size in pixels (width, height)."""
        raise NotImplementedError

    async def canvas_offset(self) -> tuple[float, float]:
        """Offset (left, top) of the drawing surface inside its container."""
        raise NotImplementedError

    async def has_camera(self) -> bool:
        """True when the view is positioned by a camera transform, not scrolling."""
        raise NotImplementedError

    async def set_camera_position(self, x: float, y: float) -> None:
        raise NotImplementedError

    async def render(self) -> None:
        """Request an explicit render pass."""
        raise NotImplementedError

    async def grab(self) -> Image.Image:
        """
        Wait for the next frame boundary and read back the viewport contents
        as an RGBA image in that same frame.
        """
        raise NotImplementedError

    async def next_frame(self) -> None:
        """Suspend until the next render frame boundary."""
        raise NotImplementedError


class ZoomControl:
    """The zoom level widget and its drop-down of discrete options."""

    async def read_level(self) -> str:
        """Text currently shown as the zoom level, e.g. '100'."""
        raise NotImplementedError

    async def is_menu_open(self) -> bool:
        raise NotImplementedError

    async def open_menu(self) -> None:
        raise NotImplementedError

    async def option_labels(self) -> list[str]:
        """Labels of the selectable options, e.g. ['10%', '50%', ...]."""
        raise NotImplementedError

    async def choose(self, label: str) -> None:
        raise NotImplementedError

    async def close_menu(self) -> None:
        raise NotImplementedError


class EditorContainer:
    """The scrollable element holding the drawing surface."""

    async def padding(self) -> tuple[float, float]:
        """Computed (top, left) padding in CSS pixels."""
        raise NotImplementedError

    async def set_scroll(self, top: float, left: float) -> None:
        raise NotImplementedError

    async def set_extra_padding(self, right: float, bottom: float) -> None:
        raise NotImplementedError

    async def clear_extra_padding(self) -> None:
        raise NotImplementedError


class SidebarToggle:
    """The single control that shows/hides the right sidebar."""

    async def is_hidden(self) -> bool:
        raise NotImplementedError

    async def toggle(self) -> None:
        raise NotImplementedError


class Sink:
    """Destination for the finished image."""

    async def present(self, png: bytes) -> None:
        raise NotImplementedError


@dataclass
class Collaborators:
    """Everything a session needs. Fields are None when discovery failed."""
    scene: Scene | None = None
    zoom: ZoomControl | None = None
    editor: EditorContainer | None = None
    sidebar: SidebarToggle | None = None

    def missing(self) -> list[str]:
        """Names of required collaborators that were not found."""
        # The sidebar toggle is only needed in camera mode, checked later.
        return [
            f.name for f in fields(self)
            if f.name != 'sidebar' and getattr(self, f.name) is None
        ]


class CollaboratorSource:
    """Locates the collaborators in a live environment."""

    async def discover(self) -> Collaborators:
        raise NotImplementedError
