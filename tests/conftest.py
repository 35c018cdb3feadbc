"""
In-memory Roll20 stand-ins for the capture engine.

FakeRoll20 renders a deterministic, fully opaque map at whatever zoom the
fake zoom widget shows, and returns the part visible through the viewport
on grab(). Scroll and camera positioning are both modelled, and grabs can
be made to come back unrendered (transparent) to exercise the retry path.
"""

import pytest
from PIL import Image, ImageDraw

from map_saver.capture.environment import (
    Collaborators,
    CollaboratorSource,
    EditorContainer,
    Scene,
    SidebarToggle,
    Sink,
    ZoomControl,
)
from map_saver.config import CaptureConfig, ZOOM_LEVELS


def render_map(cells_wide: int, cells_high: int, cell_size: int, scale: float) -> Image.Image:
    """Opaque map with a distinct colour per grid cell."""
    width = int(cells_wide * cell_size * scale)
    height = int(cells_high * cell_size * scale)
    img = Image.new('RGBA', (width, height), (0, 0, 0, 255))
    draw = ImageDraw.Draw(img)
    step = cell_size * scale
    for cy in range(int(cells_high) + 1):
        for cx in range(int(cells_wide) + 1):
            colour = ((cx * 37) % 256, (cy * 59) % 256, (cx * cy * 13 + 90) % 256, 255)
            draw.rectangle(
                [cx * step, cy * step, (cx + 1) * step - 1, (cy + 1) * step - 1],
                fill=colour,
            )
    return img


class FakeRoll20:
    """Shared state behind all the fake collaborators."""

    def __init__(
        self,
        cells=(4, 2),
        cell_size=70,
        viewport=(100, 60),
        zoom_text='100',
        camera=False,
        sidebar_hidden=False,
        padding=(0, 0),
        canvas_offset=(0, 0),
        blank_grabs=0,
        options=None,
        stuck_levels=(),
    ):
        self.cells = cells
        self.cell_size = cell_size
        self.viewport = viewport
        self.zoom_text = zoom_text
        self.camera = camera
        self.sidebar_hidden = sidebar_hidden
        self.padding_value = padding
        self.offset = canvas_offset
        self.blank_grabs = blank_grabs
        self.options = options if options is not None else [f"{z}%" for z in ZOOM_LEVELS]
        self.stuck_levels = set(stuck_levels)

        self.menu_open = False
        self.scroll = (0.0, 0.0)  # (top, left)
        self.camera_xy = (0.0, 0.0)
        self.extra_padding = None
        self.sidebar_toggles = 0
        self.renders = 0
        self.frames = 0
        self.zoom_history: list[str] = []
        self.grabs_by_position: dict[tuple[int, int], int] = {}
        self.fail_grab_at = None
        self._maps: dict[float, Image.Image] = {}

    @property
    def scale(self) -> float:
        return float(self.zoom_text) / 100

    def map_image(self, scale: float | None = None) -> Image.Image:
        scale = self.scale if scale is None else scale
        if scale not in self._maps:
            self._maps[scale] = render_map(self.cells[0], self.cells[1], self.cell_size, scale)
        return self._maps[scale]

    def visible_origin(self) -> tuple[int, int]:
        """Map pixel at the top-left of the viewport."""
        scale = self.scale
        vw, vh = self.viewport
        if self.camera:
            x, y = self.camera_xy
            ox = (x - vw / scale / 2) * scale
            oy = -(y + vh / scale / 2) * scale
        else:
            top, left = self.scroll
            ox = left - self.padding_value[1] * scale
            oy = top - self.padding_value[0] * scale
        return (round(ox), round(oy))

    def grab(self) -> Image.Image:
        ox, oy = self.visible_origin()
        if self.fail_grab_at == (ox, oy):
            raise RuntimeError("canvas lost")

        seen = self.grabs_by_position.get((ox, oy), 0)
        self.grabs_by_position[(ox, oy)] = seen + 1
        vw, vh = self.viewport
        if seen < self.blank_grabs:
            return Image.new('RGBA', (vw, vh), (0, 0, 0, 0))
        return self.map_image().crop((ox, oy, ox + vw, oy + vh))


class FakeScene(Scene):
    def __init__(self, world: FakeRoll20):
        self.world = world

    async def page_size(self):
        return self.world.cells

    async def canvas_size(self):
        return self.world.viewport

    async def canvas_offset(self):
        return self.world.offset

    async def has_camera(self):
        return self.world.camera

    async def set_camera_position(self, x, y):
        self.world.camera_xy = (x, y)

    async def render(self):
        self.world.renders += 1

    async def grab(self):
        self.world.frames += 1
        return self.world.grab()

    async def next_frame(self):
        self.world.frames += 1


class FakeZoomControl(ZoomControl):
    def __init__(self, world: FakeRoll20):
        self.world = world

    async def read_level(self):
        return self.world.zoom_text

    async def is_menu_open(self):
        return self.world.menu_open

    async def open_menu(self):
        self.world.menu_open = True

    async def option_labels(self):
        return list(self.world.options) if self.world.menu_open else []

    async def choose(self, label):
        level = label.rstrip('%')
        if level not in self.world.stuck_levels:
            self.world.zoom_text = level
            self.world.zoom_history.append(level)

    async def close_menu(self):
        self.world.menu_open = False


class FakeEditor(EditorContainer):
    def __init__(self, world: FakeRoll20):
        self.world = world

    async def padding(self):
        return self.world.padding_value

    async def set_scroll(self, top, left):
        self.world.scroll = (top, left)

    async def set_extra_padding(self, right, bottom):
        self.world.extra_padding = (right, bottom)

    async def clear_extra_padding(self):
        self.world.extra_padding = None


class FakeSidebar(SidebarToggle):
    def __init__(self, world: FakeRoll20):
        self.world = world

    async def is_hidden(self):
        return self.world.sidebar_hidden

    async def toggle(self):
        self.world.sidebar_hidden = not self.world.sidebar_hidden
        self.world.sidebar_toggles += 1


class FakeSource(CollaboratorSource):
    def __init__(self, world: FakeRoll20, missing=()):
        self.world = world
        self.missing = set(missing)

    async def discover(self):
        found = Collaborators(
            scene=FakeScene(self.world),
            zoom=FakeZoomControl(self.world),
            editor=FakeEditor(self.world),
            sidebar=FakeSidebar(self.world),
        )
        for name in self.missing:
            setattr(found, name, None)
        return found


class RecordingSink(Sink):
    def __init__(self, fail=False):
        self.fail = fail
        self.images: list[bytes] = []

    async def present(self, png):
        if self.fail:
            raise RuntimeError("image failed to load")
        self.images.append(png)


@pytest.fixture
def world():
    """Default 4x2 cell map seen through a 100x60 viewport."""
    return FakeRoll20()


@pytest.fixture
def fast_config():
    """Config factory with no real waiting."""
    def make(zoom=100, **overrides):
        options = dict(ui_wait_timeout=0.01, ui_poll_interval=0, sidebar_settle=0, frame_retries=3)
        options.update(overrides)
        return CaptureConfig.for_zoom(zoom, **options)
    return make
