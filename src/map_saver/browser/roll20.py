"""
Roll20 collaborators driven over Chrome DevTools using Pyppeteer.

The capture engine only talks to the interfaces in
`map_saver.capture.environment`. This module implements them for an open
Roll20 game tab:

1. The classic editor is positioned by scrolling #editor-wrapper
2. The Jump Gate engine is positioned through its camera transform
3. Pixels are read back from the map canvas with toDataURL so alpha survives
"""

import base64
import io
from dataclasses import dataclass
from typing import Optional

from PIL import Image
from pyppeteer import connect, launch
from pyppeteer.browser import Browser
from pyppeteer.page import Page

from ..capture.environment import (
    Collaborators,
    CollaboratorSource,
    EditorContainer,
    Scene,
    SidebarToggle,
    ZoomControl,
)
from ..capture.zoom import ZoomChangeError


@dataclass(frozen=True)
class Roll20Selectors:
    """CSS selectors for the Roll20 page elements."""
    editor_wrapper: str = '#editor-wrapper'
    editor: str = '#editor'
    canvas: str = '#babylonCanvas'
    zoom_level: str = '#vm_zoom_buttons .level'
    sidebar_toggle: str = '#sidebarcontrol'
    sidebar_hidden: str = 'body.sidebarhidden #rightsidebar'
    zoom_menu_buttons: str = '.zoomDubMenuBtnStyle .el-button'
    output_image: str = '#roll20-map-save'


ROLL20_EDITOR_URL = 'roll20.net/editor'


# Page-side snippets, called with page.evaluate(script, *args)

PAGE_SIZE_SCRIPT = """
() => {
    const page = window.Campaign.activePage();
    return [page.get('width'), page.get('height')];
}
"""

CANVAS_SIZE_SCRIPT = """
(selector) => {
    const canvas = document.querySelector(selector);
    return [canvas.width, canvas.height];
}
"""

CANVAS_OFFSET_SCRIPT = """
(selector) => {
    const parent = document.querySelector(selector).parentElement;
    return [parent.offsetLeft, parent.offsetTop];
}
"""

HAS_ENGINE_SCRIPT = """
() => !!(window.Campaign && window.Campaign.view && window.Campaign.view.model
         && window.Campaign.view.model.engine)
"""

SET_CAMERA_SCRIPT = """
(x, y) => {
    const engine = window.Campaign.view.model.engine;
    engine.cameraTransform.position.x = x;
    engine.cameraTransform.position.y = y;
}
"""

RENDER_SCRIPT = "() => { window.Campaign.view.render(); }"

# Read inside the frame callback: a WebGL canvas without preserveDrawingBuffer
# is cleared once the frame has been composited.
GRAB_SCRIPT = """
(selector) => new Promise(resolve => requestAnimationFrame(
    () => resolve(document.querySelector(selector).toDataURL('image/png'))
))
"""

NEXT_FRAME_SCRIPT = """
() => new Promise(resolve => requestAnimationFrame(() => resolve()))
"""

TEXT_SCRIPT = """
(selector) => {
    const el = document.querySelector(selector);
    return el ? el.textContent : null;
}
"""

COUNT_SCRIPT = "(selector) => document.querySelectorAll(selector).length"

CLICK_SCRIPT = """
(selector) => {
    const el = document.querySelector(selector);
    if (!el) return false;
    el.click();
    return true;
}
"""

LABELS_SCRIPT = """
(selector) => Array.from(document.querySelectorAll(selector)).map(b => b.textContent)
"""

CHOOSE_SCRIPT = """
(selector, label) => {
    const button = Array.from(document.querySelectorAll(selector))
        .find(b => b.textContent === label);
    if (!button) return false;
    button.click();
    return true;
}
"""

PADDING_SCRIPT = """
(selector) => {
    const style = getComputedStyle(document.querySelector(selector));
    return [parseInt(style.paddingTop, 10) || 0, parseInt(style.paddingLeft, 10) || 0];
}
"""

SCROLL_SCRIPT = """
(selector, top, left) => {
    const wrapper = document.querySelector(selector);
    wrapper.scrollTop = top;
    wrapper.scrollLeft = left;
}
"""

SET_PADDING_SCRIPT = """
(selector, right, bottom) => {
    const editor = document.querySelector(selector);
    editor.style.paddingRight = right === null ? null : right + 'px';
    editor.style.paddingBottom = bottom === null ? null : bottom + 'px';
}
"""


def decode_data_url(data_url: str) -> Image.Image:
    """Decode a base64 image data URL into an RGBA image."""
    if not data_url or ',' not in data_url:
        raise ValueError("Canvas returned an empty data URL")
    header, payload = data_url.split(',', 1)
    if ';base64' not in header:
        raise ValueError(f"Unsupported data URL: {header}")
    with Image.open(io.BytesIO(base64.b64decode(payload))) as img:
        img.load()
        return img.convert('RGBA')


async def _click(page: Page, selector: str) -> None:
    if not await page.evaluate(CLICK_SCRIPT, selector):
        raise RuntimeError(f"Element not found: {selector}")


class Roll20Scene(Scene):
    """The map canvas and the Roll20 campaign view."""

    def __init__(self, page: Page, selectors: Roll20Selectors):
        self.page = page
        self.selectors = selectors

    async def page_size(self) -> tuple[float, float]:
        width, height = await self.page.evaluate(PAGE_SIZE_SCRIPT)
        return (float(width), float(height))

    async def canvas_size(self) -> tuple[int, int]:
        width, height = await self.page.evaluate(CANVAS_SIZE_SCRIPT, self.selectors.canvas)
        return (int(width), int(height))

    async def canvas_offset(self) -> tuple[float, float]:
        left, top = await self.page.evaluate(CANVAS_OFFSET_SCRIPT, self.selectors.canvas)
        return (float(left), float(top))

    async def has_camera(self) -> bool:
        return bool(await self.page.evaluate(HAS_ENGINE_SCRIPT))

    async def set_camera_position(self, x: float, y: float) -> None:
        await self.page.evaluate(SET_CAMERA_SCRIPT, x, y)

    async def render(self) -> None:
        await self.page.evaluate(RENDER_SCRIPT)

    async def grab(self) -> Image.Image:
        data_url = await self.page.evaluate(GRAB_SCRIPT, self.selectors.canvas)
        return decode_data_url(data_url)

    async def next_frame(self) -> None:
        await self.page.evaluate(NEXT_FRAME_SCRIPT)


class Roll20ZoomControl(ZoomControl):
    """The zoom level display and its drop-down menu."""

    def __init__(self, page: Page, selectors: Roll20Selectors):
        self.page = page
        self.selectors = selectors

    async def read_level(self) -> str:
        return await self.page.evaluate(TEXT_SCRIPT, self.selectors.zoom_level) or ''

    async def is_menu_open(self) -> bool:
        return await self.page.evaluate(COUNT_SCRIPT, self.selectors.zoom_menu_buttons) > 0

    async def open_menu(self) -> None:
        await _click(self.page, self.selectors.zoom_level)

    async def option_labels(self) -> list[str]:
        return await self.page.evaluate(LABELS_SCRIPT, self.selectors.zoom_menu_buttons)

    async def choose(self, label: str) -> None:
        if not await self.page.evaluate(CHOOSE_SCRIPT, self.selectors.zoom_menu_buttons, label):
            raise ZoomChangeError(f"Zoom option {label!r} disappeared")

    async def close_menu(self) -> None:
        # The level display toggles the menu.
        await _click(self.page, self.selectors.zoom_level)


class Roll20Editor(EditorContainer):
    """#editor (padding) inside the scrollable #editor-wrapper."""

    def __init__(self, page: Page, selectors: Roll20Selectors):
        self.page = page
        self.selectors = selectors

    async def padding(self) -> tuple[float, float]:
        top, left = await self.page.evaluate(PADDING_SCRIPT, self.selectors.editor)
        return (float(top), float(left))

    async def set_scroll(self, top: float, left: float) -> None:
        await self.page.evaluate(SCROLL_SCRIPT, self.selectors.editor_wrapper, top, left)

    async def set_extra_padding(self, right: float, bottom: float) -> None:
        await self.page.evaluate(SET_PADDING_SCRIPT, self.selectors.editor, right, bottom)

    async def clear_extra_padding(self) -> None:
        await self.page.evaluate(SET_PADDING_SCRIPT, self.selectors.editor, None, None)


class Roll20Sidebar(SidebarToggle):
    """The right sidebar show/hide control."""

    def __init__(self, page: Page, selectors: Roll20Selectors):
        self.page = page
        self.selectors = selectors

    async def is_hidden(self) -> bool:
        return await self.page.evaluate(COUNT_SCRIPT, self.selectors.sidebar_hidden) > 0

    async def toggle(self) -> None:
        await _click(self.page, self.selectors.sidebar_toggle)


class Roll20Page(CollaboratorSource):
    """Find the Roll20 collaborators on a page."""

    def __init__(self, page: Page, selectors: Roll20Selectors | None = None):
        self.page = page
        self.selectors = selectors or Roll20Selectors()

    async def _exists(self, selector: str) -> bool:
        return await self.page.querySelector(selector) is not None

    async def discover(self) -> Collaborators:
        s = self.selectors
        found = {
            name: await self._exists(selector)
            for name, selector in (
                ('zoom_level', s.zoom_level),
                ('editor_wrapper', s.editor_wrapper),
                ('editor', s.editor),
                ('canvas', s.canvas),
                ('sidebar_toggle', s.sidebar_toggle),
            )
        }
        print(f"[Roll20] Elements found: {found}", flush=True)

        return Collaborators(
            scene=Roll20Scene(self.page, s) if found['canvas'] else None,
            zoom=Roll20ZoomControl(self.page, s) if found['zoom_level'] else None,
            editor=Roll20Editor(self.page, s) if found['editor'] and found['editor_wrapper'] else None,
            sidebar=Roll20Sidebar(self.page, s) if found['sidebar_toggle'] else None,
        )


async def connect_browser(browser_url: str = 'http://127.0.0.1:9222') -> Browser:
    """Attach to a Chrome started with --remote-debugging-port."""
    print(f"[Roll20] Connecting to browser at {browser_url}...", flush=True)
    return await connect(browserURL=browser_url, defaultViewport=None)


async def launch_browser(headless: bool = False, executable_path: Optional[str] = None) -> Browser:
    """Start a browser for capturing. Roll20 needs a logged-in, visible session."""
    print(f"[Roll20] Launching browser (headless={headless})...", flush=True)
    options = dict(
        headless=headless,
        defaultViewport=None,
        args=[
            '--no-sandbox',
            '--disable-setuid-sandbox',
            '--disable-dev-shm-usage',
        ],
        handleSIGINT=False,
        handleSIGTERM=False,
        handleSIGHUP=False,
    )
    if executable_path:
        options['executablePath'] = executable_path
    return await launch(**options)


async def find_roll20_page(browser: Browser, url: Optional[str] = None, timeout: float = 60.0) -> Page:
    """
    Return the open Roll20 game tab, navigating a tab to `url` if given.

    Raises:
        LookupError: no Roll20 editor tab is open and no url was given
    """
    pages = await browser.pages()
    for page in pages:
        if ROLL20_EDITOR_URL in (page.url or ''):
            print(f"[Roll20] Using open tab: {page.url}", flush=True)
            return page

    if not url:
        raise LookupError("No open Roll20 game tab found. Open the game or pass --url.")

    page = pages[0] if pages else await browser.newPage()
    print(f"[Roll20] Navigating to {url}...", flush=True)
    await page.goto(url, {
        'waitUntil': 'networkidle2',
        'timeout': int(timeout * 1000),
    })
    return page
