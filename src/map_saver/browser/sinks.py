"""Destinations for the finished map image."""

import base64
from pathlib import Path

from pyppeteer.page import Page

from ..capture.environment import Sink
from .roll20 import Roll20Selectors


class PresentationError(Exception):
    """Raised when the finished image cannot be presented."""
    pass


def to_data_url(png: bytes) -> str:
    return 'data:image/png;base64,' + base64.b64encode(png).decode('ascii')


class FileSink(Sink):
    """Write the PNG to disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    async def present(self, png: bytes) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(png)
        except OSError as e:
            raise PresentationError(f"Could not write {self.path}: {e}") from e
        print(f"[Sink] Wrote {len(png) / 1024 / 1024:.2f} MB to {self.path}", flush=True)


# Resolves with 'ok' or an error message; never rejects so the message survives.
THUMBNAIL_SCRIPT = """
(id, url) => new Promise(resolve => {
    const old = document.getElementById(id);
    if (old) old.remove();

    const img = document.createElement('img');
    img.id = id;
    Object.assign(img.style, {
        position: 'fixed', top: '1rem', left: '8rem', width: '10rem',
        zIndex: '10000000', cursor: 'pointer', border: 'solid 1px red',
    });
    img.title = 'Right click to save or open in a new tab, left click to remove';
    img.onclick = () => img.remove();
    document.body.appendChild(img);

    img.onload = () => resolve(img.height ? 'ok' : 'Image rendered with no height, the map may be too large.');
    img.onerror = () => resolve('Image failed to load, the map may be too large.');
    img.src = url;
})
"""


class PageThumbnailSink(Sink):
    """Show the result as a clickable thumbnail in the top-left of the page."""

    def __init__(self, page: Page, selectors: Roll20Selectors | None = None):
        self.page = page
        self.selectors = selectors or Roll20Selectors()

    async def present(self, png: bytes) -> None:
        element_id = self.selectors.output_image.lstrip('#')
        status = await self.page.evaluate(THUMBNAIL_SCRIPT, element_id, to_data_url(png))
        if status != 'ok':
            raise PresentationError(status)
        print("[Sink] Thumbnail shown in the top-left of the page", flush=True)


class MultiSink(Sink):
    """Present to several sinks in order; the first failure stops the rest."""

    def __init__(self, *sinks: Sink):
        self.sinks = list(sinks)

    async def present(self, png: bytes) -> None:
        for sink in self.sinks:
            await sink.present(png)
