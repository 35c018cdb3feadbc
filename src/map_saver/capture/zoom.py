"""
Drive the zoom level widget.

Changing zoom means opening the option menu, clicking the option whose
label matches the requested percentage, then polling until the level
display reflects it. Any failure falls back to the default zoom instead
of aborting the capture.
"""

import re

from ..config import CaptureConfig, snap_zoom
from .environment import ZoomControl
from .waiting import UITimeoutError, wait_for_ui


class ZoomChangeError(Exception):
    """Raised when a zoom option is unavailable."""
    pass


OPTION_PATTERN = re.compile(r'(\d+(?:\.\d+)?)%')


def parse_level(text: str | None) -> float | None:
    """Parse the level display text ('150') into a number."""
    try:
        return float((text or '').strip())
    except ValueError:
        return None


def parse_option(label: str) -> float | None:
    """Parse an option label ('150%') into a number."""
    match = OPTION_PATTERN.search(label or '')
    if not match:
        return None
    return float(match.group(1))


class ZoomSelector:
    """Set the zoom through a ZoomControl, with fallback."""

    def __init__(self, control: ZoomControl, config: CaptureConfig):
        self.control = control
        self.config = config

    async def current(self) -> float | None:
        return parse_level(await self.control.read_level())

    async def current_snapped(self) -> int:
        """Current zoom snapped to a supported level (fallback when unreadable)."""
        level = await self.current()
        if level is None:
            return self.config.fallback_zoom
        return snap_zoom(level, self.config.zoom_levels, self.config.fallback_zoom)

    async def set_zoom(self, zoom: int) -> bool:
        """
        Switch to `zoom`, falling back to the default zoom on failure.

        Returns:
            True if the requested zoom is now active
        """
        try:
            await self._apply(zoom)
            return True
        except (ZoomChangeError, UITimeoutError) as e:
            fallback = self.config.fallback_zoom
            print(f"[Zoom] Warning: could not set zoom to {zoom}%: {e}. Resetting to {fallback}%.", flush=True)
            if zoom != fallback:
                try:
                    await self._apply(fallback)
                except (ZoomChangeError, UITimeoutError) as e2:
                    print(f"[Zoom] Warning: could not reset zoom to {fallback}%: {e2}", flush=True)
            return False

    async def close_menu(self) -> None:
        """Close the option menu if it was left open."""
        if await self.control.is_menu_open():
            await self.control.close_menu()

    async def _apply(self, zoom: int) -> None:
        if await self.current() == zoom:
            return

        timeout = self.config.ui_wait_timeout
        interval = self.config.ui_poll_interval

        if not await self.control.is_menu_open():
            await self.control.open_menu()
            await wait_for_ui(self.control.is_menu_open, timeout, interval, "zoom menu")

        labels = await self.control.option_labels()
        target = next((label for label in labels if parse_option(label) == zoom), None)
        if target is None:
            raise ZoomChangeError(f"No {zoom}% zoom option")

        await self.control.choose(target)

        async def level_matches() -> bool:
            return await self.current() == zoom

        await wait_for_ui(level_matches, timeout, interval, f"zoom level {zoom}%")
