"""
Tests for the zoom widget driver.
"""

import asyncio

import pytest

from map_saver.capture.waiting import UITimeoutError, wait_for_ui
from map_saver.capture.zoom import ZoomSelector, parse_level, parse_option

from conftest import FakeRoll20, FakeZoomControl


def test_parse_level():
    """Level display text parses to a number."""
    assert parse_level('150') == 150
    assert parse_level(' 75 ') == 75
    assert parse_level('') is None
    assert parse_level(None) is None
    assert parse_level('abc') is None


def test_parse_option():
    """Option labels carry a percentage."""
    assert parse_option('150%') == 150
    assert parse_option('Zoom 50%') == 50
    assert parse_option('Fit') is None


def test_set_zoom(fast_config):
    """Open the menu, click the matching option, confirm the level."""
    world = FakeRoll20(zoom_text='100')
    selector = ZoomSelector(FakeZoomControl(world), fast_config())

    changed = asyncio.run(selector.set_zoom(150))

    assert changed is True
    assert world.zoom_text == '150'
    assert world.zoom_history == ['150']


def test_set_zoom_already_active(fast_config):
    """No interaction when the level already matches."""
    world = FakeRoll20(zoom_text='150')
    selector = ZoomSelector(FakeZoomControl(world), fast_config())

    assert asyncio.run(selector.set_zoom(150)) is True
    assert world.zoom_history == []
    assert world.menu_open is False


def test_missing_option_falls_back(fast_config, capsys):
    """An unavailable option resets to the default zoom, no exception."""
    world = FakeRoll20(zoom_text='50', options=['10%', '50%', '100%'])
    selector = ZoomSelector(FakeZoomControl(world), fast_config())

    changed = asyncio.run(selector.set_zoom(150))

    assert changed is False
    assert world.zoom_text == '100'
    assert "could not set zoom to 150%" in capsys.readouterr().out


def test_unresponsive_level_times_out_then_falls_back(fast_config, capsys):
    """A level that never updates is a UI timeout, then fallback."""
    world = FakeRoll20(zoom_text='50', stuck_levels={'200'})
    selector = ZoomSelector(FakeZoomControl(world), fast_config())

    changed = asyncio.run(selector.set_zoom(200))

    assert changed is False
    assert world.zoom_text == '100'
    assert "Timed out" in capsys.readouterr().out


def test_fallback_failure_is_reported(fast_config, capsys):
    """If the default zoom cannot be set either, warn and carry on."""
    world = FakeRoll20(zoom_text='50', options=['50%'])
    selector = ZoomSelector(FakeZoomControl(world), fast_config())

    changed = asyncio.run(selector.set_zoom(150))

    assert changed is False
    assert world.zoom_text == '50'
    assert "could not reset zoom to 100%" in capsys.readouterr().out


def test_current_snapped(fast_config):
    """Original zoom is read and snapped to a supported level."""
    world = FakeRoll20(zoom_text='120')
    selector = ZoomSelector(FakeZoomControl(world), fast_config())

    assert asyncio.run(selector.current_snapped()) == 150

    world.zoom_text = ''
    assert asyncio.run(selector.current_snapped()) == 100


def test_close_menu(fast_config):
    """The menu is closed only if it is open."""
    world = FakeRoll20()
    selector = ZoomSelector(FakeZoomControl(world), fast_config())
    world.menu_open = True

    asyncio.run(selector.close_menu())

    assert world.menu_open is False


def test_wait_for_ui_times_out():
    """Polling gives up after the timeout."""
    async def never():
        return False

    with pytest.raises(UITimeoutError):
        asyncio.run(wait_for_ui(never, timeout=0.01, interval=0))


def test_wait_for_ui_returns_when_ready():
    """Polling stops as soon as the condition holds."""
    calls = []

    async def third_time():
        calls.append(1)
        return len(calls) >= 3

    asyncio.run(wait_for_ui(third_time, timeout=1.0, interval=0))

    assert len(calls) == 3
