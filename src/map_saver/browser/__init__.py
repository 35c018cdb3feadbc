"""Roll20 page collaborators and presentation sinks (requires pyppeteer)."""

from .roll20 import (
    Roll20Page,
    Roll20Selectors,
    connect_browser,
    launch_browser,
    find_roll20_page,
    decode_data_url,
)
from .sinks import FileSink, PageThumbnailSink, MultiSink, PresentationError, to_data_url

__all__ = [
    'Roll20Page',
    'Roll20Selectors',
    'connect_browser',
    'launch_browser',
    'find_roll20_page',
    'decode_data_url',
    'FileSink',
    'PageThumbnailSink',
    'MultiSink',
    'PresentationError',
    'to_data_url',
]
