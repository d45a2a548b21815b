"""Pages shown on the clock and the controller that rotates them."""

from .base import FIXED_PAGES, Page, PageKind
from .controller import PageController
from .formatting import format_duration, format_short_duration

__all__ = [
    "FIXED_PAGES",
    "Page",
    "PageKind",
    "PageController",
    "format_duration",
    "format_short_duration",
]
