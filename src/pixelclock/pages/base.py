"""Page identities.

A page is a kind plus, for area pages, the area it shows. The controller
switches on ``kind`` to pick the drawing routine.
"""

from dataclasses import dataclass
from enum import Enum


class PageKind(Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    DAYLIGHT = "daylight"
    COUNTDOWN = "countdown"
    DIAGNOSTICS = "diagnostics"
    AREA = "area"


@dataclass(frozen=True)
class Page:
    """One entry in the rotation.

    Attributes:
        kind: Which drawing routine to use
        area: Area name, set only for AREA pages
    """

    kind: PageKind
    area: str | None = None

    def __post_init__(self) -> None:
        if (self.kind is PageKind.AREA) != (self.area is not None):
            raise ValueError("area is required for AREA pages and only for them")

    @property
    def title(self) -> str:
        """Short label for logs."""
        return self.area if self.area is not None else self.kind.value


FIXED_PAGES = (
    Page(PageKind.TODAY),
    Page(PageKind.TOMORROW),
    Page(PageKind.DAYLIGHT),
    Page(PageKind.COUNTDOWN),
    Page(PageKind.DIAGNOSTICS),
)
