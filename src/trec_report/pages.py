"""Page and cursor state shared by every renderer during one render.

``cursor`` is a canvas y coordinate (bottom-left origin). It always lies
between the bottom margin and the top of the content area; anything that
would go lower must call :func:`new_page` first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .results import PlacementResult

LOGGER = logging.getLogger(__name__)


@dataclass
class PageCursorState:
    page_width: float
    page_height: float
    left_margin: float
    right_margin: float
    top_margin: float
    bottom_margin: float
    page_index: int = 0
    cursor: float = 0.0

    @classmethod
    def for_layout(cls, layout) -> "PageCursorState":
        w, h = layout.page_size
        m = layout.margins
        state = cls(w, h, m["left"], m["right"], m["top"], m["bottom"])
        state.cursor = state.content_top
        return state

    @property
    def content_top(self) -> float:
        return self.page_height - self.top_margin

    @property
    def content_width(self) -> float:
        return self.page_width - self.left_margin - self.right_margin

    @property
    def remaining(self) -> float:
        return self.cursor - self.bottom_margin

    @property
    def at_top(self) -> bool:
        return self.cursor >= self.content_top


def current_page(state: PageCursorState) -> int:
    return state.page_index


def to_drawing_y(state: PageCursorState, top_offset: float) -> float:
    """Convert an offset from the page's top edge into a canvas y."""
    return state.page_height - top_offset


def move_cursor(state: PageCursorState, y: float) -> float:
    state.cursor = max(state.bottom_margin, min(y, state.content_top))
    return state.cursor


def cursor(state: PageCursorState) -> float:
    return state.cursor


def ensure_page(state: PageCursorState, surface) -> PlacementResult:
    """Make sure page 1 is active. The canvas always opens with one page."""
    if state.page_index >= 1:
        return PlacementResult.ok()
    try:
        state.page_index = max(surface.page_count, 1)
        state.cursor = state.content_top
        return PlacementResult.ok()
    except Exception as exc:
        LOGGER.warning("Could not activate first page: %s", exc)
        state.page_index = 1
        return PlacementResult.degraded(f"first page: {exc}")


def new_page(state: PageCursorState, surface) -> PlacementResult:
    """Append a page and reset the cursor to the top of the content area."""
    if state.page_index < 1:
        ensure_page(state, surface)
    try:
        surface.new_page()
    except Exception as exc:
        LOGGER.warning("New page failed on page %d: %s", state.page_index, exc)
        return PlacementResult.skipped(f"new page: {exc}")
    state.page_index += 1
    state.cursor = state.content_top
    LOGGER.debug("Started page %d", state.page_index)
    return PlacementResult.ok()


def ensure_space(state: PageCursorState, surface, needed: float) -> bool:
    """Start a new page when fewer than ``needed`` points remain. True if it did."""
    if state.remaining < needed and not state.at_top:
        return new_page(state, surface).placed
    return False
