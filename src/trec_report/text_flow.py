"""Flowing paragraphs and fixed-position fields.

Both entry points degrade instead of raising: a paragraph falls back from
the shrink-to-fit box to manual word wrapping, a field falls back from the
box to a single raw string.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from .config import FIELD_HEIGHT_RATIO, LEADING_RATIO
from .pages import PageCursorState, ensure_page, move_cursor, new_page, to_drawing_y
from .results import PlacementResult

LOGGER = logging.getLogger(__name__)


def _break_word(word: str, width: float, measure: Callable[[str], float]) -> List[str]:
    """Split a word wider than ``width`` into pieces that each fit."""
    pieces: List[str] = []
    cur = ""
    for ch in word:
        if cur and measure(cur + ch) > width:
            pieces.append(cur)
            cur = ch
        else:
            cur += ch
    pieces.append(cur)
    return pieces


def wrap_words(text: str, width: float, measure: Callable[[str], float]) -> List[str]:
    """Greedy word wrap. Explicit newlines always break; an over-long word is split by character."""
    lines: List[str] = []
    for block in (text or "").splitlines():
        words = block.split()
        if not words:
            lines.append("")
            continue
        line = ""
        for word in words:
            candidate = f"{line} {word}" if line else word
            if measure(candidate) <= width:
                line = candidate
                continue
            if line:
                lines.append(line)
            if measure(word) <= width:
                line = word
            else:
                *full, line = _break_word(word, width, measure)
                lines.extend(full)
        lines.append(line)
    # trailing blank lines add nothing but height
    while lines and not lines[-1]:
        lines.pop()
    return lines


def place_paragraph(state: PageCursorState, surface, layout, text: str, font_size: float,
                    style: str = "normal", spacing_after: float = 0.0,
                    indent: float = 0.0) -> PlacementResult:
    """Place a paragraph at the cursor and advance past it."""
    if not text or not text.strip():
        return PlacementResult.skipped("empty text")
    ensure_page(state, surface)

    x = state.left_margin + indent
    width = state.content_width - indent
    try:
        return _place_in_box(state, surface, layout, text, x, width, font_size, style, spacing_after)
    except Exception as exc:
        reason = f"box placement failed: {exc}"
        LOGGER.warning("Paragraph box failed on page %d, wrapping manually: %s",
                       state.page_index, exc)

    try:
        _place_wrapped(state, surface, text, x, width, font_size, style, spacing_after)
    except Exception as exc:
        LOGGER.error("Paragraph skipped on page %d: %s", state.page_index, exc)
        return PlacementResult.skipped(f"manual wrap failed: {exc}")
    return PlacementResult.degraded(reason)


def _fit_font_size(surface, text, width, font_size, style, available, min_size):
    """Step the font down 1pt at a time until the text fits or the floor is reached."""
    size = font_size
    needed = surface.measure_paragraph(text, width, size, style)
    while needed > available and size > min_size:
        size = max(size - 1, min_size)
        needed = surface.measure_paragraph(text, width, size, style)
    return size, needed


def _place_in_box(state, surface, layout, text, x, width, font_size, style, spacing_after):
    available = state.remaining
    if available < layout.min_usable_height:
        new_page(state, surface)
        available = state.remaining
    available = min(available, layout.max_text_box_height)

    needed = surface.measure_paragraph(text, width, font_size, style)
    if needed > available and not state.at_top:
        new_page(state, surface)
        available = min(state.remaining, layout.max_text_box_height)

    size, needed = _fit_font_size(surface, text, width, font_size, style, available,
                                  layout.min_font_size)
    if size != font_size:
        LOGGER.info("Stepped text from %gpt to %gpt on page %d", font_size, size, state.page_index)
    if needed <= available:
        used = surface.draw_text_box(x, state.cursor, width, needed, text, size, style, "left")
        move_cursor(state, state.cursor - used - spacing_after)
        return PlacementResult.ok()

    LOGGER.info("%.0fpt of text continues past page %d at %gpt", needed, state.page_index, size)
    _continue_across_pages(state, surface, layout, text, x, width, size, style)
    move_cursor(state, state.cursor - spacing_after)
    return PlacementResult.ok()


def _continue_across_pages(state, surface, layout, text, x, width, size, style):
    part = surface.paragraph(text, size, style)
    while part is not None:
        available = min(state.remaining, layout.max_text_box_height)
        used, part = surface.draw_part(part, x, state.cursor, width, available)
        move_cursor(state, state.cursor - used)
        if part is None:
            break
        if used <= 0 and state.at_top:
            raise ValueError("a single line is taller than the page")
        if not new_page(state, surface).placed:
            raise RuntimeError(f"could not continue text past page {state.page_index}")


def _place_wrapped(state, surface, text, x, width, font_size, style, spacing_after):
    line_height = font_size * LEADING_RATIO
    lines = wrap_words(text, width, lambda s: surface.string_width(s, font_size, style))
    for line in lines:
        if state.cursor - line_height < state.bottom_margin:
            new_page(state, surface)
        if line:
            surface.draw_string(x, state.cursor - font_size, line, font_size, style)
        move_cursor(state, state.cursor - line_height)
    move_cursor(state, state.cursor - spacing_after)


def place_field(state: PageCursorState, surface, x: float, top_offset: float, width: float,
                text, font_size: float, style: str = "normal",
                align: str = "left") -> PlacementResult:
    """Place a short single-line value at a fixed template position."""
    text = "" if text is None else str(text)
    if not text.strip():
        return PlacementResult.skipped("empty field")

    y = to_drawing_y(state, top_offset)
    height = font_size * FIELD_HEIGHT_RATIO
    try:
        surface.draw_text_box(x, y, width, height, text, font_size, style, align)
        return PlacementResult.ok()
    except Exception as exc:
        reason = f"box placement failed: {exc}"
        LOGGER.warning("Field box failed at (%.0f, %.0f), drawing raw: %s", x, top_offset, exc)

    try:
        surface.draw_string(x, y - font_size, text, font_size, style)
    except Exception as exc:
        LOGGER.error("Field skipped at (%.0f, %.0f): %s", x, top_offset, exc)
        return PlacementResult.skipped(f"raw draw failed: {exc}")
    return PlacementResult.degraded(reason)
