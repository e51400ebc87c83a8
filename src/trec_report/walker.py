"""Walks a :class:`ReportRecord` in visual order and drives the renderers."""

from __future__ import annotations

import logging
from xml.sax.saxutils import unescape

from .config import (
    BODY_START_PAGE, COMMENT_SPACING, LINE_ITEM_SPACING, SECTION_SPACING,
    TEXT_SPACING, TITLE_SPACING,
)
from .fields import render_header_fields
from .images import CONTENT, HEADER, place_image
from .pages import ensure_page, ensure_space, move_cursor, new_page
from .results import PlacementResult
from .text_flow import place_paragraph

LOGGER = logging.getLogger(__name__)

ENTITIES = {"&quot;": '"', "&apos;": "'", "&#39;": "'"}


def decode_entities(text):
    """Undo the HTML escaping applied to comment text upstream."""
    if not text:
        return text
    return unescape(text, ENTITIES)


def section_title(section):
    if not section.name:
        return None
    if section.section_number:
        return f"{section.section_number}. {section.name}"
    return section.name


def line_item_title(section, item):
    if not item.name:
        return None
    if section.section_number and item.line_item_number:
        return f"{section.section_number}.{item.line_item_number} {item.name}"
    return item.name


def comment_title(comment):
    if not comment.label:
        return None
    if comment.comment_number:
        return f"{comment.comment_number} {comment.label}"
    return comment.label


class ContentWalker:
    def __init__(self, state, surface, layout, report, resolver=None, prober=None):
        self.state = state
        self.surface = surface
        self.layout = layout
        self.report = report
        self.resolver = resolver or (lambda ref: ref)
        self.prober = prober

    def walk(self, record):
        """Header page, reserved static page, then the body from page 3 on."""
        ensure_page(self.state, self.surface)
        render_header_fields(self.state, self.surface, record, self.report)
        if record.header_image_url:
            self._image("header.image", record.header_image_url, HEADER)

        while self.state.page_index < BODY_START_PAGE:
            if not new_page(self.state, self.surface).placed:
                LOGGER.warning("Could not reach body page, continuing on page %d",
                               self.state.page_index)
                break

        for s_idx, section in enumerate(record.sections, start=1):
            self._section(section, f"section[{s_idx}]")

    # ---------- tree levels ----------
    def _section(self, section, path):
        layout = self.layout
        ensure_space(self.state, self.surface, layout.section_min_space)
        self._text(f"{path}.title", section_title(section),
                   layout.section_font_size, "bold", TITLE_SPACING)
        for i_idx, item in enumerate(section.line_items, start=1):
            self._line_item(section, item, f"{path}.item[{i_idx}]")
        self._space(SECTION_SPACING)

    def _line_item(self, section, item, path):
        layout = self.layout
        ensure_space(self.state, self.surface, layout.line_item_min_space)
        self._text(f"{path}.title", line_item_title(section, item),
                   layout.item_font_size, "bold", TITLE_SPACING)
        for c_idx, comment in enumerate(item.comments, start=1):
            self._comment(comment, f"{path}.comment[{c_idx}]")
        self._space(LINE_ITEM_SPACING)

    def _comment(self, comment, path):
        layout = self.layout
        ensure_space(self.state, self.surface, layout.comment_min_space)
        self._text(f"{path}.label", comment_title(comment),
                   layout.label_font_size, "italic", TITLE_SPACING)
        self._text(f"{path}.text", decode_entities(comment.text),
                   layout.font_size, "normal", TEXT_SPACING)
        for p_idx, photo in enumerate(comment.photos, start=1):
            self._image(f"{path}.photo[{p_idx}]", photo, CONTENT)
        for v_idx, url in enumerate(comment.videos, start=1):
            self._text(f"{path}.video[{v_idx}]", f"Video: {url}",
                       layout.font_size, "normal", TEXT_SPACING)
        self._space(COMMENT_SPACING)

    # ---------- leaves ----------
    def _text(self, element, text, size, style, spacing):
        if not text:
            return None
        return self.report.record(element, place_paragraph(
            self.state, self.surface, self.layout, text, size, style, spacing))

    def _image(self, element, ref, kind):
        path = self.resolver(ref)
        if not path:
            LOGGER.info("Image %s unresolved, skipping", ref)
            return self.report.record(element, PlacementResult.skipped(f"unresolved: {ref}"))
        return self.report.record(element, place_image(
            self.state, self.surface, self.layout, path, kind, self.prober))

    def _space(self, points):
        move_cursor(self.state, self.state.cursor - points)
