"""Top-level render: one record in, one PDF out."""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from .config import LayoutConfig
from .images import PillowProber, default_prober
from .media import ImageResolver
from .pages import PageCursorState, ensure_page
from .results import PlacementResult, RenderError, RenderReport
from .surface import CanvasSurface
from .template import TemplateGeometry, compose_document
from .walker import ContentWalker

LOGGER = logging.getLogger(__name__)


class ReportRenderer:
    """Owns the surface and cursor state for a single render.

    Not shared between renders; build a new one per document.
    """

    def __init__(self, record, template_path: Optional[str] = None, resolver=None,
                 prober=None, layout: Optional[LayoutConfig] = None, debug: bool = False):
        self.record = record
        self.debug = debug
        self.template = TemplateGeometry.load(template_path)
        layout = layout or LayoutConfig()
        if self.template.present:
            layout = dataclasses.replace(layout, page_size=self.template.page_size)
        self.layout = layout
        self.resolver = resolver or ImageResolver()
        self.prober = prober if prober is not None else PillowProber()
        self.surface = CanvasSurface(layout.page_size, footer_font_size=layout.footer_font_size)
        self.state = PageCursorState.for_layout(layout)
        self.report = RenderReport()

    def render(self) -> RenderReport:
        walker = ContentWalker(self.state, self.surface, self.layout, self.report,
                               resolver=self.resolver, prober=self.prober)
        if self.debug:
            self._draw_debug_grid()
        try:
            walker.walk(self.record)
        except Exception as exc:
            # keep whatever was placed; the document is still finalized
            LOGGER.exception("Content walk stopped on page %d", self.state.page_index)
            self.report.record("document", PlacementResult.skipped(f"walk stopped: {exc}"))
        self.report.page_count = self.surface.page_count
        return self.report

    def _draw_debug_grid(self):
        ensure_page(self.state, self.surface)
        try:
            self.surface.draw_grid()
        except Exception as exc:
            LOGGER.warning("Debug grid not drawn: %s", exc)

    def finalize(self, out_path: str) -> RenderReport:
        try:
            overlay = self.surface.finish()
        except Exception as exc:
            raise RenderError(f"could not serialize document: {exc}") from exc
        self.report.page_count = compose_document(overlay, self.template, out_path)
        self.report.output_path = out_path
        LOGGER.info("Wrote %s (%s)", out_path, self.report.summary())
        return self.report


def render_report(record, out_path: str, *, template_path: Optional[str] = None,
                  resolver=None, prober=None, layout: Optional[LayoutConfig] = None,
                  probe: bool = True, debug: bool = False) -> RenderReport:
    """Render ``record`` to ``out_path``; only :class:`RenderError` escapes."""
    if prober is None:
        prober = default_prober(probe)
    renderer = ReportRenderer(record, template_path=template_path, resolver=resolver,
                              prober=prober, layout=layout, debug=debug)
    renderer.render()
    return renderer.finalize(out_path)
