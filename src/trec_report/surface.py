"""ReportLab drawing surface used by the layout engine.

The engine only talks to :class:`CanvasSurface`; it never touches the
canvas directly. Pages are buffered by :class:`NumberedCanvas` so the
"Page N of T" footer can be stamped once the total is known.
"""

from __future__ import annotations

import io
import re
from xml.sax.saxutils import escape as xml_escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as rl_canvas
from reportlab.platypus import KeepInFrame, Paragraph

from .config import DEBUG_GRID_STEP, FONT_FACES, FOOTER_FONT_SIZE, LEADING_RATIO, PAGE_SIZE

ALIGNMENTS = {"left": TA_LEFT, "center": TA_CENTER, "right": TA_RIGHT}

# tall enough that a measurement never gets cut short
_MEASURE_HEIGHT = 1e7


def font_face(style: str) -> str:
    return FONT_FACES.get(style or "normal", FONT_FACES["normal"])


def to_markup(text: str) -> str:
    """Escape plain text for Paragraph, keeping newlines and runs of spaces."""
    s = (text or "").replace("\t", "    ")
    s = xml_escape(s)
    s = re.sub(r" {2,}", lambda m: " " + "&nbsp;" * (len(m.group(0)) - 1), s)
    s = s.replace("\r\n", "\n").replace("\n", "<br/>")
    return s


class NumberedCanvas(rl_canvas.Canvas):
    def __init__(self, *args, font_name="Helvetica", font_size=FOOTER_FONT_SIZE,
                 footer_y=24, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self.font_name = font_name
        self.font_size = font_size
        self.footer_y = footer_y

    def showPage(self):
        # Save the current page state, but DO NOT emit the page here.
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_number(total)
            rl_canvas.Canvas.showPage(self)  # emit the numbered page once
        rl_canvas.Canvas.save(self)

    def draw_page_number(self, page_count):
        label = f"Page {self._pageNumber} of {page_count}"
        w, _ = self._pagesize
        tw = pdfmetrics.stringWidth(label, self.font_name, self.font_size)
        self.setFont(self.font_name, self.font_size)
        self.drawString((w - tw) / 2.0, self.footer_y, label)


class CanvasSurface:
    """Text measurement, text/image placement and page creation over one canvas."""

    def __init__(self, page_size=PAGE_SIZE, footer_font_size=FOOTER_FONT_SIZE, footer_y=24):
        self.page_size = tuple(page_size)
        self._buffer = io.BytesIO()
        self.canvas = NumberedCanvas(
            self._buffer,
            pagesize=self.page_size,
            invariant=1,
            font_size=footer_font_size,
            footer_y=footer_y,
        )
        self._pages = 1
        self._finished = False

    @property
    def page_count(self) -> int:
        return self._pages

    def new_page(self):
        self.canvas.showPage()
        self._pages += 1

    # ---------- measurement ----------
    def string_width(self, text: str, font_size: float, style: str = "normal") -> float:
        return pdfmetrics.stringWidth(text, font_face(style), font_size)

    def _paragraph(self, text, font_size, style, align):
        pstyle = ParagraphStyle(
            f"flow-{style}-{font_size}",
            fontName=font_face(style),
            fontSize=font_size,
            leading=font_size * LEADING_RATIO,
            alignment=ALIGNMENTS.get(align, TA_LEFT),
            allowWidows=1,
            allowOrphans=1,
        )
        return Paragraph(to_markup(text), pstyle)

    def measure_paragraph(self, text: str, width: float, font_size: float,
                          style: str = "normal") -> float:
        _, h = self._paragraph(text, font_size, style, "left").wrap(width, _MEASURE_HEIGHT)
        return h

    def paragraph(self, text: str, font_size: float, style: str = "normal"):
        """A left-aligned paragraph for :meth:`draw_part`."""
        return self._paragraph(text, font_size, style, "left")

    # ---------- placement ----------
    def draw_part(self, part, x, top_y, width, height):
        """Draw the share of ``part`` that fits the box, top-aligned.

        Returns ``(height_used, remainder)``; the remainder is None once the
        whole paragraph is drawn, and ``part`` itself when not even one line fits.
        """
        _, h = part.wrapOn(self.canvas, width, height)
        if h <= height:
            part.drawOn(self.canvas, x, top_y - h)
            return h, None
        pieces = part.splitOn(self.canvas, width, height)
        if not pieces:
            return 0.0, part
        head = pieces[0]
        _, used = head.wrapOn(self.canvas, width, height)
        head.drawOn(self.canvas, x, top_y - used)
        return used, (pieces[1] if len(pieces) > 1 else None)

    def draw_text_box(self, x, top_y, width, height, text, font_size,
                      style="normal", align="left") -> float:
        """Place text top-aligned in a box, shrinking it if it does not fit.

        Returns the height actually used.
        """
        para = self._paragraph(text, font_size, style, align)
        box = KeepInFrame(width, height, [para], mode="shrink", hAlign="LEFT", vAlign="TOP")
        _, used = box.wrapOn(self.canvas, width, height)
        used = min(used, height)
        box.drawOn(self.canvas, x, top_y - used)
        return used

    def draw_string(self, x, y, text, font_size, style="normal"):
        self.canvas.setFont(font_face(style), font_size)
        self.canvas.drawString(x, y, text)

    def draw_image(self, path, x, y, width, height, fit=False):
        """Embed an image with its lower-left corner at (x, y).

        With ``fit`` the canvas keeps the aspect ratio inside the box and
        pins the image to the box's top-left corner.
        """
        self.canvas.drawImage(path, x, y, width=width, height=height,
                              preserveAspectRatio=fit, anchor="nw", mask="auto")

    def draw_grid(self, step: float = DEBUG_GRID_STEP, font_size: float = 6):
        """Light coordinate grid over the current page, labelled in top offsets."""
        c = self.canvas
        w, h = self.page_size
        c.saveState()
        c.setStrokeColor(colors.lightgrey)
        c.setFillColor(colors.grey)
        c.setLineWidth(0.25)
        c.setFont(font_face("normal"), font_size)
        x = 0.0
        while x <= w:
            c.line(x, 0, x, h)
            c.drawString(x + 2, h - 10, f"x{x:g}")
            x += step
        top = 0.0
        while top <= h:
            y = h - top
            c.line(0, y, w, y)
            c.drawString(2, y - 10, f"y{top:g}")
            top += step
        c.restoreState()

    def finish(self) -> bytes:
        """Close the last page, stamp page numbers and return the PDF bytes."""
        if not self._finished:
            self.canvas.showPage()
            self.canvas.save()
            self._finished = True
        return self._buffer.getvalue()
