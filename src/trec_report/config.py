"""Layout constants for the TREC report renderer.

Coordinates are in PDF points. Header positions are top offsets measured
from the top edge of the page; everything else in the engine uses the
canvas' bottom-left origin.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from reportlab.lib.pagesizes import LETTER
from reportlab.lib.units import inch

# ====== CONFIG (paths) ======
TEMPLATE_PDF = os.environ.get("TREC_TEMPLATE_PDF", "storage/TREC_Template_Blank.pdf")
MEDIA_DIR    = os.environ.get("TREC_MEDIA_CACHE", "storage/images")
IMAGE_SEARCH_DIRS = ("storage/images", "data/_media_cache", "images")

HTTP_TIMEOUT = (15, 30)  # connect, read
USER_AGENT   = "trec-report-media/1.0"

# Template pages used as backgrounds: header page + reserved static page
TEMPLATE_FRONT_PAGES = 2
BODY_START_PAGE      = 3

PAGE_SIZE = LETTER
MARGINS   = dict(left=0.75*inch, right=0.75*inch, top=1.0*inch, bottom=0.85*inch)

# One face everywhere; styles select the variant
FONT_FACES = {
    "normal":      "Helvetica",
    "bold":        "Helvetica-Bold",
    "italic":      "Helvetica-Oblique",
    "bold_italic": "Helvetica-BoldOblique",
}
FONT_SIZE          = 10
SECTION_FONT_SIZE  = 13
ITEM_FONT_SIZE     = 11
LABEL_FONT_SIZE    = 10
FOOTER_FONT_SIZE   = 9
MIN_FONT_SIZE      = 8     # body text is never stepped below this
LEADING_RATIO      = 1.2
FIELD_HEIGHT_RATIO = 1.6

PLACEHOLDER = "Data not found in test data"

# ---- Header block (page 1), top offsets ----
HEADER_LEFT_X   = 1.25*inch
HEADER_RIGHT_X  = 4.75*inch
HEADER_LEFT_W   = 3.30*inch
HEADER_RIGHT_W  = 2.60*inch
HEADER_ROWS     = (1.85*inch, 2.40*inch, 2.95*inch, 3.50*inch)
REPORT_ID_TOP   = 4.05*inch
HEADER_FIELD_SIZE = 10

# Header image sits below the field rows, independent of the body cursor
HEADER_IMAGE_TOP        = 4.45*inch
HEADER_IMAGE_MAX_HEIGHT = 150

# Coordinate grid drawn over page 1 with --debug, for tuning header positions
DEBUG_GRID_STEP = 72

# ---- Flowing body ----
MIN_USABLE_HEIGHT   = 50    # below this a paragraph starts a new page
MAX_TEXT_BOX_HEIGHT = 600   # one paragraph never claims more than this
SECTION_MIN_SPACE   = 100
LINE_ITEM_MIN_SPACE = 120
COMMENT_MIN_SPACE   = 90

SECTION_SPACING   = 10
LINE_ITEM_SPACING = 8
COMMENT_SPACING   = 6
TITLE_SPACING     = 4
TEXT_SPACING      = 4

# ---- Body images ----
IMAGE_MAX_WIDTH      = 5.0*inch
IMAGE_MAX_HEIGHT     = 4.0*inch
MIN_IMAGE_HEIGHT     = 100
IMAGE_SAFETY_MARGIN  = 10
IMAGE_SPACING_BEFORE = 6
IMAGE_SPACING_AFTER  = 10
IMAGE_MIN_OFFSET     = 5     # cursor never rests closer than this to the bottom margin
FALLBACK_ASPECT      = 4.0 / 3.0
IMAGE_EXTENSIONS     = (".jpg", ".jpeg", ".png", ".gif")


@dataclass(frozen=True)
class LayoutConfig:
    """Geometry and pagination thresholds for one render."""

    page_size: tuple = PAGE_SIZE
    margins: dict = field(default_factory=lambda: dict(MARGINS))
    font_size: float = FONT_SIZE
    section_font_size: float = SECTION_FONT_SIZE
    item_font_size: float = ITEM_FONT_SIZE
    label_font_size: float = LABEL_FONT_SIZE
    footer_font_size: float = FOOTER_FONT_SIZE
    min_font_size: float = MIN_FONT_SIZE
    min_usable_height: float = MIN_USABLE_HEIGHT
    max_text_box_height: float = MAX_TEXT_BOX_HEIGHT
    section_min_space: float = SECTION_MIN_SPACE
    line_item_min_space: float = LINE_ITEM_MIN_SPACE
    comment_min_space: float = COMMENT_MIN_SPACE
    image_max_width: float = IMAGE_MAX_WIDTH
    image_max_height: float = IMAGE_MAX_HEIGHT
    min_image_height: float = MIN_IMAGE_HEIGHT
    image_safety_margin: float = IMAGE_SAFETY_MARGIN
    header_image_max_height: float = HEADER_IMAGE_MAX_HEIGHT

    @property
    def content_width(self) -> float:
        return self.page_size[0] - self.margins["left"] - self.margins["right"]
