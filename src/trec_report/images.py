"""Image placement: header banner and inline body photos."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from PIL import Image

from .config import (
    FALLBACK_ASPECT, HEADER_IMAGE_TOP, IMAGE_EXTENSIONS, IMAGE_MIN_OFFSET,
    IMAGE_SPACING_AFTER, IMAGE_SPACING_BEFORE,
)
from .pages import PageCursorState, ensure_page, move_cursor, new_page, to_drawing_y
from .results import PlacementResult

LOGGER = logging.getLogger(__name__)

HEADER = "header"
CONTENT = "content"


# ----------- Dimension probing -----------
class PillowProber:
    """Reads intrinsic pixel size with Pillow."""

    available = True

    def size(self, path: str) -> Optional[Tuple[int, int]]:
        return _pillow_size(path)


class NullProber:
    """Probing unavailable: every image is placed in best-effort mode."""

    available = False

    def size(self, path: str) -> Optional[Tuple[int, int]]:
        return None


@lru_cache(maxsize=256)
def _pillow_size(path):
    """Cache image size to avoid reopening repeatedly."""
    with Image.open(path) as im:
        return im.size


def default_prober(probe: bool = True):
    return PillowProber() if probe else NullProber()


# ----------- Geometry -----------
@dataclass(frozen=True)
class ImageBox:
    width: float
    height: float
    estimated: bool = False


def fit_image(intrinsic_w: float, intrinsic_h: float, max_width: float, available: float,
              top: float, bottom_margin: float, min_offset: float = IMAGE_MIN_OFFSET) -> ImageBox:
    """Aspect-correct display size for an image whose top edge sits at ``top``.

    ``available`` is the height budget already capped at the image maximum.
    """
    aspect = intrinsic_w / intrinsic_h
    if max_width / aspect <= available:
        width, height = max_width, max_width / aspect
    else:
        height = available
        width = height * aspect

    if top - height < bottom_margin:
        height = max(top - (bottom_margin + min_offset), 1.0)
        width = height * aspect
        if width > max_width:
            width = max_width
            height = width / aspect
    return ImageBox(width, height)


def estimate_box(max_width: float, available: float) -> ImageBox:
    """Height guess for best-effort mode, where the canvas picks the real size."""
    return ImageBox(max_width, min(max_width / FALLBACK_ASPECT, available), estimated=True)


def is_placeable(path: Optional[str]) -> bool:
    if not path or not os.path.isfile(path):
        return False
    return os.path.splitext(path)[1].lower() in IMAGE_EXTENSIONS


def _probe(prober, path) -> Optional[Tuple[int, int]]:
    try:
        dims = prober.size(path)
    except Exception as exc:
        LOGGER.info("Could not read dimensions of %s: %s", path, exc)
        return None
    if not dims or dims[0] <= 0 or dims[1] <= 0:
        return None
    return dims


# ----------- Placement -----------
def place_image(state: PageCursorState, surface, layout, path: Optional[str],
                kind: str = CONTENT, prober=None) -> PlacementResult:
    if not is_placeable(path):
        return PlacementResult.skipped(f"not a usable image: {path}")
    prober = prober or NullProber()
    try:
        if kind == HEADER:
            return _place_header(state, surface, layout, path, prober)
        return _place_content(state, surface, layout, path, prober)
    except Exception as exc:
        LOGGER.warning("Image %s skipped on page %d: %s", path, state.page_index, exc)
        return PlacementResult.skipped(f"image failed: {exc}")


def _place_header(state, surface, layout, path, prober):
    top = to_drawing_y(state, HEADER_IMAGE_TOP)
    max_w = state.content_width
    max_h = layout.header_image_max_height
    dims = _probe(prober, path)
    if dims:
        box = fit_image(dims[0], dims[1], max_w, max_h, top, 0, 0)
        surface.draw_image(path, state.left_margin, top - box.height, box.width, box.height)
        return PlacementResult.ok()
    surface.draw_image(path, state.left_margin, top - max_h, max_w, max_h, fit=True)
    return PlacementResult.degraded("no dimensions, fitted to header box")


def _place_content(state, surface, layout, path, prober):
    ensure_page(state, surface)
    move_cursor(state, state.cursor - IMAGE_SPACING_BEFORE)

    available = state.cursor - state.bottom_margin - layout.image_safety_margin
    if available < layout.min_image_height:
        new_page(state, surface)
        available = state.cursor - state.bottom_margin - layout.image_safety_margin
    capped = min(available, layout.image_max_height)
    max_w = min(layout.image_max_width, state.content_width)
    top = state.cursor

    dims = _probe(prober, path)
    if dims:
        box = fit_image(dims[0], dims[1], max_w, capped, top, state.bottom_margin)
        surface.draw_image(path, state.left_margin, top - box.height, box.width, box.height)
        result = PlacementResult.ok()
    else:
        box = estimate_box(max_w, capped)
        surface.draw_image(path, state.left_margin, top - capped, max_w, capped, fit=True)
        result = PlacementResult.degraded("no dimensions, height estimated")

    LOGGER.debug("Placed %s at %.0fx%.0f on page %d", path, box.width, box.height, state.page_index)
    move_cursor(state, max(top - box.height - IMAGE_SPACING_AFTER,
                           state.bottom_margin + IMAGE_MIN_OFFSET))
    return result
