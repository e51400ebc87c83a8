"""Template background pages and final document assembly (pypdf)."""

from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass
from typing import Optional

from pypdf import PdfReader, PdfWriter
from pypdf.generic import ArrayObject, NameObject

from .config import PAGE_SIZE, TEMPLATE_FRONT_PAGES
from .results import RenderError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateGeometry:
    path: Optional[str]
    page_size: tuple
    page_count: int = 0

    @property
    def present(self) -> bool:
        return self.page_count > 0

    @classmethod
    def blank(cls) -> "TemplateGeometry":
        return cls(None, tuple(PAGE_SIZE), 0)

    @classmethod
    def load(cls, path: Optional[str]) -> "TemplateGeometry":
        """Read page size and count; a missing or unreadable template means no background."""
        if not path or not os.path.exists(path):
            LOGGER.info("No template at %s, using default page size", path)
            return cls.blank()
        try:
            reader = PdfReader(path)
            box = reader.pages[0].mediabox
            return cls(path, (float(box.width), float(box.height)), len(reader.pages))
        except Exception as exc:
            LOGGER.info("Template %s unreadable (%s), using default page size", path, exc)
            return cls.blank()


def _strip_fields(writer: PdfWriter, count: int):
    """Drop form widgets from the front pages so they cannot hide the overlay."""
    annots_key = NameObject("/Annots")
    for i in range(count):
        page = writer.pages[i]
        if annots_key in page:
            page[annots_key] = ArrayObject()
    if "/AcroForm" in writer._root_object:
        del writer._root_object["/AcroForm"]


def compose_document(overlay: bytes, template: TemplateGeometry, out_path: str) -> int:
    """Write ``overlay`` to ``out_path``, merged onto the template's front pages.

    Returns the page count of the written document. Any failure here is
    terminal and raised as :class:`RenderError`.
    """
    try:
        body = PdfReader(io.BytesIO(overlay))
        writer = PdfWriter()
        nfront = 0
        if template.present:
            tpl = PdfReader(template.path)
            nfront = min(TEMPLATE_FRONT_PAGES, len(tpl.pages), len(body.pages))
            for i in range(nfront):
                writer.add_page(tpl.pages[i])
            _strip_fields(writer, nfront)
            for i in range(nfront):
                writer.pages[i].merge_page(body.pages[i])
        for i in range(nfront, len(body.pages)):
            writer.add_page(body.pages[i])

        # ---- Atomic write ----
        parent = os.path.dirname(os.path.abspath(out_path))
        os.makedirs(parent, exist_ok=True)
        tmp_out = out_path + ".__tmp.pdf"
        with open(tmp_out, "wb") as f:
            writer.write(f)
        os.replace(tmp_out, out_path)
        return len(writer.pages)
    except Exception as exc:
        raise RenderError(f"could not write {out_path}: {exc}") from exc
