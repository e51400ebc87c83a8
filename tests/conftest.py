# Shared fixtures for the TREC report renderer tests
import pytest
from PIL import Image
from pypdf import PdfReader
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from trec_report.config import LayoutConfig
from trec_report.pages import PageCursorState, ensure_page
from trec_report.results import RenderReport
from trec_report.surface import CanvasSurface


@pytest.fixture
def layout():
    return LayoutConfig()


@pytest.fixture
def surface(layout):
    return CanvasSurface(layout.page_size)


@pytest.fixture
def state(layout, surface):
    st = PageCursorState.for_layout(layout)
    ensure_page(st, surface)
    return st


@pytest.fixture
def report():
    return RenderReport()


@pytest.fixture
def make_image(tmp_path):
    """Write a solid-colour image of the given pixel size and return its path."""
    def _make(width=400, height=300, name="photo.png", fmt=None):
        path = tmp_path / name
        Image.new("RGB", (width, height), (180, 90, 40)).save(path, format=fmt)
        return str(path)
    return _make


@pytest.fixture
def template_pdf(tmp_path):
    """Three-page letter template with a marker line on each page."""
    path = tmp_path / "template.pdf"
    c = canvas.Canvas(str(path), pagesize=letter)
    for n in range(1, 4):
        c.setFont("Helvetica", 8)
        c.drawString(40, 760, f"TEMPLATE PAGE {n}")
        c.showPage()
    c.save()
    return str(path)


@pytest.fixture
def inspection_json():
    return {
        "inspection": {
            "clientInfo": {"name": "Jordan Client"},
            "schedule": {"date": 1710400000000},
            "address": {"fullAddress": "12 Oak Lane, Austin, TX 78701"},
            "inspector": {"name": "Casey Inspector", "license": "TREC 12345"},
            "sponsor": {"name": "Lone Star Inspections", "licenseNumber": "TREC 999"},
            "sections": [
                {
                    "name": "Roof",
                    "sectionNumber": 1,
                    "lineItems": [
                        {
                            "title": "Shingles",
                            "lineItemNumber": 1,
                            "comments": [
                                {"label": "Finding", "commentNumber": "1.1", "text": "Minor wear"},
                            ],
                        }
                    ],
                }
            ],
        }
    }


@pytest.fixture
def page_texts():
    """Extracted text of every page of a PDF on disk."""
    def _read(path):
        return [page.extract_text() or "" for page in PdfReader(path).pages]
    return _read
