"""Render inspection records onto the TREC template as paginated PDFs."""

from .config import LayoutConfig
from .images import NullProber, PillowProber
from .media import ImageResolver, MediaCache
from .record import Comment, LineItem, ReportRecord, Section, load_record, normalize_record
from .renderer import ReportRenderer, render_report
from .results import PlacementResult, RenderError, RenderReport, Status

__all__ = [
    "Comment", "ImageResolver", "LayoutConfig", "LineItem", "MediaCache", "NullProber",
    "PillowProber", "PlacementResult", "RenderError", "RenderReport", "ReportRecord",
    "ReportRenderer", "Section", "Status", "load_record", "normalize_record", "render_report",
]

__version__ = "0.3.0"
