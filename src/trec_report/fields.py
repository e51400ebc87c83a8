"""Fixed header block on page 1 of the TREC template."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .config import (
    HEADER_FIELD_SIZE, HEADER_LEFT_W, HEADER_LEFT_X, HEADER_RIGHT_W, HEADER_RIGHT_X,
    HEADER_ROWS, PLACEHOLDER, REPORT_ID_TOP,
)
from .text_flow import place_field

LOGGER = logging.getLogger(__name__)

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d", "%d-%m-%Y", "%m-%d-%Y",
                "%Y-%m-%dT%H:%M:%S", "%B %d, %Y", "%b %d, %Y")

# above this an epoch value is in milliseconds
EPOCH_SECONDS_MAX = 9_999_999_999


def _fmt(dt: datetime) -> str:
    return dt.strftime("%B %d, %Y")


def format_date(val) -> str:
    """Render a date as ``Month DD, YYYY``; anything unusable becomes the placeholder."""
    if val is None or isinstance(val, bool):
        return PLACEHOLDER
    if isinstance(val, str):
        s = val.strip()
        if not s:
            return PLACEHOLDER
        if s.isdigit():
            val = int(s)
    if isinstance(val, (int, float)):
        seconds = val / 1000.0 if abs(val) > EPOCH_SECONDS_MAX else float(val)
        try:
            return _fmt(datetime.fromtimestamp(seconds, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            return PLACEHOLDER

    s = str(val).strip()
    try:
        return _fmt(datetime.fromisoformat(s.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return _fmt(datetime.strptime(s[:19], fmt))
        except ValueError:
            pass
    LOGGER.debug("Unparsable inspection date %r", val)
    return PLACEHOLDER


def field_value(val) -> str:
    if val is None or not str(val).strip():
        return PLACEHOLDER
    return str(val).strip()


def report_identification(record) -> str:
    return f"Report Identification: {field_value(record.property_address)} - {format_date(record.inspection_date)}"


def header_fields(record):
    """(element, x, top_offset, width, text) for every header slot."""
    y1, y2, y3, y4 = HEADER_ROWS
    return [
        ("client_name",       HEADER_LEFT_X,  y1, HEADER_LEFT_W,  field_value(record.client_name)),
        ("inspection_date",   HEADER_RIGHT_X, y1, HEADER_RIGHT_W, format_date(record.inspection_date)),
        ("property_address",  HEADER_LEFT_X,  y2, HEADER_LEFT_W + HEADER_RIGHT_W,
         field_value(record.property_address)),
        ("inspector_name",    HEADER_LEFT_X,  y3, HEADER_LEFT_W,  field_value(record.inspector_name)),
        ("inspector_license", HEADER_RIGHT_X, y3, HEADER_RIGHT_W, field_value(record.inspector_license_number)),
        ("sponsor_name",      HEADER_LEFT_X,  y4, HEADER_LEFT_W,  field_value(record.sponsor_name)),
        ("sponsor_license",   HEADER_RIGHT_X, y4, HEADER_RIGHT_W, field_value(record.sponsor_license_number)),
        ("report_id",         HEADER_LEFT_X,  REPORT_ID_TOP, HEADER_LEFT_W + HEADER_RIGHT_W,
         report_identification(record)),
    ]


def render_header_fields(state, surface, record, report):
    for element, x, top, width, text in header_fields(record):
        report.record(f"header.{element}",
                      place_field(state, surface, x, top, width, text, HEADER_FIELD_SIZE))
