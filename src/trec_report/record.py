"""Inspection record model and normalization from inspection JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class Comment:
    label: Optional[str] = None
    comment_number: Optional[str] = None
    text: Optional[str] = None
    photos: Tuple[str, ...] = ()
    videos: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LineItem:
    name: Optional[str] = None
    line_item_number: Optional[str] = None
    comments: Tuple[Comment, ...] = ()


@dataclass(frozen=True)
class Section:
    name: Optional[str] = None
    section_number: Optional[str] = None
    line_items: Tuple[LineItem, ...] = ()


@dataclass(frozen=True)
class ReportRecord:
    client_name: Optional[str] = None
    inspection_date: object = None
    property_address: Optional[str] = None
    inspector_name: Optional[str] = None
    inspector_license_number: Optional[str] = None
    sponsor_name: Optional[str] = None
    sponsor_license_number: Optional[str] = None
    header_image_url: Optional[str] = None
    sections: Tuple[Section, ...] = ()


# ---------- JSON helpers ----------
def _get(d, path, default=None):
    cur = d
    for k in path.split("."):
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def _first(*vals) -> Optional[str]:
    """First non-blank string (numbers count, bools do not)."""
    for v in vals:
        if isinstance(v, bool):
            continue
        if isinstance(v, (int, float)):
            return str(v)
        if isinstance(v, str) and v.strip():
            return v.strip()
    return None


def _list(val):
    return val if isinstance(val, list) else []


def _media_refs(entries) -> Tuple[str, ...]:
    refs = []
    for entry in _list(entries):
        if isinstance(entry, dict):
            entry = entry.get("url")
        url = _first(entry)
        if url:
            refs.append(url)
    return tuple(refs)


def _date(insp):
    for path in ("schedule.date", "dateOfInspection", "date"):
        val = _get(insp, path)
        if val not in (None, ""):
            return val
    return None


def _address(insp) -> Optional[str]:
    full = _first(_get(insp, "address.fullAddress"))
    if full:
        return full
    parts = [_first(_get(insp, f"address.{k}")) for k in ("street", "city", "state", "zipcode")]
    return " ".join(p for p in parts if p) or None


def _comment(c) -> Optional[Comment]:
    if not isinstance(c, dict):
        return None
    return Comment(
        label=_first(c.get("label")),
        comment_number=_first(c.get("commentNumber")),
        text=_first(c.get("text"), c.get("content"), c.get("commentText")),
        photos=_media_refs(c.get("photos")),
        videos=_media_refs(c.get("videos")),
    )


def _line_item(li) -> Optional[LineItem]:
    if not isinstance(li, dict):
        return None
    comments = (_comment(c) for c in _list(li.get("comments")))
    return LineItem(
        name=_first(li.get("name"), li.get("title")),
        line_item_number=_first(li.get("lineItemNumber")),
        comments=tuple(c for c in comments if c),
    )


def _section(s) -> Optional[Section]:
    if not isinstance(s, dict):
        return None
    items = (_line_item(li) for li in _list(s.get("lineItems")))
    return Section(
        name=_first(s.get("name"), s.get("title")),
        section_number=_first(s.get("sectionNumber")),
        line_items=tuple(li for li in items if li),
    )


def normalize_record(data) -> ReportRecord:
    """Build a :class:`ReportRecord` from raw inspection JSON.

    Accepts the inspection mapping itself or a document nesting it under
    ``"inspection"``. Entries of unexpected shape are dropped one by one.
    """
    if not isinstance(data, dict):
        return ReportRecord()
    insp = data["inspection"] if isinstance(data.get("inspection"), dict) else data
    sections = (_section(s) for s in _list(insp.get("sections")))
    return ReportRecord(
        client_name=_first(_get(insp, "clientInfo.name")),
        inspection_date=_date(insp),
        property_address=_address(insp),
        inspector_name=_first(_get(insp, "inspector.name")),
        inspector_license_number=_first(_get(insp, "inspector.licenseNumber"),
                                        _get(insp, "inspector.license")),
        sponsor_name=_first(_get(insp, "sponsor.name")),
        sponsor_license_number=_first(_get(insp, "sponsor.licenseNumber"),
                                      _get(insp, "sponsor.license")),
        header_image_url=_first(insp.get("headerImageUrl")),
        sections=tuple(s for s in sections if s),
    )


def load_record(path) -> ReportRecord:
    return normalize_record(json.loads(Path(path).read_text(encoding="utf-8")))
