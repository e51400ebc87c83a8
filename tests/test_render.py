import dataclasses
import os

import pytest
from pypdf import PdfReader

from trec_report import (
    Comment, ImageResolver, LineItem, RenderError, ReportRecord, Section, Status,
    normalize_record, render_report,
)
from trec_report.surface import CanvasSurface

LONG_COMMENT = ("Moisture staining observed below the window sill; recommend evaluation "
                "by a qualified contractor. ") * 20


@pytest.fixture
def resolver(tmp_path):
    return ImageResolver([], cache_dir=str(tmp_path / "cache"))


@pytest.fixture
def out(tmp_path):
    return str(tmp_path / "out" / "report.pdf")


def test_body_renders_in_order_on_page_three(inspection_json, resolver, out, page_texts):
    report = render_report(normalize_record(inspection_json), out, resolver=resolver)

    pages = page_texts(out)
    assert report.page_count == len(pages) == 3
    assert "Jordan Client" in pages[0]
    assert "March 14, 2024" in pages[0]
    body = pages[2]
    positions = [body.index(s) for s in ("1. Roof", "1.1 Shingles", "1.1 Finding", "Minor wear")]
    assert positions == sorted(positions)
    assert not report.skipped
    assert report.output_path == out


def test_unresolvable_header_image_changes_nothing(inspection_json, resolver, tmp_path, page_texts):
    record = normalize_record(inspection_json)
    plain = str(tmp_path / "plain.pdf")
    broken = str(tmp_path / "broken.pdf")
    render_report(record, plain, resolver=resolver)
    report = render_report(
        dataclasses.replace(record, header_image_url="https://nowhere.invalid/house.jpg"),
        broken, resolver=resolver)

    assert dict(report.entries)["header.image"].status is Status.SKIPPED
    assert page_texts(broken) == page_texts(plain)


def test_long_report_paginates_with_consistent_footer(resolver, out, page_texts):
    comments = tuple(Comment(label="Note", comment_number=str(n), text=LONG_COMMENT)
                     for n in range(1, 51))
    record = ReportRecord(client_name="Jordan Client", sections=(
        Section(name="Interior", section_number="2", line_items=(
            LineItem(name="Walls", line_item_number="1", comments=comments),)),
    ))
    report = render_report(record, out, resolver=resolver)

    pages = page_texts(out)
    n = len(pages)
    assert n > 3
    assert report.page_count == n
    for i, text in enumerate(pages, start=1):
        assert f"Page {i} of {n}" in text
    assert all(r.status is Status.OK for e, r in report.entries if e.endswith(".text"))


def test_template_backs_first_two_pages(inspection_json, resolver, out, template_pdf, page_texts):
    render_report(normalize_record(inspection_json), out, template_path=template_pdf,
                  resolver=resolver)

    pages = page_texts(out)
    assert len(pages) == 3
    assert "TEMPLATE PAGE 1" in pages[0] and "Jordan Client" in pages[0]
    assert "TEMPLATE PAGE 2" in pages[1]
    assert "TEMPLATE" not in pages[2]
    assert "/AcroForm" not in PdfReader(out).trailer["/Root"]


def test_missing_template_still_renders(inspection_json, resolver, out, tmp_path):
    report = render_report(normalize_record(inspection_json), out,
                           template_path=str(tmp_path / "nope.pdf"), resolver=resolver)
    assert os.path.exists(out)
    assert report.page_count == 3


def test_photo_is_placed_in_body(resolver, out, make_image):
    comment = Comment(label="Finding", text="See photo", photos=(make_image(640, 480),))
    record = ReportRecord(sections=(
        Section(name="Roof", line_items=(LineItem(name="Flashing", comments=(comment,)),)),
    ))
    report = render_report(record, out, resolver=resolver)
    assert dict(report.entries)["section[1].item[1].comment[1].photo[1]"].status is Status.OK

    unprobed = render_report(record, out, resolver=resolver, probe=False)
    assert dict(unprobed.entries)["section[1].item[1].comment[1].photo[1]"].status is Status.DEGRADED


def test_unwritable_output_raises_render_error(inspection_json, resolver, tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    with pytest.raises(RenderError):
        render_report(normalize_record(inspection_json), str(blocker / "report.pdf"),
                      resolver=resolver)


def test_debug_grid_marks_only_the_header_page(inspection_json, resolver, tmp_path, page_texts):
    record = normalize_record(inspection_json)
    plain = str(tmp_path / "plain.pdf")
    debug = str(tmp_path / "debug.pdf")
    render_report(record, plain, resolver=resolver)
    report = render_report(record, debug, resolver=resolver, debug=True)

    pages = page_texts(debug)
    assert report.page_count == 3
    assert "y144" in pages[0] and "x72" in pages[0]
    assert "y144" not in pages[2]
    assert "y144" not in page_texts(plain)[0]


def test_debug_grid_failure_does_not_stop_render(inspection_json, resolver, out, monkeypatch):
    def broken(self, *args, **kwargs):
        raise RuntimeError("no grid")
    monkeypatch.setattr(CanvasSurface, "draw_grid", broken)
    report = render_report(normalize_record(inspection_json), out, resolver=resolver, debug=True)
    assert report.page_count == 3
    assert not report.skipped
