import pytest

from trec_report.config import LEADING_RATIO, TEXT_SPACING
from trec_report.pages import move_cursor
from trec_report.results import Status
from trec_report.text_flow import place_field, place_paragraph, wrap_words

MEDIUM_TEXT = "The flashing at the chimney shows separation and rust. " * 25
LONG_TEXT = "The flashing at the chimney shows separation and rust. " * 120
HUGE_TEXT = "word " * 6000


def test_blank_text_is_skipped_without_moving(state, surface, layout):
    before = state.cursor
    result = place_paragraph(state, surface, layout, "   \n ", 10)
    assert result.status is Status.SKIPPED
    assert state.cursor == before


def test_paragraph_advances_cursor_by_height_and_spacing(state, surface, layout):
    needed = surface.measure_paragraph(MEDIUM_TEXT, state.content_width, 10)
    top = state.cursor
    result = place_paragraph(state, surface, layout, MEDIUM_TEXT, 10, spacing_after=TEXT_SPACING)
    assert result.status is Status.OK
    assert state.cursor == pytest.approx(top - needed - TEXT_SPACING, abs=0.01)
    assert surface.page_count == 1


def test_overflowing_paragraph_moves_whole_to_one_new_page(state, surface, layout):
    needed = surface.measure_paragraph(MEDIUM_TEXT, state.content_width, 10)
    move_cursor(state, state.bottom_margin + 80)
    assert needed > 80

    result = place_paragraph(state, surface, layout, MEDIUM_TEXT, 10)

    assert result.status is Status.OK
    assert surface.page_count == 2
    assert state.page_index == 2
    assert state.cursor == pytest.approx(state.content_top - needed, abs=0.01)


def test_too_little_room_forces_break_before_shrinking(state, surface, layout):
    move_cursor(state, state.bottom_margin + layout.min_usable_height - 20)
    place_paragraph(state, surface, layout, "Short note.", 10)
    assert surface.page_count == 2
    assert state.cursor > state.content_top - 20


def test_text_taller_than_a_page_continues_at_the_font_floor(state, surface, layout, monkeypatch):
    sizes = []
    make = surface.paragraph
    monkeypatch.setattr(surface, "paragraph",
                        lambda text, size, style="normal": sizes.append(size) or make(text, size, style))

    result = place_paragraph(state, surface, layout, HUGE_TEXT, 10)

    assert result.status is Status.OK
    assert sizes == [layout.min_font_size]
    assert surface.page_count > 1
    assert state.page_index == surface.page_count
    assert state.bottom_margin <= state.cursor < state.content_top


@pytest.mark.parametrize("room", [300, 55])
def test_tall_paragraph_mid_page_breaks_before_stepping_down(state, surface, layout, monkeypatch, room):
    assert surface.measure_paragraph(LONG_TEXT, state.content_width, 10) > layout.max_text_box_height
    drawn = []
    draw = surface.draw_text_box

    def spy(x, top_y, width, height, text, font_size, style="normal", align="left"):
        drawn.append((top_y, font_size))
        return draw(x, top_y, width, height, text, font_size, style, align)
    monkeypatch.setattr(surface, "draw_text_box", spy)
    move_cursor(state, state.bottom_margin + room)

    result = place_paragraph(state, surface, layout, LONG_TEXT, 10)

    assert result.status is Status.OK
    assert surface.page_count == 2
    ((top_y, size),) = drawn
    assert top_y == pytest.approx(state.content_top)
    assert layout.min_font_size <= size < 10


def test_box_failure_falls_back_to_manual_wrap(state, surface, layout, monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("bad markup")
    drawn = []
    monkeypatch.setattr(surface, "measure_paragraph", broken)
    monkeypatch.setattr(surface, "draw_string",
                        lambda x, y, text, size, style="normal": drawn.append((y, text)))

    move_cursor(state, state.bottom_margin + 100)
    result = place_paragraph(state, surface, layout, MEDIUM_TEXT, 10)

    assert result.status is Status.DEGRADED
    assert len(drawn) > 8
    assert " ".join(t for _, t in drawn).split() == MEDIUM_TEXT.split()
    # ran out of room on the first page and continued on exactly one more
    assert surface.page_count == 2
    assert all(y >= state.bottom_margin - 10 * LEADING_RATIO for y, _ in drawn)


def test_unrecoverable_paragraph_is_skipped(state, surface, layout, monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("nope")
    monkeypatch.setattr(surface, "draw_text_box", broken)
    monkeypatch.setattr(surface, "draw_string", broken)
    result = place_paragraph(state, surface, layout, "Some text", 10)
    assert result.status is Status.SKIPPED


def test_wrap_words_packs_greedily():
    measure = len  # one unit per character
    assert wrap_words("aa bb cc dd", 5, measure) == ["aa bb", "cc dd"]
    assert wrap_words("averyveryverylongword x", 5, measure) == ["avery", "veryv", "erylo", "ngwor", "d x"]
    assert all(len(line) <= 5 for line in wrap_words("ab https://example.com/very/long/path", 5, measure))
    assert wrap_words("one\n\ntwo\n", 20, measure) == ["one", "", "two"]


def test_field_placed_in_box(state, surface):
    assert place_field(state, surface, 90, 100, 200, "Jordan Client", 10).status is Status.OK


def test_empty_field_is_skipped(state, surface):
    assert place_field(state, surface, 90, 100, 200, "", 10).status is Status.SKIPPED
    assert place_field(state, surface, 90, 100, 200, None, 10).status is Status.SKIPPED


def test_field_falls_back_to_raw_draw(state, surface, monkeypatch):
    calls = []

    def broken(*args, **kwargs):
        raise RuntimeError("box")
    monkeypatch.setattr(surface, "draw_text_box", broken)
    monkeypatch.setattr(surface, "draw_string",
                        lambda x, y, text, size, style="normal": calls.append((x, y, text)))

    result = place_field(state, surface, 90, 100, 200, "Jordan Client", 10)

    assert result.status is Status.DEGRADED
    assert calls == [(90, state.page_height - 100 - 10, "Jordan Client")]


def test_field_second_failure_is_skipped(state, surface, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("surface")
    monkeypatch.setattr(surface, "draw_text_box", broken)
    monkeypatch.setattr(surface, "draw_string", broken)
    assert place_field(state, surface, 90, 100, 200, "x", 10).status is Status.SKIPPED
