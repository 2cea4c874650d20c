from services.pdf_renderer import PdfRenderer
from services.text_layout import (
    BLANK_LINE_SPACING,
    BODY,
    BULLET_PREFIX,
    layout_document,
    wrap_text,
)


class FixedWidthMetrics:
    """One unit of width per character, regardless of size or weight."""

    def width(self, text, size, bold):
        return float(len(text))


METRICS = FixedWidthMetrics()
SMALL_PAGE = (120.0, 200.0)  # content width 100 with a margin of 10


def test_wrap_packs_words_greedily():
    assert wrap_text("the quick brown fox", 10, 11, False, METRICS) == ["the quick", "brown fox"]


def test_wrap_keeps_overlong_word_on_its_own_line():
    lines = wrap_text("a supercalifragilistic b", 10, 11, False, METRICS)
    assert lines == ["a", "supercalifragilistic", "b"]


def test_wrap_of_whitespace_is_empty():
    assert wrap_text("   ", 10, 11, False, METRICS) == []


def test_empty_document_yields_one_blank_page():
    pages = layout_document([], METRICS)
    assert len(pages) == 1
    assert pages[0].runs == []
    assert pages[0].strokes == []


def test_line_forms_are_styled_by_prefix():
    lines = ["# Title", "## Section", "**Bold line**", "- item", "plain **x** text", "---"]
    pages = layout_document(lines, METRICS, margin=10, page_size=(400.0, 400.0))
    runs = pages[0].runs

    assert [run.text for run in runs] == ["Title", "Section", "Bold line", BULLET_PREFIX + "item", "plain x text"]
    assert runs[0].bold and runs[0].size == 20
    assert runs[1].bold and runs[1].size == 15
    assert runs[2].bold and runs[2].size == BODY.size
    assert not runs[3].bold
    assert not runs[4].bold

    stroke = pages[0].strokes[0]
    assert (stroke.x1, stroke.x2) == (10, 390)


def test_runs_start_at_top_margin_and_blank_lines_add_gap():
    pages = layout_document(["a", "", "b"], METRICS, margin=10, page_size=SMALL_PAGE)
    first, second = pages[0].runs
    assert first.y == 190
    assert first.y - second.y == BODY.spacing + BLANK_LINE_SPACING


def test_long_document_paginates_without_crossing_bottom_margin():
    lines = [f"line {i}" for i in range(40)]
    pages = layout_document(lines, METRICS, margin=10, page_size=SMALL_PAGE)

    assert len(pages) > 1
    assert sum(len(page.runs) for page in pages) == 40
    for page in pages:
        for run in page.runs:
            assert run.y >= 10


def test_separator_at_bottom_margin_starts_new_page():
    # 12 body lines take the cursor from 190 down past the margin of 10
    lines = [f"line {i}" for i in range(12)] + ["---"]
    pages = layout_document(lines, METRICS, margin=10, page_size=SMALL_PAGE)

    assert len(pages) == 2
    assert len(pages[0].runs) == 12
    assert pages[0].strokes == []
    stroke = pages[1].strokes[0]
    assert (stroke.x1, stroke.y1, stroke.x2, stroke.y2) == (10, 190, 110, 190)
    assert pages[1].runs == []


def test_wrapped_segments_each_get_a_run():
    text = " ".join(["word"] * 60)
    pages = layout_document([text], METRICS, margin=10, page_size=SMALL_PAGE)
    runs = [run for page in pages for run in page.runs]
    assert len(runs) > 1
    assert all(len(run.text) <= 100 for run in runs)


def test_pdf_renderer_produces_pdf_bytes():
    content = "# Acme\n\n## INVOICE\n**Invoice #:** INV-1\n- Amount: R10.00\n---\n" + "\n".join(
        f"row {i}" for i in range(120)
    )
    pdf = PdfRenderer().render(content, title="Invoice INV-1")
    assert pdf.startswith(b"%PDF")
