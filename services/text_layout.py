# services/text_layout.py
"""
Text Layout Engine - turns a structured text document into positioned runs.

The input is the invoice's markdown-like document as raw lines. Recognized
line forms (literal prefix matching only, not a markup parser):

     # Title            top-level heading (bold, large)
     ## Section         second-level heading (bold, medium)
     **Whole line**     bold run at body size
     - item             bullet, rewritten with a bullet glyph
     ---                horizontal separator stroke
     (blank)            vertical gap, no run

Every other line is body text. Lines are greedily word-wrapped to the
content width using a font-metrics provider, and pages break whenever the
cursor would cross the bottom margin.

Pure function of its inputs: no I/O, deterministic for a given metrics
provider.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Protocol, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth

PAGE_SIZE: Tuple[float, float] = A4
DEFAULT_MARGIN = 50.0

BLANK_LINE_SPACING = 10.0
RULE_SPACING = 14.0
RULE_MARKER = "---"
BULLET_PREFIX = "• "


class FontMetrics(Protocol):
     """Reports the rendered width of a string at a size and weight."""

     def width(self, text: str, size: float, bold: bool) -> float:
          ...


class ReportLabFontMetrics:
     """Metrics from reportlab's built-in Type 1 fonts (Helvetica family)."""

     def __init__(self, regular_font: str = "Helvetica", bold_font: str = "Helvetica-Bold"):
          self.regular_font = regular_font
          self.bold_font = bold_font

     def font_name(self, bold: bool) -> str:
          return self.bold_font if bold else self.regular_font

     def width(self, text: str, size: float, bold: bool) -> float:
          return stringWidth(text, self.font_name(bold), size)


@dataclass(frozen=True)
class LineStyle:
     size: float
     bold: bool
     spacing: float


HEADING_1 = LineStyle(size=20, bold=True, spacing=28)
HEADING_2 = LineStyle(size=15, bold=True, spacing=22)
BOLD = LineStyle(size=11, bold=True, spacing=16)
BODY = LineStyle(size=11, bold=False, spacing=16)


@dataclass(frozen=True)
class TextRun:
     x: float
     y: float
     text: str
     size: float
     bold: bool


@dataclass(frozen=True)
class Stroke:
     x1: float
     y1: float
     x2: float
     y2: float


@dataclass
class Page:
     width: float
     height: float
     runs: List[TextRun] = field(default_factory=list)
     strokes: List[Stroke] = field(default_factory=list)


def classify_line(line: str) -> Tuple[LineStyle, str]:
     """Pick the style for a non-blank, non-separator line and strip its marker."""
     if line.startswith("## "):
          return HEADING_2, _strip_emphasis(line[3:])
     if line.startswith("# "):
          return HEADING_1, _strip_emphasis(line[2:])
     if len(line) > 4 and line.startswith("**") and line.endswith("**"):
          return BOLD, _strip_emphasis(line[2:-2])
     if line.startswith("- ") or line.startswith("* "):
          return BODY, BULLET_PREFIX + _strip_emphasis(line[2:])
     return BODY, _strip_emphasis(line)


def _strip_emphasis(text: str) -> str:
     # Inline bold markers are not styled, only removed.
     return text.replace("**", "").strip()


def wrap_text(text: str, max_width: float, size: float, bold: bool, metrics: FontMetrics) -> List[str]:
     """
     Greedily pack words onto lines no wider than ``max_width``.

     A single word wider than ``max_width`` still gets a line of its own;
     words are never hyphenated.
     """
     words = text.split()
     if not words:
          return []

     lines = []
     current = words[0]
     for word in words[1:]:
          candidate = f"{current} {word}"
          if metrics.width(candidate, size, bold) <= max_width:
               current = candidate
          else:
               lines.append(current)
               current = word
     lines.append(current)
     return lines


def layout_document(
     lines: Iterable[str],
     metrics: FontMetrics,
     margin: float = DEFAULT_MARGIN,
     page_size: Tuple[float, float] = PAGE_SIZE,
) -> List[Page]:
     """
     Lay out raw document lines onto fixed-size pages.

     Returns at least one page; an empty document yields a single page with
     no runs. No run is ever placed below the bottom margin.
     """
     width, height = page_size
     content_width = width - 2 * margin
     top = height - margin

     pages = [Page(width=width, height=height)]
     cursor = top

     for raw in lines:
          line = raw.rstrip()
          if not line.strip():
               cursor -= BLANK_LINE_SPACING
               continue

          if line.strip() == RULE_MARKER:
               if cursor <= margin:
                    pages.append(Page(width=width, height=height))
                    cursor = top
               pages[-1].strokes.append(Stroke(margin, cursor, width - margin, cursor))
               cursor -= RULE_SPACING
               continue

          style, text = classify_line(line)
          for segment in wrap_text(text, content_width, style.size, style.bold, metrics):
               if cursor < margin:
                    pages.append(Page(width=width, height=height))
                    cursor = top
               pages[-1].runs.append(TextRun(margin, cursor, segment, style.size, style.bold))
               cursor -= style.spacing

     return pages
