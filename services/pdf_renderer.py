# services/pdf_renderer.py
"""
Binary encoding step for invoice artifacts.

Layout is done by services.text_layout; reportlab's canvas only draws the
already-positioned runs and strokes.
"""
import io
from typing import List, Optional, Tuple

from reportlab.pdfgen import canvas

from services.text_layout import (
     DEFAULT_MARGIN,
     PAGE_SIZE,
     Page,
     ReportLabFontMetrics,
     layout_document,
)

RULE_WIDTH = 0.75


def encode_pages(pages: List[Page], fonts: ReportLabFontMetrics, title: Optional[str] = None) -> bytes:
     """Draw laid-out pages into a PDF document and return its bytes."""
     buffer = io.BytesIO()
     first = pages[0] if pages else Page(width=PAGE_SIZE[0], height=PAGE_SIZE[1])
     pdf = canvas.Canvas(buffer, pagesize=(first.width, first.height))
     if title:
          pdf.setTitle(title)

     for page in pages or [first]:
          pdf.setPageSize((page.width, page.height))
          pdf.setLineWidth(RULE_WIDTH)
          for stroke in page.strokes:
               pdf.line(stroke.x1, stroke.y1, stroke.x2, stroke.y2)
          for run in page.runs:
               pdf.setFont(fonts.font_name(run.bold), run.size)
               pdf.drawString(run.x, run.y, run.text)
          pdf.showPage()

     pdf.save()
     return buffer.getvalue()


class PdfRenderer:
     """Renders structured text content into paginated PDF bytes."""

     def __init__(
          self,
          fonts: Optional[ReportLabFontMetrics] = None,
          margin: float = DEFAULT_MARGIN,
          page_size: Tuple[float, float] = PAGE_SIZE,
     ):
          self.fonts = fonts or ReportLabFontMetrics()
          self.margin = margin
          self.page_size = page_size

     def render(self, content: str, title: Optional[str] = None) -> bytes:
          pages = layout_document(content.splitlines(), self.fonts, self.margin, self.page_size)
          return encode_pages(pages, self.fonts, title=title)
