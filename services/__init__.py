from .invoice_service import InvoiceService, BatchReport, BatchOutcome, ArtifactFile
from .artifact_store import ArtifactStore, sanitize_segment
from .clock import Clock, SystemClock, FixedClock
from .pdf_renderer import PdfRenderer
from .text_layout import layout_document, wrap_text

__all__ = [
     "InvoiceService",
     "BatchReport",
     "BatchOutcome",
     "ArtifactFile",
     "ArtifactStore",
     "sanitize_segment",
     "Clock",
     "SystemClock",
     "FixedClock",
     "PdfRenderer",
     "layout_document",
     "wrap_text",
]
