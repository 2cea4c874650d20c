# services/artifact_store.py
"""
Artifact Store - durable markdown + PDF files per invoice.

Layout:
     <root>/invoices/<year>-<sanitized-month>/<sanitized-invoice-number>.md
     <root>/invoices/<year>-<sanitized-month>/<sanitized-invoice-number>.pdf

Regeneration is presence-triggered: the markdown file is written only when
missing, and the PDF is rendered when either file is missing. Changed
invoice content does not refresh files that already exist.
"""
import logging
import os
import re
import threading
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from exceptions import StorageError
from services.pdf_renderer import PdfRenderer

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9\-_]")

# Ensure passes are serialized per artifact through a fixed pool of locks
LOCK_STRIPES = 64


def sanitize_segment(value) -> str:
     """Replace every character outside [A-Za-z0-9-_] with an underscore."""
     return _UNSAFE_CHARS.sub("_", str(value))


class Renderer(Protocol):
     def render(self, content: str, title: Optional[str] = None) -> bytes:
          ...


@dataclass(frozen=True)
class ArtifactPaths:
     directory: str
     markdown_path: str
     pdf_path: str


@dataclass(frozen=True)
class EnsuredArtifacts:
     content: str
     markdown_path: str
     pdf_path: str


class ArtifactStore:
     """Creates, reads and removes the artifact pair owned by one invoice."""

     def __init__(self, root: str, renderer: Optional[Renderer] = None):
          self.root = root
          self.renderer = renderer or PdfRenderer()
          self._locks = [threading.Lock() for _ in range(LOCK_STRIPES)]

     def directory_for(self, month: str, year: int) -> str:
          return os.path.join(self.root, "invoices", f"{year}-{sanitize_segment(month)}")

     def paths_for(self, month: str, year: int, invoice_number: str) -> ArtifactPaths:
          directory = self.directory_for(month, year)
          stem = sanitize_segment(invoice_number)
          return ArtifactPaths(
               directory=directory,
               markdown_path=os.path.join(directory, f"{stem}.md"),
               pdf_path=os.path.join(directory, f"{stem}.pdf"),
          )

     def ensure_artifacts(self, month: str, year: int, invoice_number: str, content: str) -> EnsuredArtifacts:
          """
          Guarantee both artifacts exist for the invoice, writing only what is missing.

          Concurrent calls for the same invoice are serialized in-process so
          only one of them renders.

          Raises:
               StorageError: If the directory or a file cannot be written.
                    A failed PDF write after a successful markdown write
                    leaves the markdown file in place.
          """
          paths = self.paths_for(month, year, invoice_number)
          with self._lock_for(paths.pdf_path):
               try:
                    os.makedirs(paths.directory, exist_ok=True)
                    markdown_exists = os.path.exists(paths.markdown_path)
                    pdf_exists = os.path.exists(paths.pdf_path)

                    if not markdown_exists:
                         with open(paths.markdown_path, "w", encoding="utf-8") as handle:
                              handle.write(content)

                    if not markdown_exists or not pdf_exists:
                         pdf_bytes = self.renderer.render(content, title=f"Invoice {invoice_number}")
                         with open(paths.pdf_path, "wb") as handle:
                              handle.write(pdf_bytes)
                         logger.info("Rendered artifacts for invoice %s in %s", invoice_number, paths.directory)
               except OSError as exc:
                    logger.exception("Writing artifacts for invoice %s failed", invoice_number)
                    raise StorageError(f"Could not write artifacts for invoice {invoice_number}") from exc

          return EnsuredArtifacts(content=content, markdown_path=paths.markdown_path, pdf_path=paths.pdf_path)

     def read_text(self, path: str) -> str:
          try:
               with open(path, "r", encoding="utf-8") as handle:
                    return handle.read()
          except OSError as exc:
               logger.exception("Reading artifact %s failed", path)
               raise StorageError(f"Could not read artifact {os.path.basename(path)}") from exc

     def read_bytes(self, path: str) -> bytes:
          try:
               with open(path, "rb") as handle:
                    return handle.read()
          except OSError as exc:
               logger.exception("Reading artifact %s failed", path)
               raise StorageError(f"Could not read artifact {os.path.basename(path)}") from exc

     def delete_artifacts(self, paths: Iterable[Optional[str]]) -> None:
          """Best-effort removal; a stray file never blocks record deletion."""
          for path in paths:
               if not path:
                    continue
               try:
                    os.remove(path)
               except FileNotFoundError:
                    continue
               except OSError:
                    logger.warning("Could not remove artifact %s", path, exc_info=True)

     def _lock_for(self, key: str) -> threading.Lock:
          return self._locks[hash(key) % len(self._locks)]
