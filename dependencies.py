# dependencies.py
"""
FastAPI dependency providers.

The repository is built per request from the request's session; the
artifact store is shared so its per-invoice locks apply across requests.
"""
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

import config
from database import get_session
from repositories.document_repository import SqlDocumentRepository
from services.artifact_store import ArtifactStore
from services.clock import Clock, SystemClock
from services.invoice_service import InvoiceService

_artifact_store: Optional[ArtifactStore] = None


def get_artifact_store() -> ArtifactStore:
     """Return the process-wide ArtifactStore rooted at INVOICE_STORAGE_ROOT."""
     global _artifact_store
     if _artifact_store is None:
          _artifact_store = ArtifactStore(config.INVOICE_STORAGE_ROOT)
     return _artifact_store


def get_clock() -> Clock:
     return SystemClock()


def build_invoice_service(db: Session, artifact_store: ArtifactStore, clock: Clock) -> InvoiceService:
     return InvoiceService(SqlDocumentRepository(db), artifact_store, clock)


def get_invoice_service(
     db: Session = Depends(get_session),
     artifact_store: ArtifactStore = Depends(get_artifact_store),
     clock: Clock = Depends(get_clock),
) -> InvoiceService:
     return build_invoice_service(db, artifact_store, clock)
