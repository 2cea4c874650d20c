# repositories/__init__.py
from .document_repository import (
     ASCENDING,
     DESCENDING,
     COLLECTIONS,
     DocumentRepository,
     SqlDocumentRepository,
)
from .references import (
     IDENTITY_KEY,
     REFERENCE_FIELDS,
     Reference,
     normalize_reference,
     stringify_reference,
)

__all__ = [
     "ASCENDING",
     "DESCENDING",
     "COLLECTIONS",
     "DocumentRepository",
     "SqlDocumentRepository",
     "IDENTITY_KEY",
     "REFERENCE_FIELDS",
     "Reference",
     "normalize_reference",
     "stringify_reference",
]
