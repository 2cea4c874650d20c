# repositories/document_repository.py
"""
Document repository over the relational store.

The invoice engine talks to storage through a narrow CRUD interface over
named collections. Documents are plain dicts: the internal identity lives
under ``_id`` and every other key is a column name. Filters are equality
maps; ``{"field": {"$in": [...]}}`` expresses membership.

Each write commits on its own. There is no multi-call transaction, so
callers that need check-then-act guarantees rely on table constraints.
"""
import enum
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from exceptions import DuplicateDocumentError, StorageError
from models import Invoice, Lease, Property, User
from repositories.references import (
     IDENTITY_KEY,
     Reference,
     is_reference_field,
     normalize_reference,
)

logger = logging.getLogger(__name__)

ASCENDING = 1
DESCENDING = -1

Document = Dict[str, Any]
Filters = Dict[str, Any]
SortSpec = Sequence[Tuple[str, int]]

COLLECTIONS = {
     "invoices": Invoice,
     "leases": Lease,
     "users": User,
     "properties": Property,
}


class DocumentRepository(ABC):
     """CRUD over the invoices, leases, users and properties collections."""

     @abstractmethod
     def find_one(self, collection: str, filters: Filters) -> Optional[Document]:
          ...

     @abstractmethod
     def find(self, collection: str, filters: Optional[Filters] = None, sort: Optional[SortSpec] = None) -> List[Document]:
          ...

     @abstractmethod
     def insert_one(self, collection: str, document: Document) -> Reference:
          ...

     @abstractmethod
     def update_one(self, collection: str, filters: Filters, changes: Document) -> int:
          ...

     @abstractmethod
     def delete_one(self, collection: str, filters: Filters) -> int:
          ...


class SqlDocumentRepository(DocumentRepository):
     """DocumentRepository backed by a SQLAlchemy session."""

     def __init__(self, session: Session):
          self.session = session

     # -----------------------------------------------------------------------
     # Reads
     # -----------------------------------------------------------------------

     def find_one(self, collection: str, filters: Filters) -> Optional[Document]:
          row = self._first(collection, filters)
          return self._to_document(row) if row is not None else None

     def find(self, collection: str, filters: Optional[Filters] = None, sort: Optional[SortSpec] = None) -> List[Document]:
          model = self._model(collection)
          stmt = select(model).where(*self._where(model, filters or {}))
          for field, direction in sort or ():
               column = self._column(model, field)
               stmt = stmt.order_by(column.desc() if direction == DESCENDING else column.asc())
          with self._guard(collection, "find"):
               rows = self.session.execute(stmt).scalars().all()
          return [self._to_document(row) for row in rows]

     # -----------------------------------------------------------------------
     # Writes
     # -----------------------------------------------------------------------

     def insert_one(self, collection: str, document: Document) -> Reference:
          model = self._model(collection)
          row = model(**self._to_columns(model, document))
          with self._guard(collection, "insert_one"):
               self.session.add(row)
               self.session.commit()
          return row.id

     def update_one(self, collection: str, filters: Filters, changes: Document) -> int:
          model = self._model(collection)
          columns = self._to_columns(model, changes)
          row = self._first(collection, filters)
          if row is None:
               return 0
          with self._guard(collection, "update_one"):
               for key, value in columns.items():
                    setattr(row, key, value)
               self.session.commit()
          return 1

     def delete_one(self, collection: str, filters: Filters) -> int:
          row = self._first(collection, filters)
          if row is None:
               return 0
          with self._guard(collection, "delete_one"):
               self.session.delete(row)
               self.session.commit()
          return 1

     # -----------------------------------------------------------------------
     # Helpers
     # -----------------------------------------------------------------------

     def _first(self, collection: str, filters: Filters):
          model = self._model(collection)
          stmt = select(model).where(*self._where(model, filters)).limit(1)
          with self._guard(collection, "find_one"):
               return self.session.execute(stmt).scalars().first()

     @contextmanager
     def _guard(self, collection: str, operation: str) -> Iterator[None]:
          try:
               yield
          except IntegrityError as exc:
               self.session.rollback()
               logger.warning("%s on '%s' rejected by a constraint: %s", operation, collection, exc.orig)
               raise DuplicateDocumentError(
                    f"{operation} on '{collection}' violates a unique constraint", collection
               ) from exc
          except SQLAlchemyError as exc:
               self.session.rollback()
               logger.exception("%s on '%s' failed", operation, collection)
               raise StorageError(f"{operation} on '{collection}' failed", collection) from exc

     @staticmethod
     def _model(collection: str):
          try:
               return COLLECTIONS[collection]
          except KeyError:
               raise StorageError(f"Unknown collection '{collection}'", collection) from None

     @staticmethod
     def _column(model, field: str):
          if field == IDENTITY_KEY:
               return model.id
          if field not in model.__table__.columns:
               raise StorageError(f"Unknown field '{field}' on {model.__tablename__}", model.__tablename__)
          return getattr(model, field)

     def _where(self, model, filters: Filters) -> list:
          clauses = []
          for field, value in filters.items():
               column = self._column(model, field)
               if isinstance(value, dict) and "$in" in value:
                    members = [self._normalize(field, member) for member in value["$in"]]
                    clauses.append(column.in_(members))
               elif value is None:
                    clauses.append(column.is_(None))
               else:
                    clauses.append(column == self._normalize(field, value))
          return clauses

     def _to_columns(self, model, document: Document) -> Document:
          columns = {}
          for field, value in document.items():
               if field == IDENTITY_KEY:
                    continue
               self._column(model, field)
               columns[field] = self._normalize(field, value)
          return columns

     @staticmethod
     def _normalize(field: str, value: Any) -> Any:
          if is_reference_field(field):
               return normalize_reference(value, field)
          return value

     @staticmethod
     def _to_document(row) -> Document:
          document: Document = {IDENTITY_KEY: row.id}
          for column in row.__table__.columns:
               if column.key == "id":
                    continue
               value = getattr(row, column.key)
               if isinstance(value, enum.Enum):
                    value = value.value
               document[column.key] = value
          return document
