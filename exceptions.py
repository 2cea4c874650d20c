# exceptions.py
"""
Typed exceptions for the invoice engine.

Every error carries a machine-readable ``code`` so the HTTP layer and the
batch jobs can react by type instead of parsing messages.

     InvoiceEngineError
     +-- NotFoundError
     |    +-- InvoiceNotFoundError
     |    +-- LeaseNotFoundError
     +-- InvalidInvoiceDataError
     +-- InvalidReferenceError
     +-- InvalidStatusError
     +-- InvalidStatusTransitionError
     +-- StorageError
          +-- DuplicateDocumentError
"""
from typing import Any, Optional


class InvoiceEngineError(Exception):
     """Base class for all invoice engine errors."""

     code: str = "INVOICE_ENGINE_ERROR"

     def __init__(self, message: str):
          super().__init__(message)
          self.message = message


class NotFoundError(InvoiceEngineError):
     code = "NOT_FOUND"

     def __init__(self, entity: str, entity_id: Any):
          self.entity = entity
          self.entity_id = entity_id
          super().__init__(f"{entity} with ID {entity_id} not found")


class InvoiceNotFoundError(NotFoundError):
     code = "INVOICE_NOT_FOUND"

     def __init__(self, invoice_id: Any):
          super().__init__("Invoice", invoice_id)


class LeaseNotFoundError(NotFoundError):
     code = "LEASE_NOT_FOUND"

     def __init__(self, lease_id: Any):
          super().__init__("Lease", lease_id)


class InvalidInvoiceDataError(InvoiceEngineError, ValueError):
     """Explicit invoice input that cannot be interpreted (bad date, amount, year)."""

     code = "INVALID_INVOICE_DATA"


class InvalidReferenceError(InvoiceEngineError, ValueError):
     """A reference value is neither a native identity nor its string form."""

     code = "INVALID_REFERENCE"

     def __init__(self, value: Any, field: Optional[str] = None):
          self.value = value
          self.field = field
          where = f" for '{field}'" if field else ""
          super().__init__(f"Invalid reference{where}: {value!r}")


class InvalidStatusError(InvoiceEngineError, ValueError):
     code = "INVALID_STATUS"

     def __init__(self, status: Any):
          self.status = status
          super().__init__(f"Unknown invoice status: {status!r}")


class InvalidStatusTransitionError(InvoiceEngineError):
     code = "INVALID_STATUS_TRANSITION"

     def __init__(self, current: str, requested: str):
          self.current = current
          self.requested = requested
          super().__init__(f"Cannot move invoice from '{current}' to '{requested}'")


class StorageError(InvoiceEngineError):
     """Repository or filesystem operation failed."""

     code = "STORAGE_FAILURE"

     def __init__(self, message: str, collection: Optional[str] = None):
          self.collection = collection
          super().__init__(message)


class DuplicateDocumentError(StorageError):
     """Insert rejected by a unique constraint."""

     code = "DUPLICATE_DOCUMENT"
