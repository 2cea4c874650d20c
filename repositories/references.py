# repositories/references.py
"""
Reference normalization.

Reference fields accept either the native integer identity or its string
form. Everything that crosses the repository boundary goes through
``normalize_reference`` so query builders never special-case the two shapes.
"""
from typing import Any, Optional

from exceptions import InvalidReferenceError

Reference = int

IDENTITY_KEY = "_id"

REFERENCE_FIELDS = frozenset({
     IDENTITY_KEY,
     "tenant_id",
     "property_id",
     "lease_id",
     "manager_id",
})


def normalize_reference(value: Any, field: Optional[str] = None) -> Optional[Reference]:
     """Coerce a reference to its native form; None and "" mean no reference."""
     if value is None or value == "":
          return None
     if isinstance(value, bool):
          raise InvalidReferenceError(value, field)
     if isinstance(value, int):
          return value
     if isinstance(value, str):
          candidate = value.strip()
          if candidate.isdigit():
               return int(candidate)
     raise InvalidReferenceError(value, field)


def stringify_reference(value: Any) -> Optional[str]:
     """Public string form of a reference (None stays None)."""
     if value is None or value == "":
          return None
     return str(value)


def is_reference_field(field: str) -> bool:
     return field in REFERENCE_FIELDS
