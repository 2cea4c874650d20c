# services/serializers.py
"""
Presentation mapper: internal invoice documents -> externally exposed shape.

The repository identity (``_id``) becomes a public string ``id``, reference
fields are stringified, and artifact link hints for the HTTP layer are
attached. Filesystem paths never leave the service.
"""
from datetime import date, datetime
from typing import Any, Dict

from repositories.references import IDENTITY_KEY, is_reference_field, stringify_reference

ARTIFACT_URL_PREFIX = "/invoices"

_INTERNAL_FIELDS = frozenset({"markdown_path", "pdf_path"})


def artifact_urls(public_id: str) -> Dict[str, str]:
     return {
          "pdf_url": f"{ARTIFACT_URL_PREFIX}/{public_id}/pdf",
          "markdown_url": f"{ARTIFACT_URL_PREFIX}/{public_id}/markdown",
     }


def serialize_invoice(document: Dict[str, Any]) -> Dict[str, Any]:
     public_id = stringify_reference(document[IDENTITY_KEY])
     serialized: Dict[str, Any] = {"id": public_id}

     for key, value in document.items():
          if key == IDENTITY_KEY or key in _INTERNAL_FIELDS:
               continue
          if is_reference_field(key):
               value = stringify_reference(value)
          elif isinstance(value, (date, datetime)):
               value = value.isoformat()
          serialized[key] = value

     serialized.update(artifact_urls(public_id))
     return serialized
