# services/invoice_service.py
"""
Invoice Service - invoice lifecycle and artifact generation.

Derives invoices from raw input and lease data, enforces one invoice per
tenant per billing period, keeps each invoice's markdown/PDF pair on disk,
and drives the status state machine:

     pending -> paid
     pending -> overdue -> paid

Every path that returns an invoice (create, list, fetch, status change,
batch jobs) goes through ``_ensure_artifacts`` before serialization, so
returned invoices always have resolvable artifacts.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from calendar import monthrange
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Tuple

from exceptions import (
     DuplicateDocumentError,
     InvalidInvoiceDataError,
     InvalidStatusError,
     InvalidStatusTransitionError,
     InvoiceNotFoundError,
     LeaseNotFoundError,
)
from models.invoice import InvoiceStatus
from repositories.document_repository import ASCENDING, DESCENDING, DocumentRepository
from repositories.references import IDENTITY_KEY, normalize_reference
from services.artifact_store import ArtifactStore, sanitize_segment
from services.clock import Clock, SystemClock
from services.invoice_document import CompanyHeader, build_invoice_markdown
from services.serializers import serialize_invoice

logger = logging.getLogger(__name__)

MONTH_NAMES = (
     "January", "February", "March", "April", "May", "June",
     "July", "August", "September", "October", "November", "December",
)

ALLOWED_TRANSITIONS = {
     InvoiceStatus.PENDING: {InvoiceStatus.PAID, InvoiceStatus.OVERDUE},
     InvoiceStatus.OVERDUE: {InvoiceStatus.PAID},
     InvoiceStatus.PAID: set(),
}

LIST_FILTER_FIELDS = ("tenant_id", "property_id", "lease_id", "status", "month", "year", "source")


# ---------------------------------------------------------------------------
# Derivation helpers
# ---------------------------------------------------------------------------

def parse_date(value: Any) -> Optional[date]:
     """Accept a date, datetime or ISO string (time part ignored)."""
     if value is None or value == "":
          return None
     if isinstance(value, datetime):
          return value.date()
     if isinstance(value, date):
          return value
     try:
          return date.fromisoformat(str(value).strip()[:10])
     except ValueError:
          raise InvalidInvoiceDataError(f"Invalid date: {value!r}") from None


def month_label(day: date) -> str:
     return MONTH_NAMES[day.month - 1]


def first_day_of_next_month(day: date) -> date:
     if day.month == 12:
          return date(day.year + 1, 1, 1)
     return date(day.year, day.month + 1, 1)


def month_bounds(day: date) -> Tuple[date, date]:
     return day.replace(day=1), day.replace(day=monthrange(day.year, day.month)[1])


def due_datetime(due: date) -> datetime:
     """Due dates are midnight UTC of the due day."""
     return datetime.combine(due, time.min, tzinfo=timezone.utc)


def overdue_days(due: date, now: datetime) -> int:
     return (now - due_datetime(due)) // timedelta(days=1)


def coerce_status(value: Any) -> InvoiceStatus:
     raw = getattr(value, "value", value)
     try:
          return InvoiceStatus(str(raw).strip().lower())
     except ValueError:
          raise InvalidStatusError(value) from None


def display_name(user: Optional[Mapping[str, Any]]) -> Optional[str]:
     if not user:
          return None
     name = f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()
     return name or None


def _parse_amount(value: Any) -> Decimal:
     try:
          amount = Decimal(str(value if value not in (None, "") else 0))
     except InvalidOperation:
          raise InvalidInvoiceDataError(f"Invalid amount: {value!r}") from None
     if amount < 0:
          raise InvalidInvoiceDataError("Amount must not be negative")
     return amount


def _parse_year(value: Any, fallback: int) -> int:
     if value in (None, ""):
          return fallback
     try:
          return int(value)
     except (TypeError, ValueError):
          raise InvalidInvoiceDataError(f"Invalid year: {value!r}") from None


# ---------------------------------------------------------------------------
# Batch reporting
# ---------------------------------------------------------------------------

@dataclass
class BatchOutcome:
     item_id: str
     outcome: str  # created, existing, overdue, skipped
     invoice_id: Optional[str] = None
     reason: Optional[str] = None


@dataclass
class BatchReport:
     invoices: List[Dict[str, Any]] = field(default_factory=list)
     outcomes: List[BatchOutcome] = field(default_factory=list)

     def record(self, item_id: Any, invoice: Dict[str, Any], outcome: str) -> None:
          self.invoices.append(invoice)
          self.outcomes.append(BatchOutcome(str(item_id), outcome, invoice_id=invoice["id"]))

     def skip(self, item_id: Any, reason: str) -> None:
          self.outcomes.append(BatchOutcome(str(item_id), "skipped", reason=reason))

     def count(self, outcome: str) -> int:
          return sum(1 for item in self.outcomes if item.outcome == outcome)


@dataclass(frozen=True)
class ArtifactFile:
     filename: str
     content: Any  # str for markdown, bytes for PDF


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class InvoiceService:
     """Service class for invoice-related business logic."""

     def __init__(
          self,
          repository: DocumentRepository,
          artifact_store: ArtifactStore,
          clock: Optional[Clock] = None,
          company: Optional[CompanyHeader] = None,
     ):
          self.repository = repository
          self.artifact_store = artifact_store
          self.clock = clock or SystemClock()
          self.company = company or CompanyHeader.from_config()
          self._last_number: Tuple[Optional[str], int] = (None, 1)

     # -----------------------------------------------------------------------
     # Create
     # -----------------------------------------------------------------------

     def create_invoice(self, data: Mapping[str, Any]) -> Dict[str, Any]:
          """
          Create an invoice, or return the existing one for the same billing period.

          Args:
               data: Partial invoice fields. Missing issue date, due date,
                    month, year, invoice number, tenant name, property
                    details and description are derived.

          Returns:
               Serialized invoice with artifacts in place.

          Raises:
               InvalidInvoiceDataError: If an explicit field cannot be parsed
               StorageError: If the insert fails
          """
          invoice, _ = self._create(data)
          return invoice

     def create_initial_lease_invoice(self, lease_id: Any) -> Dict[str, Any]:
          """
          Bill the first month of a newly created lease.

          Issue date is the lease start; due date is the first of the
          following month. The lease-creation flow calls this through
          POST /invoices/lease/{lease_id}/initial.
          """
          lease = self.repository.find_one("leases", {IDENTITY_KEY: lease_id})
          if lease is None:
               raise LeaseNotFoundError(lease_id)

          invoice, _ = self._create({
               "tenant_id": lease["tenant_id"],
               "property_id": lease["property_id"],
               "lease_id": lease[IDENTITY_KEY],
               "amount": lease["rent_price"],
               "issue_date": lease["start_date"],
               "source": "lease",
          })
          return invoice

     def _create(self, data: Mapping[str, Any]) -> Tuple[Dict[str, Any], bool]:
          now = self.clock.now()
          issue_date = parse_date(data.get("issue_date")) or now.date()
          due_date = parse_date(data.get("due_date")) or first_day_of_next_month(issue_date)
          month = data.get("month") or month_label(issue_date)
          year = _parse_year(data.get("year"), issue_date.year)

          tenant_id = normalize_reference(data.get("tenant_id"), "tenant_id")
          property_id = normalize_reference(data.get("property_id"), "property_id")
          lease_id = normalize_reference(data.get("lease_id"), "lease_id")
          manager_id = normalize_reference(data.get("manager_id"), "manager_id")

          if tenant_id is not None:
               existing = self._find_for_period(tenant_id, month, year)
               if existing is not None:
                    logger.info(
                         "Invoice %s already covers tenant %s for %s %s",
                         existing["invoice_number"], tenant_id, month, year,
                    )
                    return self._present(existing), False

          tenant_name = data.get("tenant_name")
          if not tenant_name and tenant_id is not None:
               tenant_name = display_name(self.repository.find_one("users", {IDENTITY_KEY: tenant_id}))

          property_name = data.get("property_name")
          property_address = data.get("property_address")
          if property_id is not None:
               prop = self.repository.find_one("properties", {IDENTITY_KEY: property_id})
               if prop is not None:
                    property_name = property_name or prop.get("property_name")
                    property_address = property_address or prop.get("address")
                    if manager_id is None:
                         manager_id = prop.get("manager_id")

          document = {
               "invoice_number": data.get("invoice_number") or self._next_invoice_number(now),
               "tenant_id": tenant_id,
               "tenant_name": tenant_name or "Tenant",
               "property_id": property_id,
               "property_name": property_name,
               "property_address": property_address,
               "manager_id": manager_id,
               "lease_id": lease_id,
               "amount": _parse_amount(data.get("amount")),
               "issue_date": issue_date,
               "due_date": due_date,
               "status": InvoiceStatus.PENDING,
               "description": data.get("description") or f"Monthly rent for {month} {year}",
               "month": month,
               "year": year,
               "source": data.get("source") or "manual",
               "created_at": now,
               "updated_at": now,
          }

          try:
               invoice_id = self.repository.insert_one("invoices", document)
          except DuplicateDocumentError:
               # A concurrent request created the same billing period first.
               winner = self._find_for_period(tenant_id, month, year) if tenant_id is not None else None
               if winner is None:
                    raise
               logger.info("Lost insert race for tenant %s, %s %s; returning %s", tenant_id, month, year, winner["invoice_number"])
               return self._present(winner), False

          logger.info("Created invoice %s (id=%s) for tenant %s", document["invoice_number"], invoice_id, tenant_id)
          stored = self.repository.find_one("invoices", {IDENTITY_KEY: invoice_id})
          return self._present(stored), True

     def _find_for_period(self, tenant_id: int, month: str, year: int) -> Optional[Dict[str, Any]]:
          return self.repository.find_one("invoices", {"tenant_id": tenant_id, "month": month, "year": year})

     def _next_invoice_number(self, now: datetime) -> str:
          """
          INV-YYYYMMDDHHMMSS, suffixed -2, -3, ... when taken.

          The search resumes from the last suffix handed out for the same
          timestamp, so a batch built within one second scans each number once.
          """
          base = f"INV-{now.strftime('%Y%m%d%H%M%S')}"
          last_base, suffix = self._last_number
          if last_base != base:
               suffix = 1
          candidate = base if suffix == 1 else f"{base}-{suffix}"
          while self.repository.find_one("invoices", {"invoice_number": candidate}) is not None:
               suffix += 1
               candidate = f"{base}-{suffix}"
          self._last_number = (base, suffix)
          return candidate

     # -----------------------------------------------------------------------
     # Read
     # -----------------------------------------------------------------------

     def get_invoices(self, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
          """
          List invoices, newest first.

          Supported filters: tenant_id, property_id, lease_id, status, month,
          year, source and manager_id. The manager filter is resolved into a
          membership test over the manager's property ids.
          """
          filters = filters or {}
          query: Dict[str, Any] = {}
          for key in LIST_FILTER_FIELDS:
               value = filters.get(key)
               if value in (None, ""):
                    continue
               if key == "status":
                    value = coerce_status(value).value
               elif key == "year":
                    value = _parse_year(value, 0)
               query[key] = value

          manager_id = filters.get("manager_id")
          if manager_id not in (None, ""):
               property_ids = self._manager_property_ids(manager_id)
               if "property_id" in query:
                    if normalize_reference(query["property_id"], "property_id") not in property_ids:
                         return []
               else:
                    query["property_id"] = {"$in": property_ids}

          documents = self.repository.find("invoices", query, sort=[("created_at", DESCENDING), (IDENTITY_KEY, DESCENDING)])
          return [self._present(document) for document in documents]

     def get_invoice_by_id(self, invoice_id: Any) -> Optional[Dict[str, Any]]:
          document = self.repository.find_one("invoices", {IDENTITY_KEY: invoice_id})
          if document is None:
               return None
          return self._present(document)

     def get_invoice_markdown(self, invoice_id: Any) -> ArtifactFile:
          document = self._ensure_artifacts(self._require(invoice_id))
          content = self.artifact_store.read_text(document["markdown_path"])
          return ArtifactFile(filename=f"{sanitize_segment(document['invoice_number'])}.md", content=content)

     def get_invoice_pdf(self, invoice_id: Any) -> ArtifactFile:
          document = self._ensure_artifacts(self._require(invoice_id))
          content = self.artifact_store.read_bytes(document["pdf_path"])
          return ArtifactFile(filename=f"{sanitize_segment(document['invoice_number'])}.pdf", content=content)

     # -----------------------------------------------------------------------
     # Status transitions
     # -----------------------------------------------------------------------

     def update_invoice_status(self, invoice_id: Any, status: Any) -> Dict[str, Any]:
          """
          Move an invoice to a new status.

          Raises:
               InvalidStatusError: If status is not pending, paid or overdue
               InvoiceNotFoundError: If the invoice does not exist
               InvalidStatusTransitionError: If the move is not allowed
          """
          target = coerce_status(status)
          document = self._require(invoice_id)
          current = coerce_status(document["status"])
          if target != current and target not in ALLOWED_TRANSITIONS[current]:
               raise InvalidStatusTransitionError(current.value, target.value)

          now = self.clock.now()
          changes: Dict[str, Any] = {"status": target, "updated_at": now}
          if target == InvoiceStatus.PAID:
               changes["paid_at"] = now
          elif target == InvoiceStatus.OVERDUE and current != InvoiceStatus.OVERDUE:
               changes["overdue_at"] = now

          if not self.repository.update_one("invoices", {IDENTITY_KEY: document[IDENTITY_KEY]}, changes):
               raise InvoiceNotFoundError(invoice_id)
          logger.info("Invoice %s: %s -> %s", document["invoice_number"], current.value, target.value)
          return self._present(self._require(document[IDENTITY_KEY]))

     def delete_invoice(self, invoice_id: Any) -> bool:
          """Delete the record, then remove both artifact files (best-effort)."""
          document = self.repository.find_one("invoices", {IDENTITY_KEY: invoice_id})
          if document is None:
               return False
          if not self.repository.delete_one("invoices", {IDENTITY_KEY: document[IDENTITY_KEY]}):
               return False

          paths = self.artifact_store.paths_for(document["month"], document["year"], document["invoice_number"])
          self.artifact_store.delete_artifacts({
               document.get("markdown_path"),
               document.get("pdf_path"),
               paths.markdown_path,
               paths.pdf_path,
          })
          logger.info("Deleted invoice %s", document["invoice_number"])
          return True

     # -----------------------------------------------------------------------
     # Batch jobs
     # -----------------------------------------------------------------------

     def generate_monthly_invoices(self, manager_id: Any = None) -> List[Dict[str, Any]]:
          return self.run_monthly_generation(manager_id).invoices

     def run_monthly_generation(self, manager_id: Any = None) -> BatchReport:
          """
          Bill every active lease that overlaps the current month.

          Leases are processed sequentially; the first repository or
          filesystem error aborts the pass. Leases with a missing property
          or tenant, outside the applicability window, or (when manager_id
          is given) under another manager are reported as skipped.
          """
          today = self.clock.today()
          month_start, month_end = month_bounds(today)
          manager_ref = normalize_reference(manager_id, "manager_id")
          report = BatchReport()

          for lease in self.repository.find("leases", {"status": "active"}, sort=[(IDENTITY_KEY, ASCENDING)]):
               lease_id = lease[IDENTITY_KEY]
               start = parse_date(lease.get("start_date"))
               end = parse_date(lease.get("end_date"))
               if start is not None and start > month_end:
                    report.skip(lease_id, "lease starts after the billing month")
                    continue
               if end is not None and end < month_start:
                    report.skip(lease_id, "lease ended before the billing month")
                    continue

               prop = self.repository.find_one("properties", {IDENTITY_KEY: lease.get("property_id")})
               if prop is None:
                    report.skip(lease_id, "property not found")
                    continue
               tenant = self.repository.find_one("users", {IDENTITY_KEY: lease.get("tenant_id")})
               if tenant is None:
                    report.skip(lease_id, "tenant not found")
                    continue
               if manager_ref is not None and prop.get("manager_id") != manager_ref:
                    report.skip(lease_id, "property managed by another manager")
                    continue

               invoice, created = self._create({
                    "tenant_id": lease["tenant_id"],
                    "tenant_name": display_name(tenant),
                    "property_id": prop[IDENTITY_KEY],
                    "lease_id": lease_id,
                    "amount": lease["rent_price"],
                    "issue_date": today,
                    "source": "lease",
               })
               report.record(lease_id, invoice, "created" if created else "existing")

          logger.info(
               "Monthly generation for %s %s: %d created, %d existing, %d skipped",
               month_label(today), today.year,
               report.count("created"), report.count("existing"), report.count("skipped"),
          )
          return report

     def process_overdue_invoices(self, manager_id: Any = None) -> List[Dict[str, Any]]:
          return self.run_overdue_sweep(manager_id).invoices

     def run_overdue_sweep(self, manager_id: Any = None) -> BatchReport:
          """
          Move pending invoices past their due date to overdue.

          Each returned invoice carries ``overdue_days``, the number of whole
          days elapsed since midnight UTC of its due date.
          """
          now = self.clock.now()
          query: Dict[str, Any] = {"status": InvoiceStatus.PENDING.value}
          if manager_id not in (None, ""):
               query["property_id"] = {"$in": self._manager_property_ids(manager_id)}
          report = BatchReport()

          for document in self.repository.find("invoices", query, sort=[("due_date", ASCENDING), (IDENTITY_KEY, ASCENDING)]):
               invoice_id = document[IDENTITY_KEY]
               due = parse_date(document["due_date"])
               if due_datetime(due) >= now:
                    report.skip(invoice_id, "not yet due")
                    continue

               self.repository.update_one("invoices", {IDENTITY_KEY: invoice_id}, {
                    "status": InvoiceStatus.OVERDUE,
                    "overdue_at": now,
                    "updated_at": now,
               })
               invoice = self._present(self._require(invoice_id))
               invoice["overdue_days"] = overdue_days(due, now)
               report.record(invoice_id, invoice, "overdue")

          logger.info("Overdue sweep: %d invoices now overdue", report.count("overdue"))
          return report

     # -----------------------------------------------------------------------
     # Summaries
     # -----------------------------------------------------------------------

     def calculate_tenant_balance(self, tenant_id: Any) -> Dict[str, Any]:
          """
          Calculate the total balance owed by a tenant.

          Returns:
               Dictionary with amounts and counts per status
          """
          invoices = self.repository.find("invoices", {"tenant_id": tenant_id})

          pending = [inv for inv in invoices if inv["status"] == InvoiceStatus.PENDING.value]
          overdue = [inv for inv in invoices if inv["status"] == InvoiceStatus.OVERDUE.value]
          paid = [inv for inv in invoices if inv["status"] == InvoiceStatus.PAID.value]

          return {
               "tenant_id": str(normalize_reference(tenant_id, "tenant_id")),
               "total_owed": float(sum(inv["amount"] for inv in pending + overdue)),
               "pending_amount": float(sum(inv["amount"] for inv in pending)),
               "overdue_amount": float(sum(inv["amount"] for inv in overdue)),
               "paid_amount": float(sum(inv["amount"] for inv in paid)),
               "total_invoices": len(invoices),
               "pending_count": len(pending),
               "overdue_count": len(overdue),
               "paid_count": len(paid),
          }

     def export_invoices(self, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
          """Export document: invoices matching the filters plus a status summary."""
          invoices = self.get_invoices(filters)
          return {
               "export_date": self.clock.now().isoformat(),
               "total_invoices": len(invoices),
               "summary": {
                    "total_amount": float(sum(Decimal(str(inv["amount"])) for inv in invoices)),
                    "pending_count": sum(1 for inv in invoices if inv["status"] == InvoiceStatus.PENDING.value),
                    "paid_count": sum(1 for inv in invoices if inv["status"] == InvoiceStatus.PAID.value),
                    "overdue_count": sum(1 for inv in invoices if inv["status"] == InvoiceStatus.OVERDUE.value),
               },
               "invoices": invoices,
          }

     # -----------------------------------------------------------------------
     # Helpers
     # -----------------------------------------------------------------------

     def _require(self, invoice_id: Any) -> Dict[str, Any]:
          document = self.repository.find_one("invoices", {IDENTITY_KEY: invoice_id})
          if document is None:
               raise InvoiceNotFoundError(invoice_id)
          return document

     def _manager_property_ids(self, manager_id: Any) -> List[int]:
          properties = self.repository.find("properties", {"manager_id": manager_id})
          return [prop[IDENTITY_KEY] for prop in properties]

     def _ensure_artifacts(self, document: Dict[str, Any]) -> Dict[str, Any]:
          """Make sure both artifacts exist; persist their paths when they change."""
          content = build_invoice_markdown(document, self.company)
          ensured = self.artifact_store.ensure_artifacts(
               document["month"], document["year"], document["invoice_number"], content
          )
          if document.get("markdown_path") == ensured.markdown_path and document.get("pdf_path") == ensured.pdf_path:
               return document

          self.repository.update_one("invoices", {IDENTITY_KEY: document[IDENTITY_KEY]}, {
               "markdown_path": ensured.markdown_path,
               "pdf_path": ensured.pdf_path,
          })
          return self.repository.find_one("invoices", {IDENTITY_KEY: document[IDENTITY_KEY]}) or document

     def _present(self, document: Dict[str, Any]) -> Dict[str, Any]:
          return serialize_invoice(self._ensure_artifacts(document))
