# routers/invoices.py
"""
Invoice API routes.

Thin HTTP glue over InvoiceService: request parsing, error-to-status
mapping and artifact downloads. Authentication is handled upstream.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from dependencies import get_invoice_service
from exceptions import (
     DuplicateDocumentError,
     InvalidInvoiceDataError,
     InvalidReferenceError,
     InvalidStatusError,
     InvalidStatusTransitionError,
     InvoiceEngineError,
     NotFoundError,
)
from schemas.invoice import (
     BatchJobRequest,
     InvoiceCreate,
     InvoiceExportResponse,
     InvoiceResponse,
     InvoiceStatusEnum,
     InvoiceStatusUpdate,
     TenantBalanceResponse,
)
from services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _http_error(exc: InvoiceEngineError) -> HTTPException:
     """Map engine errors to HTTP errors; storage failures stay generic."""
     if isinstance(exc, NotFoundError):
          return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
     if isinstance(exc, (InvalidReferenceError, InvalidStatusError, InvalidInvoiceDataError)):
          return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
     if isinstance(exc, (InvalidStatusTransitionError, DuplicateDocumentError)):
          return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)
     logger.error("Invoice operation failed: %s", exc.message)
     return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Invoice operation failed")


@router.post(
     "",
     response_model=InvoiceResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a new invoice"
)
def create_invoice(
     invoice_data: InvoiceCreate,
     service: InvoiceService = Depends(get_invoice_service),
):
     """
     Create an invoice, deriving any omitted fields.

     If the tenant already has an invoice for the billing period, that
     invoice is returned instead of a new one.
     """
     try:
          return service.create_invoice(invoice_data.model_dump(exclude_none=True))
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc


@router.get(
     "",
     response_model=List[InvoiceResponse],
     summary="List invoices with filters"
)
def list_invoices(
     tenant_id: Optional[str] = Query(None, description="Filter by tenant ID"),
     property_id: Optional[str] = Query(None, description="Filter by property ID"),
     lease_id: Optional[str] = Query(None, description="Filter by lease ID"),
     manager_id: Optional[str] = Query(None, description="Only invoices on this manager's properties"),
     status_filter: Optional[InvoiceStatusEnum] = Query(None, alias="status", description="Filter by status"),
     month: Optional[str] = Query(None, description="Billing month label, e.g. March"),
     year: Optional[int] = Query(None, description="Billing year"),
     source: Optional[str] = Query(None, description="manual or lease"),
     service: InvoiceService = Depends(get_invoice_service),
):
     filters = {
          "tenant_id": tenant_id,
          "property_id": property_id,
          "lease_id": lease_id,
          "manager_id": manager_id,
          "status": status_filter.value if status_filter else None,
          "month": month,
          "year": year,
          "source": source,
     }
     try:
          return service.get_invoices(filters)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc


@router.post(
     "/generate-monthly",
     response_model=List[InvoiceResponse],
     summary="Generate this month's invoices for active leases"
)
def generate_monthly_invoices(
     body: Optional[BatchJobRequest] = None,
     service: InvoiceService = Depends(get_invoice_service),
):
     try:
          return service.generate_monthly_invoices(body.manager_id if body else None)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc


@router.post(
     "/process-overdue",
     response_model=List[InvoiceResponse],
     summary="Mark pending invoices past their due date as overdue"
)
def process_overdue_invoices(
     body: Optional[BatchJobRequest] = None,
     service: InvoiceService = Depends(get_invoice_service),
):
     try:
          return service.process_overdue_invoices(body.manager_id if body else None)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc


@router.post(
     "/lease/{lease_id}/initial",
     response_model=InvoiceResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Bill the first month of a new lease"
)
def create_initial_lease_invoice(
     lease_id: str,
     service: InvoiceService = Depends(get_invoice_service),
):
     """
     Called by the lease-creation flow once the lease is stored.
     Repeated calls return the same invoice for the lease's first billing period.
     """
     try:
          return service.create_initial_lease_invoice(lease_id)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc


@router.get(
     "/export",
     response_model=InvoiceExportResponse,
     summary="Export invoices with a status summary"
)
def export_invoices(
     tenant_id: Optional[str] = Query(None),
     manager_id: Optional[str] = Query(None),
     status_filter: Optional[InvoiceStatusEnum] = Query(None, alias="status"),
     service: InvoiceService = Depends(get_invoice_service),
):
     filters = {
          "tenant_id": tenant_id,
          "manager_id": manager_id,
          "status": status_filter.value if status_filter else None,
     }
     try:
          return service.export_invoices(filters)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc


@router.get(
     "/tenant/{tenant_id}/summary",
     response_model=TenantBalanceResponse,
     summary="Get tenant invoice summary"
)
def get_tenant_invoice_summary(
     tenant_id: str,
     service: InvoiceService = Depends(get_invoice_service),
):
     try:
          return service.calculate_tenant_balance(tenant_id)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc


@router.get(
     "/{invoice_id}",
     response_model=InvoiceResponse,
     summary="Get invoice by ID"
)
def get_invoice(
     invoice_id: str,
     service: InvoiceService = Depends(get_invoice_service),
):
     try:
          invoice = service.get_invoice_by_id(invoice_id)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc
     if invoice is None:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail=f"Invoice with ID {invoice_id} not found"
          )
     return invoice


@router.patch(
     "/{invoice_id}/status",
     response_model=InvoiceResponse,
     summary="Update invoice status"
)
def update_invoice_status(
     invoice_id: str,
     update: InvoiceStatusUpdate,
     service: InvoiceService = Depends(get_invoice_service),
):
     """
     Move an invoice through pending -> paid / overdue -> paid.
     """
     try:
          return service.update_invoice_status(invoice_id, update.status.value)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc


@router.delete(
     "/{invoice_id}",
     status_code=status.HTTP_204_NO_CONTENT,
     summary="Delete invoice"
)
def delete_invoice(
     invoice_id: str,
     service: InvoiceService = Depends(get_invoice_service),
):
     """
     Delete an invoice and its rendered files.
     """
     try:
          deleted = service.delete_invoice(invoice_id)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc
     if not deleted:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail=f"Invoice with ID {invoice_id} not found"
          )
     return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{invoice_id}/pdf", summary="Download invoice PDF")
def download_invoice_pdf(
     invoice_id: str,
     service: InvoiceService = Depends(get_invoice_service),
):
     try:
          pdf = service.get_invoice_pdf(invoice_id)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc
     return Response(
          content=pdf.content,
          media_type="application/pdf",
          headers={"Content-Disposition": f'attachment; filename="{pdf.filename}"'},
     )


@router.get("/{invoice_id}/markdown", summary="Download invoice markdown")
def download_invoice_markdown(
     invoice_id: str,
     service: InvoiceService = Depends(get_invoice_service),
):
     try:
          markdown = service.get_invoice_markdown(invoice_id)
     except InvoiceEngineError as exc:
          raise _http_error(exc) from exc
     return Response(
          content=markdown.content,
          media_type="text/markdown; charset=utf-8",
          headers={"Content-Disposition": f'attachment; filename="{markdown.filename}"'},
     )
