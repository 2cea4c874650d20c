# schemas/invoice.py
"""
Pydantic schemas for Invoice API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Union
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum

ReferenceField = Optional[Union[int, str]]


class InvoiceStatusEnum(str, Enum):
     """Invoice payment status options."""
     PENDING = "pending"
     PAID = "paid"
     OVERDUE = "overdue"


class InvoiceCreate(BaseModel):
     """Schema for creating a new invoice. Omitted fields are derived."""
     tenant_id: ReferenceField = Field(None, description="Tenant (user) ID; enables per-period de-duplication")
     tenant_name: Optional[str] = Field(None, max_length=200)
     property_id: ReferenceField = None
     property_name: Optional[str] = Field(None, max_length=255)
     property_address: Optional[str] = Field(None, max_length=500)
     manager_id: ReferenceField = None
     lease_id: ReferenceField = None
     amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Invoice amount")
     issue_date: Optional[date] = Field(None, description="Defaults to today")
     due_date: Optional[date] = Field(None, description="Defaults to the first day of the next month")
     month: Optional[str] = Field(None, max_length=20, description="Billing month label, e.g. March")
     year: Optional[int] = Field(None, ge=1900, le=9999)
     invoice_number: Optional[str] = Field(None, max_length=50)
     description: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "tenant_id": "1",
                    "property_id": "1",
                    "lease_id": "1",
                    "amount": 5000.00,
                    "issue_date": "2026-03-15"
               }
          }
     )


class InvoiceStatusUpdate(BaseModel):
     """Schema for a manual status transition."""
     status: InvoiceStatusEnum

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "status": "paid"
               }
          }
     )


class BatchJobRequest(BaseModel):
     """Optional manager scope for the batch jobs."""
     manager_id: ReferenceField = None


class InvoiceResponse(BaseModel):
     """Schema for invoice response."""
     id: str
     invoice_number: str
     tenant_id: Optional[str] = None
     tenant_name: str
     property_id: Optional[str] = None
     property_name: Optional[str] = None
     property_address: Optional[str] = None
     manager_id: Optional[str] = None
     lease_id: Optional[str] = None
     amount: Decimal
     issue_date: date
     due_date: date
     status: InvoiceStatusEnum
     description: Optional[str] = None
     month: str
     year: int
     source: str
     created_at: datetime
     updated_at: datetime
     paid_at: Optional[datetime] = None
     overdue_at: Optional[datetime] = None
     pdf_url: str
     markdown_url: str
     overdue_days: Optional[int] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "id": "1",
                    "invoice_number": "INV-20260315103000",
                    "tenant_id": "1",
                    "tenant_name": "John Doe",
                    "property_id": "1",
                    "property_name": "Sunset Condos",
                    "amount": "5000.00",
                    "issue_date": "2026-03-15",
                    "due_date": "2026-04-01",
                    "status": "pending",
                    "description": "Monthly rent for March 2026",
                    "month": "March",
                    "year": 2026,
                    "source": "manual",
                    "created_at": "2026-03-15T10:30:00",
                    "updated_at": "2026-03-15T10:30:00",
                    "pdf_url": "/invoices/1/pdf",
                    "markdown_url": "/invoices/1/markdown"
               }
          }
     )


class TenantBalanceResponse(BaseModel):
     """Schema for a tenant's balance summary."""
     tenant_id: str
     total_owed: float
     pending_amount: float
     overdue_amount: float
     paid_amount: float
     total_invoices: int
     pending_count: int
     overdue_count: int
     paid_count: int


class InvoiceExportSummary(BaseModel):
     total_amount: float
     pending_count: int
     paid_count: int
     overdue_count: int


class InvoiceExportResponse(BaseModel):
     """Schema for the invoice export document."""
     export_date: datetime
     total_invoices: int
     summary: InvoiceExportSummary
     invoices: List[InvoiceResponse]
