from .invoice import (
     InvoiceStatusEnum,
     InvoiceCreate,
     InvoiceStatusUpdate,
     BatchJobRequest,
     InvoiceResponse,
     TenantBalanceResponse,
     InvoiceExportResponse,
)

__all__ = [
     "InvoiceStatusEnum",
     "InvoiceCreate",
     "InvoiceStatusUpdate",
     "BatchJobRequest",
     "InvoiceResponse",
     "TenantBalanceResponse",
     "InvoiceExportResponse",
]
