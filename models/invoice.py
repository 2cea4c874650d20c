# models/invoice.py
import enum
from sqlalchemy import (
     Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, Enum, UniqueConstraint,
)
from .base import Base


class InvoiceStatus(str, enum.Enum):
     """Enumeration for invoice payment status."""
     PENDING = "pending"
     PAID = "paid"
     OVERDUE = "overdue"


class Invoice(Base):
     """
     Invoice model - one billable record per tenant per billing period.

     The billing period is the (month, year) pair; the unique constraint
     backs the lookup-before-insert guard in the invoice service.
     """
     __tablename__ = "invoices"
     __table_args__ = (
          UniqueConstraint("tenant_id", "month", "year", name="uq_invoices_tenant_period"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_number = Column(String(50), nullable=False, unique=True, index=True)

     # References (denormalized display fields are snapshotted at creation)
     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
     tenant_name = Column(String(200), nullable=False, default="Tenant")
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=True, index=True)
     property_name = Column(String(255), nullable=True)
     property_address = Column(String(500), nullable=True)
     manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
     lease_id = Column(Integer, ForeignKey("leases.id"), nullable=True, index=True)

     # Invoice details
     amount = Column(Numeric(12, 2), nullable=False)
     issue_date = Column(Date, nullable=False)
     due_date = Column(Date, nullable=False, index=True)
     status = Column(
          Enum(
               InvoiceStatus,
               name="invoice_status",
               native_enum=False,
               create_constraint=True,
               values_callable=lambda statuses: [s.value for s in statuses],
          ),
          default=InvoiceStatus.PENDING,
          nullable=False,
          index=True
     )
     description = Column(Text, nullable=True)
     month = Column(String(20), nullable=False)
     year = Column(Integer, nullable=False)
     source = Column(String(20), default="manual", nullable=False)  # manual, lease

     # Rendered artifacts
     markdown_path = Column(String(500), nullable=True)
     pdf_path = Column(String(500), nullable=True)

     # Timestamps
     created_at = Column(DateTime(timezone=True), nullable=False)
     updated_at = Column(DateTime(timezone=True), nullable=False)
     paid_at = Column(DateTime(timezone=True), nullable=True)
     overdue_at = Column(DateTime(timezone=True), nullable=True)

     def __repr__(self):
          return f"<Invoice(id={self.id}, number='{self.invoice_number}', status='{self.status}', due_date={self.due_date})>"
