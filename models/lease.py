# models/lease.py
from sqlalchemy import Column, Integer, String, Numeric, Date, Text, DateTime, ForeignKey, func
from .base import Base


class Lease(Base):
     """
     Lease model - rental agreement between a tenant and a property.
     Read-only from the invoice engine's point of view.
     """
     __tablename__ = "leases"

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     unit_number = Column(String(50), nullable=True)

     # Pricing
     rent_price = Column(Numeric(12, 2), nullable=False)
     deposit_price = Column(Numeric(12, 2), nullable=True)

     # Lease period; an open-ended lease has no end date
     start_date = Column(Date, nullable=False)
     end_date = Column(Date, nullable=True)
     status = Column(String(50), default="active", nullable=False, index=True)  # active, ended, terminated

     tenancy_terms = Column(Text, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, onupdate=func.now(), nullable=True)

     def __repr__(self):
          return f"<Lease(id={self.id}, tenant_id={self.tenant_id}, property_id={self.property_id})>"
