# models/__init__.py
from .base import Base
from .user import User
from .property import Property
from .lease import Lease
from .invoice import Invoice, InvoiceStatus

__all__ = [
     "Base",
     "User",
     "Property",
     "Lease",
     "Invoice",
     "InvoiceStatus",
]
