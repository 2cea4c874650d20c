# models/property.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from .base import Base


class Property(Base):
     """
     Property model - a building or house under management.
     The manager reference drives manager-scoped invoice queries.
     """
     __tablename__ = "properties"

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_name = Column(String(255), nullable=False)
     address = Column(String(500), nullable=True)
     manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
     description = Column(Text, nullable=True)
     units = Column(Integer, default=0, nullable=False)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, onupdate=func.now(), nullable=True)

     def __repr__(self):
          return f"<Property(id={self.id}, name='{self.property_name}')>"
