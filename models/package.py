# models/package.py
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, func
from .base import Base, SoftDeleteMixin


class Package(SoftDeleteMixin, Base):
     """Service package sold to candidates; its amount seeds a candidate's package_amount."""
     __tablename__ = "packages"

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(255), nullable=False, unique=True, index=True)
     amount = Column(Numeric(12, 2), nullable=False)
     description = Column(Text, nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<Package(id={self.id}, name='{self.name}', amount={self.amount})>"
