# models/base.py
from datetime import datetime

from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import Column, Boolean, DateTime


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Every model names its table explicitly with __tablename__.
     """


class SoftDeleteMixin:
     """
     Rows are flagged instead of removed so reports keep their history.
     """
     is_deleted = Column(Boolean, default=False, nullable=False, index=True)
     deleted_at = Column(DateTime, nullable=True)

     def soft_delete(self) -> None:
          self.is_deleted = True
          self.deleted_at = datetime.utcnow()
