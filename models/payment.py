# models/payment.py
"""
Payment model - one immutable row per money-in event.

Rows are append-only; the application never updates or deletes them.
transaction_id is UNIQUE so a second credit for the same gateway
transaction fails at the storage layer.
"""
import enum
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base


class PaymentMethod(str, enum.Enum):
     CASH = "cash"
     SSLCOMMERZ = "sslcommerz"


class PaymentType(str, enum.Enum):
     """Category tag attached to a payment."""
     VISA = "visa"
     MEDICAL = "medical"
     TICKET = "ticket"
     SERVICE = "service"


class Payment(Base):
     __tablename__ = "payments"

     id = Column(Integer, primary_key=True, autoincrement=True)
     candidate_id = Column(
          Integer,
          ForeignKey("candidates.id", ondelete="RESTRICT"),
          nullable=False,
          index=True
     )
     amount = Column(Numeric(12, 2), nullable=False)
     payment_type = Column(String(50), nullable=False, index=True)
     payment_method = Column(
          Enum(PaymentMethod, name="payment_method", values_callable=lambda e: [m.value for m in e]),
          nullable=False,
     )
     transaction_id = Column(String(255), nullable=True, unique=True, index=True)
     notes = Column(Text, nullable=True)
     recorded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     candidate = relationship("Candidate", back_populates="payments")

     def __repr__(self):
          return f"<Payment(id={self.id}, candidate_id={self.candidate_id}, amount={self.amount}, method='{self.payment_method}')>"
