# models/ssl_transaction.py
import enum
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base


class SSLTransactionStatus(str, enum.Enum):
     """Gateway handshake status. Only PENDING is non-terminal."""
     PENDING = "pending"
     SUCCESS = "success"
     FAILED = "failed"
     CANCELLED = "cancelled"


class SSLTransaction(Base):
     """
     Gateway handshake record, created (pending) before the gateway is contacted.
     tran_id is generated by us and is the join key to the eventual Payment.
     """
     __tablename__ = "ssl_transactions"

     id = Column(Integer, primary_key=True, autoincrement=True)
     candidate_id = Column(
          Integer,
          ForeignKey("candidates.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     amount = Column(Numeric(12, 2), nullable=False)
     payment_type = Column(String(50), nullable=False)
     tran_id = Column(String(64), nullable=False, unique=True, index=True)
     status = Column(
          Enum(SSLTransactionStatus, name="ssl_transaction_status", values_callable=lambda e: [m.value for m in e]),
          default=SSLTransactionStatus.PENDING,
          nullable=False,
          index=True
     )
     val_id = Column(String(255), nullable=True)
     initiated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     candidate = relationship("Candidate")

     @property
     def is_terminal(self) -> bool:
          return self.status != SSLTransactionStatus.PENDING

     def __repr__(self):
          return f"<SSLTransaction(tran_id='{self.tran_id}', status='{self.status}', amount={self.amount})>"
