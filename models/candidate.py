# models/candidate.py
from sqlalchemy import Column, Integer, String, Text, Numeric, Date, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin


class Candidate(SoftDeleteMixin, Base):
     """
     Candidate model - a job seeker processed by the agency.

     total_paid and due_amount are a cached snapshot of the payment ledger.
     They are written only through services.ledger_service so that
     due_amount == package_amount - total_paid holds after every write.
     """
     __tablename__ = "candidates"

     id = Column(Integer, primary_key=True, autoincrement=True)
     agent_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

     # Identity
     name = Column(String(255), nullable=False)
     passport_number = Column(String(50), nullable=False, unique=True, index=True)
     phone = Column(String(20), nullable=True)
     email = Column(String(255), nullable=True)
     date_of_birth = Column(Date, nullable=True)

     # Balance cache
     package_amount = Column(Numeric(12, 2), default=0, nullable=False)
     total_paid = Column(Numeric(12, 2), default=0, nullable=False)
     due_amount = Column(Numeric(12, 2), default=0, nullable=False)

     status = Column(String(50), default="pending", nullable=False, index=True)
     passport_copy_url = Column(String(500), nullable=True)
     cv_url = Column(String(500), nullable=True)
     notes = Column(Text, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     agent = relationship("User", back_populates="candidates")
     payments = relationship("Payment", back_populates="candidate", order_by="Payment.id")
     documents = relationship("CandidateDocument", back_populates="candidate")
     employer_links = relationship("EmployerCandidate", back_populates="candidate")

     @property
     def agent_name(self):
          return self.agent.name if self.agent is not None else None

     def __repr__(self):
          return f"<Candidate(id={self.id}, name='{self.name}', due={self.due_amount})>"
