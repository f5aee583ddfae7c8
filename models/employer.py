# models/employer.py
import enum
from sqlalchemy import (
     Column, Integer, String, Text, Numeric, Date, DateTime, ForeignKey, Enum, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin


class PlacementStatus(str, enum.Enum):
     APPLIED = "applied"
     SELECTED = "selected"
     WORKING = "working"
     COMPLETED = "completed"
     TERMINATED = "terminated"


class EmployerAgentStatus(str, enum.Enum):
     ACTIVE = "active"
     INACTIVE = "inactive"


class DocumentTarget(str, enum.Enum):
     """Who an employer document is shared with."""
     AGENT = "agent"
     CANDIDATE = "candidate"
     ALL = "all"


class Employer(SoftDeleteMixin, Base):
     """
     Employer model - overseas company that recruits candidates.
     """
     __tablename__ = "employers"

     id = Column(Integer, primary_key=True, autoincrement=True)
     company_name = Column(String(255), nullable=False, index=True)
     company_address = Column(Text, nullable=True)
     contact_person = Column(String(255), nullable=True)
     contact_email = Column(String(255), nullable=True)
     contact_phone = Column(String(20), nullable=True)
     country = Column(String(100), nullable=True, index=True)
     industry = Column(String(100), nullable=True)
     website = Column(String(255), nullable=True)
     description = Column(Text, nullable=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     candidate_links = relationship("EmployerCandidate", back_populates="employer")
     agent_links = relationship("EmployerAgent", back_populates="employer")
     documents = relationship("EmployerDocument", back_populates="employer")

     def __repr__(self):
          return f"<Employer(id={self.id}, company_name='{self.company_name}')>"


class EmployerCandidate(Base):
     """Placement of a candidate with an employer."""
     __tablename__ = "employer_candidates"
     __table_args__ = (
          UniqueConstraint("employer_id", "candidate_id", name="uq_employer_candidate"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     employer_id = Column(Integer, ForeignKey("employers.id", ondelete="CASCADE"), nullable=False, index=True)
     candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
     position = Column(String(255), nullable=True)
     joining_date = Column(Date, nullable=True)
     salary = Column(Numeric(12, 2), nullable=True)
     status = Column(
          Enum(PlacementStatus, name="placement_status", values_callable=lambda e: [m.value for m in e]),
          default=PlacementStatus.APPLIED,
          nullable=False,
     )
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     employer = relationship("Employer", back_populates="candidate_links")
     candidate = relationship("Candidate", back_populates="employer_links")


class EmployerAgent(Base):
     """An agent who sources candidates for an employer."""
     __tablename__ = "employer_agents"
     __table_args__ = (
          UniqueConstraint("employer_id", "agent_id", name="uq_employer_agent"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     employer_id = Column(Integer, ForeignKey("employers.id", ondelete="CASCADE"), nullable=False, index=True)
     agent_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
     status = Column(
          Enum(EmployerAgentStatus, name="employer_agent_status", values_callable=lambda e: [m.value for m in e]),
          default=EmployerAgentStatus.ACTIVE,
          nullable=False,
     )
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     employer = relationship("Employer", back_populates="agent_links")
     agent = relationship("User")

     @property
     def company_name(self):
          return self.employer.company_name if self.employer else None

     @property
     def country(self):
          return self.employer.country if self.employer else None

     @property
     def industry(self):
          return self.employer.industry if self.employer else None

     @property
     def agent_name(self):
          return self.agent.name if self.agent else None


class EmployerDocument(Base):
     """
     File an employer shares with one agent, one candidate, or everyone
     connected to it (target_type 'all', target_id NULL).
     """
     __tablename__ = "employer_documents"

     id = Column(Integer, primary_key=True, autoincrement=True)
     employer_id = Column(Integer, ForeignKey("employers.id", ondelete="CASCADE"), nullable=False, index=True)
     document_name = Column(String(255), nullable=False)
     document_url = Column(String(500), nullable=False)
     file_size = Column(Integer, nullable=True)
     mime_type = Column(String(100), nullable=True)
     target_type = Column(
          Enum(DocumentTarget, name="document_target", values_callable=lambda e: [m.value for m in e]),
          nullable=False,
          index=True,
     )
     target_id = Column(Integer, nullable=True, index=True)
     description = Column(Text, nullable=True)
     uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     employer = relationship("Employer", back_populates="documents")

     @property
     def company_name(self):
          return self.employer.company_name if self.employer else None

     def __repr__(self):
          return f"<EmployerDocument(id={self.id}, employer_id={self.employer_id}, target={self.target_type})>"
