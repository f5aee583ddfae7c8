# models/candidate_document.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class CandidateDocument(Base):
     __tablename__ = "candidate_documents"

     id = Column(Integer, primary_key=True, autoincrement=True)
     candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
     document_name = Column(String(255), nullable=False)
     document_url = Column(String(500), nullable=False)
     file_size = Column(Integer, nullable=True)
     mime_type = Column(String(100), nullable=True)
     uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     candidate = relationship("Candidate", back_populates="documents")

     def __repr__(self):
          return f"<CandidateDocument(id={self.id}, candidate_id={self.candidate_id}, name='{self.document_name}')>"
