# models/agent_document.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from .base import Base


class AgentDocument(Base):
     """Extra file attached to an agent's profile (licence, contract, ...)."""
     __tablename__ = "agent_documents"

     id = Column(Integer, primary_key=True, autoincrement=True)
     agent_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
     document_name = Column(String(255), nullable=False)
     document_url = Column(String(500), nullable=False)
     file_size = Column(Integer, nullable=True)
     mime_type = Column(String(100), nullable=True)
     uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<AgentDocument(id={self.id}, agent_id={self.agent_id}, name='{self.document_name}')>"
