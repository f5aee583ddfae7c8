# models/agent.py
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class Agent(Base):
     """
     Agent profile - extended details for users with role='agent'.
     """
     __tablename__ = "agents"

     id = Column(Integer, primary_key=True, autoincrement=True)
     user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
     phone = Column(String(20), nullable=True)
     address = Column(Text, nullable=True)
     commission_rate = Column(Numeric(5, 2), default=0, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     user = relationship("User", back_populates="agent_profile")

     def __repr__(self):
          return f"<Agent(id={self.id}, user_id={self.user_id})>"
