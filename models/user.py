# models/user.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin


class UserRole(str, enum.Enum):
     """Closed set of roles a back-office user can hold."""
     SUPER_ADMIN = "super_admin"
     ADMIN = "admin"
     AGENT = "agent"
     ACCOUNTANT = "accountant"
     DATA_ENTRY = "data_entry"


class User(SoftDeleteMixin, Base):
     """
     User model - central authentication table.
     Agents are users with role='agent' plus an Agent profile row.
     """
     __tablename__ = "users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(255), nullable=False)
     email = Column(String(255), unique=True, nullable=False, index=True)
     password = Column(String(255), nullable=False)
     role = Column(
          Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
          nullable=False,
          index=True,
     )
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     agent_profile = relationship("Agent", back_populates="user", uselist=False)
     candidates = relationship("Candidate", back_populates="agent")

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
