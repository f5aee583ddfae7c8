# models/__init__.py
from .base import Base
from .user import User, UserRole
from .agent import Agent
from .package import Package
from .candidate import Candidate
from .candidate_document import CandidateDocument
from .agent_document import AgentDocument
from .employer import (
     DocumentTarget,
     Employer,
     EmployerAgent,
     EmployerAgentStatus,
     EmployerCandidate,
     EmployerDocument,
     PlacementStatus,
)
from .payment import Payment, PaymentMethod, PaymentType
from .ssl_transaction import SSLTransaction, SSLTransactionStatus

__all__ = [
     "Base",
     "User",
     "UserRole",
     "Agent",
     "Package",
     "Candidate",
     "CandidateDocument",
     "AgentDocument",
     "DocumentTarget",
     "Employer",
     "EmployerAgent",
     "EmployerAgentStatus",
     "EmployerCandidate",
     "EmployerDocument",
     "PlacementStatus",
     "Payment",
     "PaymentMethod",
     "PaymentType",
     "SSLTransaction",
     "SSLTransactionStatus",
]
