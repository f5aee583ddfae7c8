# schemas/dashboard.py
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class AgentCollection(BaseModel):
     id: int
     name: str
     candidate_count: int
     collection: Decimal


class DashboardStats(BaseModel):
     """Agents get only their own totals; privileged roles also get the agent breakdown."""
     total_candidates: int
     total_collection: Decimal
     total_due: Decimal
     total_agents: Optional[int] = None
     agent_wise_report: Optional[List[AgentCollection]] = None
