# schemas/agent.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from schemas.candidate import CandidateResponse


class AgentSummary(BaseModel):
     id: int
     name: str
     email: str
     phone: Optional[str] = None
     address: Optional[str] = None
     commission_rate: Decimal = Decimal("0")
     candidate_count: int = 0


class AgentListResponse(BaseModel):
     data: List[AgentSummary]
     total: int
     page: int = 1
     page_size: int = 20


class AgentProfileResponse(BaseModel):
     agent: AgentSummary
     candidates: List[CandidateResponse]


class AgentUpdate(BaseModel):
     name: Optional[str] = Field(None, min_length=1, max_length=255)
     email: Optional[str] = Field(None, max_length=255)
     phone: Optional[str] = Field(None, max_length=20)
     address: Optional[str] = None
     commission_rate: Optional[Decimal] = Field(None, ge=0, le=100, max_digits=5, decimal_places=2)

     model_config = ConfigDict(
          json_schema_extra={"example": {"phone": "01800000000", "commission_rate": 5.00}}
     )


class AgentDocumentResponse(BaseModel):
     id: int
     agent_id: int
     document_name: str
     document_url: str
     file_size: Optional[int] = None
     mime_type: Optional[str] = None
     uploaded_by: Optional[int] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)
