# schemas/employer.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from models.employer import DocumentTarget, EmployerAgentStatus, PlacementStatus


class EmployerBase(BaseModel):
     company_name: str = Field(..., min_length=1, max_length=255)
     company_address: Optional[str] = None
     contact_person: Optional[str] = Field(None, max_length=255)
     contact_email: Optional[str] = Field(None, max_length=255)
     contact_phone: Optional[str] = Field(None, max_length=20)
     country: Optional[str] = Field(None, max_length=100)
     industry: Optional[str] = Field(None, max_length=100)
     website: Optional[str] = Field(None, max_length=255)
     description: Optional[str] = None


class EmployerCreate(EmployerBase):
     model_config = ConfigDict(
          json_schema_extra={
               "example": {"company_name": "Gulf Builders LLC", "country": "UAE", "industry": "Construction"}
          }
     )


class EmployerUpdate(BaseModel):
     company_name: Optional[str] = Field(None, min_length=1, max_length=255)
     company_address: Optional[str] = None
     contact_person: Optional[str] = Field(None, max_length=255)
     contact_email: Optional[str] = Field(None, max_length=255)
     contact_phone: Optional[str] = Field(None, max_length=20)
     country: Optional[str] = Field(None, max_length=100)
     industry: Optional[str] = Field(None, max_length=100)
     website: Optional[str] = Field(None, max_length=255)
     description: Optional[str] = None


class EmployerResponse(EmployerBase):
     id: int
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class EmployerListResponse(BaseModel):
     data: List[EmployerResponse]
     total: int
     page: int = 1
     page_size: int = 20


class ConnectCandidateRequest(BaseModel):
     candidate_id: int = Field(..., gt=0)
     position: Optional[str] = Field(None, max_length=255)
     joining_date: Optional[date] = None
     salary: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     status: PlacementStatus = PlacementStatus.APPLIED


class PlacementResponse(BaseModel):
     employer_id: int
     candidate_id: int
     position: Optional[str] = None
     joining_date: Optional[date] = None
     salary: Optional[Decimal] = None
     status: PlacementStatus

     model_config = ConfigDict(from_attributes=True)


class ConnectAgentRequest(BaseModel):
     agent_id: int = Field(..., gt=0)
     status: EmployerAgentStatus = EmployerAgentStatus.ACTIVE


class EmployerAgentResponse(BaseModel):
     """One employer-agent link, with enough of both sides to render a list row."""
     employer_id: int
     agent_id: int
     company_name: Optional[str] = None
     country: Optional[str] = None
     industry: Optional[str] = None
     agent_name: Optional[str] = None
     status: EmployerAgentStatus
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class EmployerDocumentResponse(BaseModel):
     id: int
     employer_id: int
     company_name: Optional[str] = None
     document_name: str
     document_url: str
     file_size: Optional[int] = None
     mime_type: Optional[str] = None
     target_type: DocumentTarget
     target_id: Optional[int] = None
     description: Optional[str] = None
     uploaded_by: Optional[int] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)
