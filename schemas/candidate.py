# schemas/candidate.py
"""
Pydantic schemas for Candidate API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class CandidateCreate(BaseModel):
     """Schema for creating a candidate. package_amount wins over package_id when both are sent."""
     name: str = Field(..., min_length=1, max_length=255)
     passport_number: str = Field(..., min_length=1, max_length=50)
     phone: Optional[str] = Field(None, max_length=20)
     email: Optional[str] = Field(None, max_length=255)
     date_of_birth: Optional[date] = None
     package_amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     package_id: Optional[int] = Field(None, gt=0)
     agent_id: Optional[int] = Field(None, gt=0)
     employer_id: Optional[int] = Field(None, gt=0)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "name": "Rahim Uddin",
                    "passport_number": "A01234567",
                    "phone": "01711111111",
                    "email": "rahim@example.com",
                    "date_of_birth": "1995-04-12",
                    "package_amount": 100000.00,
                    "agent_id": 3,
               }
          }
     )


class CandidateUpdate(BaseModel):
     """Only provided fields are updated."""
     name: Optional[str] = Field(None, min_length=1, max_length=255)
     phone: Optional[str] = Field(None, max_length=20)
     email: Optional[str] = Field(None, max_length=255)
     date_of_birth: Optional[date] = None
     package_amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     status: Optional[str] = Field(None, max_length=50)
     notes: Optional[str] = None


class AssignAgentRequest(BaseModel):
     agent_id: int = Field(..., gt=0)


class CandidateResponse(BaseModel):
     id: int
     agent_id: Optional[int] = None
     agent_name: Optional[str] = None
     name: str
     passport_number: str
     phone: Optional[str] = None
     email: Optional[str] = None
     date_of_birth: Optional[date] = None
     package_amount: Decimal
     total_paid: Decimal
     due_amount: Decimal
     status: str
     passport_copy_url: Optional[str] = None
     cv_url: Optional[str] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class CandidateListResponse(BaseModel):
     data: List[CandidateResponse]
     total: int
     page: int = 1
     page_size: int = 20


class CandidateDocumentResponse(BaseModel):
     id: int
     candidate_id: int
     document_name: str
     document_url: str
     file_size: Optional[int] = None
     mime_type: Optional[str] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)
