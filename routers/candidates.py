# routers/candidates.py
"""
Candidate API routes.

Role-based access:
- super_admin / admin: everything
- data_entry: create and edit (not the package amount)
- agent: only candidates assigned to them
- accountant: read only
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import require_capability
from permissions import Capability, Principal
from schemas.candidate import (
     AssignAgentRequest,
     CandidateCreate,
     CandidateDocumentResponse,
     CandidateListResponse,
     CandidateResponse,
     CandidateUpdate,
)
from schemas.employer import PlacementResponse
from services import document_service, employer_service
from services.candidate_service import CandidateService

router = APIRouter(prefix="/api/candidates", tags=["candidates"])


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------

@router.get("", response_model=CandidateListResponse, summary="List candidates")
def list_candidates(
     search: Optional[str] = Query(None, description="Match on name or passport number"),
     page: int = Query(1, ge=1),
     page_size: int = Query(20, ge=1, le=100),
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_CANDIDATES)),
):
     items, total = CandidateService.list_candidates(db, principal, search=search, page=page, page_size=page_size)
     return CandidateListResponse(
          data=[CandidateResponse.model_validate(c) for c in items],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get("/{candidate_id}", response_model=CandidateResponse, summary="Get candidate")
def get_candidate(
     candidate_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_CANDIDATES)),
):
     return CandidateService.get_candidate(db, principal, candidate_id)


@router.post(
     "",
     response_model=CandidateResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create candidate",
)
def create_candidate(
     body: CandidateCreate,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.CREATE_CANDIDATE)),
):
     """due_amount starts equal to package_amount; total_paid starts at 0."""
     return CandidateService.create_candidate(db, principal, body)


@router.put("/{candidate_id}", response_model=CandidateResponse, summary="Update candidate")
def update_candidate(
     candidate_id: int,
     body: CandidateUpdate,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.EDIT_CANDIDATE)),
):
     return CandidateService.update_candidate(db, principal, candidate_id, body)


@router.delete("/{candidate_id}", summary="Soft delete candidate")
def delete_candidate(
     candidate_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.DELETE_CANDIDATE)),
):
     CandidateService.delete_candidate(db, principal, candidate_id)
     return {"message": "Candidate deleted successfully"}


@router.put("/{candidate_id}/assign-agent", response_model=CandidateResponse, summary="Assign an agent")
def assign_agent(
     candidate_id: int,
     body: AssignAgentRequest,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.ASSIGN_AGENT)),
):
     return CandidateService.assign_agent(db, candidate_id, body.agent_id)


@router.delete("/{candidate_id}/agents/{agent_id}", response_model=CandidateResponse, summary="Remove the agent")
def unassign_agent(
     candidate_id: int,
     agent_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.ASSIGN_AGENT)),
):
     return CandidateService.unassign_agent(db, candidate_id, agent_id)


@router.get("/{candidate_id}/employers", response_model=List[PlacementResponse], summary="Candidate placements")
def list_candidate_employers(
     candidate_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_CANDIDATES)),
):
     return employer_service.list_candidate_placements(db, principal, candidate_id)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@router.get(
     "/{candidate_id}/documents",
     response_model=List[CandidateDocumentResponse],
     summary="List candidate documents",
)
def list_documents(
     candidate_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_CANDIDATES)),
):
     return document_service.list_candidate_documents(db, principal, candidate_id)


@router.post(
     "/{candidate_id}/documents",
     response_model=CandidateDocumentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Upload a candidate document",
)
def upload_document(
     candidate_id: int,
     file: UploadFile = File(...),
     kind: str = Form("other", description="passport_copy, cv or other"),
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.UPLOAD_CANDIDATE_DOCUMENT)),
):
     return document_service.upload_candidate_document(db, principal, candidate_id, file, kind=kind)


@router.delete("/{candidate_id}/documents/{document_id}", summary="Delete a candidate document")
def delete_document(
     candidate_id: int,
     document_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.DELETE_CANDIDATE_DOCUMENT)),
):
     document_service.delete_candidate_document(db, principal, candidate_id, document_id)
     return {"message": "Document deleted successfully"}
