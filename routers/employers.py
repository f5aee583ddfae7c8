# routers/employers.py
"""
Employer API routes. Read access for every back-office role,
writes for super_admin / admin.

Fixed-prefix routes (/agent/..., /documents/...) are registered before
/{employer_id} so they are not captured by it.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import require_capability
from models import DocumentTarget
from permissions import Capability, Principal
from schemas.employer import (
     ConnectAgentRequest,
     ConnectCandidateRequest,
     EmployerAgentResponse,
     EmployerCreate,
     EmployerDocumentResponse,
     EmployerListResponse,
     EmployerResponse,
     EmployerUpdate,
     PlacementResponse,
)
from services import document_service, employer_service

router = APIRouter(prefix="/api/employers", tags=["employers"])


@router.get("", response_model=EmployerListResponse, summary="List employers")
def list_employers(
     search: Optional[str] = Query(None),
     page: int = Query(1, ge=1),
     page_size: int = Query(20, ge=1, le=100),
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_EMPLOYERS)),
):
     items, total = employer_service.list_employers(db, search=search, page=page, page_size=page_size)
     return EmployerListResponse(
          data=[EmployerResponse.model_validate(e) for e in items],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get("/agent/{agent_id}", response_model=List[EmployerAgentResponse], summary="Employers linked to an agent")
def list_agent_employers(
     agent_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_EMPLOYERS)),
):
     return employer_service.list_agent_employers(db, principal, agent_id)


@router.get(
     "/documents/agent/{agent_id}",
     response_model=List[EmployerDocumentResponse],
     summary="Employer documents shared with an agent",
)
def list_agent_documents(
     agent_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_EMPLOYERS)),
):
     return document_service.list_agent_employer_documents(db, principal, agent_id)


@router.get(
     "/documents/candidate/{candidate_id}",
     response_model=List[EmployerDocumentResponse],
     summary="Employer documents shared with a candidate",
)
def list_candidate_documents(
     candidate_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_EMPLOYERS)),
):
     return document_service.list_candidate_employer_documents(db, principal, candidate_id)


@router.delete("/documents/{document_id}", summary="Delete an employer document")
def delete_document(
     document_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_EMPLOYERS)),
):
     document_service.delete_employer_document(db, document_id)
     return {"message": "Document deleted successfully"}


@router.get("/{employer_id}", response_model=EmployerResponse, summary="Get employer")
def get_employer(
     employer_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_EMPLOYERS)),
):
     return employer_service.get_employer(db, employer_id)


@router.post("", response_model=EmployerResponse, status_code=status.HTTP_201_CREATED, summary="Create employer")
def create_employer(
     body: EmployerCreate,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_EMPLOYERS)),
):
     return employer_service.create_employer(db, body)


@router.put("/{employer_id}", response_model=EmployerResponse, summary="Update employer")
def update_employer(
     employer_id: int,
     body: EmployerUpdate,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_EMPLOYERS)),
):
     return employer_service.update_employer(db, employer_id, body)


@router.delete("/{employer_id}", summary="Soft delete employer")
def delete_employer(
     employer_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_EMPLOYERS)),
):
     employer_service.delete_employer(db, employer_id)
     return {"message": "Employer deleted successfully"}


@router.get("/{employer_id}/candidates", response_model=List[PlacementResponse], summary="Employer placements")
def list_employer_candidates(
     employer_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_EMPLOYERS)),
):
     return employer_service.list_employer_candidates(db, employer_id)


@router.post(
     "/{employer_id}/candidates",
     response_model=PlacementResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Connect a candidate",
)
def connect_candidate(
     employer_id: int,
     body: ConnectCandidateRequest,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_EMPLOYERS)),
):
     return employer_service.connect_candidate(db, employer_id, body)


@router.delete("/{employer_id}/candidates/{candidate_id}", summary="Disconnect a candidate")
def disconnect_candidate(
     employer_id: int,
     candidate_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_EMPLOYERS)),
):
     employer_service.disconnect_candidate(db, employer_id, candidate_id)
     return {"message": "Candidate disconnected successfully"}


@router.get("/{employer_id}/agents", response_model=List[EmployerAgentResponse], summary="Agents linked to an employer")
def list_employer_agents(
     employer_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_EMPLOYERS)),
):
     return employer_service.list_employer_agents(db, employer_id)


@router.post(
     "/{employer_id}/agents",
     response_model=EmployerAgentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Connect an agent",
)
def connect_agent(
     employer_id: int,
     body: ConnectAgentRequest,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_EMPLOYERS)),
):
     return employer_service.connect_agent(db, employer_id, body)


@router.delete("/{employer_id}/agents/{agent_id}", summary="Disconnect an agent")
def disconnect_agent(
     employer_id: int,
     agent_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_EMPLOYERS)),
):
     employer_service.disconnect_agent(db, employer_id, agent_id)
     return {"message": "Agent disconnected successfully"}


@router.post(
     "/{employer_id}/documents",
     response_model=EmployerDocumentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Share a document from an employer",
)
def upload_document(
     employer_id: int,
     file: UploadFile = File(...),
     target_type: DocumentTarget = Form(..., description="agent, candidate or all"),
     target_id: Optional[int] = Form(None),
     description: Optional[str] = Form(None),
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_EMPLOYERS)),
):
     return document_service.upload_employer_document(
          db, principal, employer_id, file, target_type, target_id=target_id, description=description,
     )
