# routers/agents.py
from typing import List

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import require_capability
from permissions import Capability, Principal
from schemas.agent import (
     AgentDocumentResponse,
     AgentListResponse,
     AgentProfileResponse,
     AgentSummary,
     AgentUpdate,
)
from services import agent_service, document_service

router = APIRouter(prefix="/api/agents", tags=["agents"])


@router.get("", response_model=AgentListResponse, summary="List agents with candidate counts")
def list_agents(
     page: int = Query(1, ge=1),
     page_size: int = Query(20, ge=1, le=100),
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_AGENTS)),
):
     items, total = agent_service.list_agents(db, page=page, page_size=page_size)
     return AgentListResponse(data=items, total=total, page=page, page_size=page_size)


@router.get("/{agent_id}", response_model=AgentProfileResponse, summary="Agent profile with candidates")
def get_agent(
     agent_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_AGENT_PROFILE)),
):
     return agent_service.get_agent_profile(db, principal, agent_id)


@router.put("/{agent_id}", response_model=AgentSummary, summary="Update agent")
def update_agent(
     agent_id: int,
     body: AgentUpdate,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.EDIT_AGENT)),
):
     return agent_service.update_agent(db, agent_id, body)


@router.get("/{agent_id}/documents", response_model=List[AgentDocumentResponse], summary="List agent documents")
def list_documents(
     agent_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_AGENT_PROFILE)),
):
     return document_service.list_agent_documents(db, principal, agent_id)


@router.post(
     "/{agent_id}/documents",
     response_model=AgentDocumentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Upload an agent document",
)
def upload_document(
     agent_id: int,
     file: UploadFile = File(...),
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_AGENT_DOCUMENTS)),
):
     return document_service.upload_agent_document(db, principal, agent_id, file)


@router.delete("/{agent_id}/documents/{document_id}", summary="Delete an agent document")
def delete_document(
     agent_id: int,
     document_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_AGENT_DOCUMENTS)),
):
     document_service.delete_agent_document(db, principal, agent_id, document_id)
     return {"message": "Document deleted successfully"}
