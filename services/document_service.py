# services/document_service.py
"""
Document uploads: candidate files, agent profile files, and files an
employer shares with its agents or candidates.

Files are written under settings.UPLOAD_DIR and served by the /uploads
static mount; only the metadata row lives in the database.
"""
import logging
import os
import shutil
import uuid
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from config import settings
from models import (
     AgentDocument,
     Candidate,
     CandidateDocument,
     DocumentTarget,
     Employer,
     EmployerAgent,
     EmployerAgentStatus,
     EmployerCandidate,
     EmployerDocument,
)
from permissions import Principal, ensure_agent_self, ensure_candidate_access
from services.agent_service import get_agent_user
from services.employer_service import get_employer
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Upload kinds that also set a shortcut URL on the candidate row.
PROFILE_FIELDS = {
     "passport_copy": "passport_copy_url",
     "cv": "cv_url",
}
DOCUMENT_KINDS = set(PROFILE_FIELDS) | {"other"}


def _candidate(db: Session, principal: Principal, candidate_id: int) -> Candidate:
     candidate = (
          db.query(Candidate)
          .filter(Candidate.id == candidate_id, Candidate.is_deleted.is_(False))
          .first()
     )
     if candidate is None:
          raise NotFoundError("Candidate not found")
     ensure_candidate_access(principal, candidate)
     return candidate


def save_upload(upload: UploadFile) -> tuple:
     """Copy the upload to UPLOAD_DIR. Returns (public url, size in bytes)."""
     os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
     original = os.path.basename(upload.filename or "file").replace(" ", "_")
     filename = f"{uuid.uuid4()}_{original}"
     file_path = os.path.join(settings.UPLOAD_DIR, filename)
     with open(file_path, "wb") as buffer:
          shutil.copyfileobj(upload.file, buffer)

     size = os.path.getsize(file_path)
     if size > settings.MAX_UPLOAD_BYTES:
          os.remove(file_path)
          raise ValidationError(f"File too large (max {settings.MAX_UPLOAD_BYTES} bytes)")
     return f"/uploads/{filename}", size


def _remove_file(url: str) -> None:
     path = os.path.join(settings.UPLOAD_DIR, os.path.basename(url))
     try:
          os.remove(path)
     except FileNotFoundError:
          pass
     except OSError as e:
          logger.warning("Could not remove upload %s: %s", path, e)


def _commit_upload(db: Session, url: str) -> None:
     """Commit the metadata row; drop the stored file if that fails."""
     try:
          db.commit()
     except Exception:
          db.rollback()
          _remove_file(url)
          raise


def upload_candidate_document(
     db: Session,
     principal: Principal,
     candidate_id: int,
     upload: UploadFile,
     kind: str = "other",
) -> CandidateDocument:
     if kind not in DOCUMENT_KINDS:
          raise ValidationError(f"Unknown document kind '{kind}'")
     if upload is None or not upload.filename:
          raise ValidationError("No file uploaded")

     candidate = _candidate(db, principal, candidate_id)
     url, size = save_upload(upload)

     document = CandidateDocument(
          candidate_id=candidate.id,
          document_name=upload.filename,
          document_url=url,
          file_size=size,
          mime_type=upload.content_type,
          uploaded_by=principal.id,
     )
     db.add(document)
     if kind in PROFILE_FIELDS:
          setattr(candidate, PROFILE_FIELDS[kind], url)
     _commit_upload(db, url)

     db.refresh(document)
     logger.info("Document %s (%s) uploaded for candidate %s", document.id, kind, candidate.id)
     return document


def list_candidate_documents(db: Session, principal: Principal, candidate_id: int) -> List[CandidateDocument]:
     _candidate(db, principal, candidate_id)
     return (
          db.query(CandidateDocument)
          .filter(CandidateDocument.candidate_id == candidate_id)
          .order_by(CandidateDocument.created_at.desc(), CandidateDocument.id.desc())
          .all()
     )


def delete_candidate_document(db: Session, principal: Principal, candidate_id: int, document_id: int) -> None:
     candidate = _candidate(db, principal, candidate_id)
     document = (
          db.query(CandidateDocument)
          .filter(CandidateDocument.id == document_id, CandidateDocument.candidate_id == candidate.id)
          .first()
     )
     if document is None:
          raise NotFoundError("Document not found")

     url = document.document_url
     for field in PROFILE_FIELDS.values():
          if getattr(candidate, field) == url:
               setattr(candidate, field, None)
     db.delete(document)
     db.commit()
     _remove_file(url)


# ---------------------------------------------------------------------------
# Agent profile documents
# ---------------------------------------------------------------------------

def upload_agent_document(db: Session, principal: Principal, agent_id: int, upload: UploadFile) -> AgentDocument:
     ensure_agent_self(principal, agent_id)
     if upload is None or not upload.filename:
          raise ValidationError("No file uploaded")
     agent = get_agent_user(db, agent_id)
     url, size = save_upload(upload)

     document = AgentDocument(
          agent_id=agent.id,
          document_name=upload.filename,
          document_url=url,
          file_size=size,
          mime_type=upload.content_type,
          uploaded_by=principal.id,
     )
     db.add(document)
     _commit_upload(db, url)
     db.refresh(document)
     logger.info("Document %s uploaded for agent %s", document.id, agent.id)
     return document


def list_agent_documents(db: Session, principal: Principal, agent_id: int) -> List[AgentDocument]:
     ensure_agent_self(principal, agent_id)
     get_agent_user(db, agent_id)
     return (
          db.query(AgentDocument)
          .filter(AgentDocument.agent_id == agent_id)
          .order_by(AgentDocument.created_at.desc(), AgentDocument.id.desc())
          .all()
     )


def delete_agent_document(db: Session, principal: Principal, agent_id: int, document_id: int) -> None:
     ensure_agent_self(principal, agent_id)
     document = (
          db.query(AgentDocument)
          .filter(AgentDocument.id == document_id, AgentDocument.agent_id == agent_id)
          .first()
     )
     if document is None:
          raise NotFoundError("Document not found")
     url = document.document_url
     db.delete(document)
     db.commit()
     _remove_file(url)


# ---------------------------------------------------------------------------
# Employer documents
# ---------------------------------------------------------------------------

def upload_employer_document(
     db: Session,
     principal: Principal,
     employer_id: int,
     upload: UploadFile,
     target_type: DocumentTarget,
     target_id: Optional[int] = None,
     description: Optional[str] = None,
) -> EmployerDocument:
     """
     Share a file from an employer with one agent, one candidate, or
     everyone connected to the employer (target_type ALL).

     Raises:
          ValidationError: no file, or a targeted document without target_id
          NotFoundError: employer, agent or candidate missing
     """
     if upload is None or not upload.filename:
          raise ValidationError("No file uploaded")
     employer = get_employer(db, employer_id)

     if target_type == DocumentTarget.ALL:
          target_id = None
     elif target_id is None:
          raise ValidationError(f"target_id is required for target_type '{target_type.value}'")
     elif target_type == DocumentTarget.AGENT:
          get_agent_user(db, target_id)
     else:
          exists = (
               db.query(Candidate.id)
               .filter(Candidate.id == target_id, Candidate.is_deleted.is_(False))
               .first()
          )
          if exists is None:
               raise NotFoundError("Candidate not found")

     url, size = save_upload(upload)
     document = EmployerDocument(
          employer_id=employer.id,
          document_name=upload.filename,
          document_url=url,
          file_size=size,
          mime_type=upload.content_type,
          target_type=target_type,
          target_id=target_id,
          description=description,
          uploaded_by=principal.id,
     )
     db.add(document)
     _commit_upload(db, url)
     db.refresh(document)
     logger.info(
          "Employer %s document %s shared with %s %s",
          employer.id, document.id, target_type.value, target_id if target_id is not None else "",
     )
     return document


def _employer_documents_for(db: Session, target_type: DocumentTarget, target_id: int, linked_employers):
     return (
          db.query(EmployerDocument)
          .join(Employer, Employer.id == EmployerDocument.employer_id)
          .filter(
               Employer.is_deleted.is_(False),
               or_(
                    and_(EmployerDocument.target_type == target_type, EmployerDocument.target_id == target_id),
                    and_(
                         EmployerDocument.target_type == DocumentTarget.ALL,
                         EmployerDocument.employer_id.in_(linked_employers),
                    ),
               ),
          )
          .order_by(EmployerDocument.created_at.desc(), EmployerDocument.id.desc())
          .all()
     )


def list_agent_employer_documents(db: Session, principal: Principal, agent_id: int) -> List[EmployerDocument]:
     """Documents addressed to the agent plus 'all' documents of employers it is actively linked to."""
     ensure_agent_self(principal, agent_id)
     linked = select(EmployerAgent.employer_id).where(
          EmployerAgent.agent_id == agent_id, EmployerAgent.status == EmployerAgentStatus.ACTIVE
     )
     return _employer_documents_for(db, DocumentTarget.AGENT, agent_id, linked)


def list_candidate_employer_documents(
     db: Session, principal: Principal, candidate_id: int
) -> List[EmployerDocument]:
     """Documents addressed to the candidate plus 'all' documents of employers it is placed with."""
     _candidate(db, principal, candidate_id)
     linked = select(EmployerCandidate.employer_id).where(EmployerCandidate.candidate_id == candidate_id)
     return _employer_documents_for(db, DocumentTarget.CANDIDATE, candidate_id, linked)


def delete_employer_document(db: Session, document_id: int) -> None:
     document = db.query(EmployerDocument).filter(EmployerDocument.id == document_id).first()
     if document is None:
          raise NotFoundError("Document not found")
     url = document.document_url
     db.delete(document)
     db.commit()
     _remove_file(url)
     logger.info("Employer document %s deleted", document_id)
