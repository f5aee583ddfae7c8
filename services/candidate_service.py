# services/candidate_service.py
"""
Candidate Service - Business logic layer for candidate operations.

Balance fields (total_paid, due_amount) are never assigned here directly;
package_amount changes go through ledger_service.recompute_due.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Candidate, Employer, EmployerCandidate, Package, User, UserRole
from permissions import Capability, Principal, ensure_candidate_access, has_capability
from services import ledger_service
from services.errors import ConflictError, NotFoundError, PermissionDenied, ValidationError

logger = logging.getLogger(__name__)


class CandidateService:
     """Service class for candidate-related business logic."""

     @staticmethod
     def _active_query(db: Session):
          return db.query(Candidate).filter(Candidate.is_deleted.is_(False))

     @staticmethod
     def _get_agent_user(db: Session, agent_id: int) -> User:
          agent = (
               db.query(User)
               .filter(User.id == agent_id, User.role == UserRole.AGENT, User.is_deleted.is_(False))
               .first()
          )
          if agent is None:
               raise ValidationError(f"Agent with ID {agent_id} not found")
          return agent

     @staticmethod
     def _resolve_package_amount(db: Session, package_amount: Optional[Decimal], package_id: Optional[int]) -> Decimal:
          """An explicit amount wins; otherwise the package's price; otherwise 0."""
          if package_amount is not None:
               return ledger_service.to_money(package_amount)
          if package_id is not None:
               package = (
                    db.query(Package)
                    .filter(Package.id == package_id, Package.is_deleted.is_(False))
                    .first()
               )
               if package is None:
                    raise ValidationError(f"Package with ID {package_id} not found")
               return ledger_service.to_money(package.amount)
          return ledger_service.to_money(0)

     @staticmethod
     def get_candidate(db: Session, principal: Principal, candidate_id: int) -> Candidate:
          """
          Fetch one active candidate the caller may see.

          Raises:
               NotFoundError: missing or soft-deleted
               PermissionDenied: agent asking for another agent's candidate
          """
          candidate = CandidateService._active_query(db).filter(Candidate.id == candidate_id).first()
          if candidate is None:
               raise NotFoundError("Candidate not found")
          ensure_candidate_access(principal, candidate)
          return candidate

     @staticmethod
     def list_candidates(
          db: Session,
          principal: Principal,
          search: Optional[str] = None,
          page: int = 1,
          page_size: int = 20,
     ) -> Tuple[List[Candidate], int]:
          query = CandidateService._active_query(db)
          if principal.is_agent:
               query = query.filter(Candidate.agent_id == principal.id)
          if search:
               pattern = f"%{search.strip()}%"
               query = query.filter(or_(Candidate.name.ilike(pattern), Candidate.passport_number.ilike(pattern)))

          total = query.count()
          items = (
               query.order_by(Candidate.created_at.desc(), Candidate.id.desc())
               .offset((page - 1) * page_size)
               .limit(page_size)
               .all()
          )
          return items, total

     @staticmethod
     def create_candidate(db: Session, principal: Principal, data) -> Candidate:
          """
          Create a candidate with due_amount == package_amount and nothing paid.

          Raises:
               ValidationError: unknown agent, package or employer
               ConflictError: passport number already registered
          """
          agent_id = principal.id if principal.is_agent else data.agent_id
          if agent_id is not None and not principal.is_agent:
               CandidateService._get_agent_user(db, agent_id)

          package_amount = CandidateService._resolve_package_amount(db, data.package_amount, data.package_id)

          candidate = Candidate(
               agent_id=agent_id,
               name=data.name.strip(),
               passport_number=data.passport_number.strip(),
               phone=data.phone,
               email=data.email,
               date_of_birth=data.date_of_birth,
               package_amount=package_amount,
               total_paid=Decimal("0"),
          )
          ledger_service.recompute_due(candidate)

          try:
               db.add(candidate)
               db.flush()
               if data.employer_id:
                    employer = (
                         db.query(Employer)
                         .filter(Employer.id == data.employer_id, Employer.is_deleted.is_(False))
                         .first()
                    )
                    if employer is None:
                         raise ValidationError(f"Employer with ID {data.employer_id} not found")
                    db.add(EmployerCandidate(employer_id=employer.id, candidate_id=candidate.id))
               db.commit()
          except IntegrityError:
               db.rollback()
               raise ConflictError("Passport number already exists")
          except Exception:
               db.rollback()
               raise

          db.refresh(candidate)
          logger.info("Candidate %s created by user %s (package %s)", candidate.id, principal.id, package_amount)
          return candidate

     @staticmethod
     def update_candidate(db: Session, principal: Principal, candidate_id: int, data) -> Candidate:
          """
          Partial update. Only roles with EDIT_PACKAGE_AMOUNT may change the
          package amount; due_amount is re-derived when they do.

          The row is locked before reading so a payment committed concurrently
          is either visible here or waits for this commit.
          """
          candidate = ledger_service.lock_candidate(db, candidate_id)
          if candidate is None:
               raise NotFoundError("Candidate not found")
          ensure_candidate_access(principal, candidate)
          changes = data.model_dump(exclude_unset=True)

          new_amount = changes.pop("package_amount", None)
          if new_amount is not None and ledger_service.to_money(new_amount) != ledger_service.to_money(candidate.package_amount):
               if not has_capability(principal.role, Capability.EDIT_PACKAGE_AMOUNT):
                    logger.warning("User %s (%s) tried to change package amount of candidate %s",
                                   principal.id, principal.role.value, candidate.id)
                    raise PermissionDenied()
               candidate.package_amount = ledger_service.to_money(new_amount)
               ledger_service.recompute_due(candidate)

          for field, value in changes.items():
               if value is None and field in ("name", "status"):
                    continue
               setattr(candidate, field, value)

          db.commit()
          db.refresh(candidate)
          return candidate

     @staticmethod
     def delete_candidate(db: Session, principal: Principal, candidate_id: int) -> None:
          """Soft delete; payments stay in the ledger."""
          candidate = CandidateService.get_candidate(db, principal, candidate_id)
          candidate.soft_delete()
          db.commit()
          logger.info("Candidate %s soft-deleted by user %s", candidate_id, principal.id)

     @staticmethod
     def assign_agent(db: Session, candidate_id: int, agent_id: int) -> Candidate:
          """
          Attach an agent to a candidate that has none.

          Raises:
               ValidationError: candidate already assigned, or agent unknown
          """
          candidate = CandidateService._active_query(db).filter(Candidate.id == candidate_id).first()
          if candidate is None:
               raise NotFoundError("Candidate not found")
          if candidate.agent_id is not None:
               raise ValidationError("Candidate is already assigned to an agent")
          CandidateService._get_agent_user(db, agent_id)

          candidate.agent_id = agent_id
          db.commit()
          db.refresh(candidate)
          logger.info("Candidate %s assigned to agent %s", candidate_id, agent_id)
          return candidate

     @staticmethod
     def unassign_agent(db: Session, candidate_id: int, agent_id: int) -> Candidate:
          candidate = CandidateService._active_query(db).filter(Candidate.id == candidate_id).first()
          if candidate is None:
               raise NotFoundError("Candidate not found")
          if candidate.agent_id != agent_id:
               raise NotFoundError("Agent is not connected to this candidate")
          candidate.agent_id = None
          db.commit()
          db.refresh(candidate)
          return candidate
