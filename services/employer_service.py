# services/employer_service.py
"""
Employer Service - overseas employers, the agents who source for them,
and candidate placements.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models import Candidate, Employer, EmployerAgent, EmployerCandidate
from permissions import Principal, ensure_agent_self, ensure_candidate_access
from services.agent_service import get_agent_user
from services.errors import NotFoundError

logger = logging.getLogger(__name__)


def _active(db: Session):
     return db.query(Employer).filter(Employer.is_deleted.is_(False))


def get_employer(db: Session, employer_id: int) -> Employer:
     employer = _active(db).filter(Employer.id == employer_id).first()
     if employer is None:
          raise NotFoundError("Employer not found")
     return employer


def list_employers(
     db: Session,
     search: Optional[str] = None,
     page: int = 1,
     page_size: int = 20,
) -> Tuple[List[Employer], int]:
     query = _active(db)
     if search:
          pattern = f"%{search.strip()}%"
          query = query.filter(or_(Employer.company_name.ilike(pattern), Employer.country.ilike(pattern)))
     total = query.count()
     items = (
          query.order_by(Employer.created_at.desc(), Employer.id.desc())
          .offset((page - 1) * page_size)
          .limit(page_size)
          .all()
     )
     return items, total


def create_employer(db: Session, data) -> Employer:
     employer = Employer(**data.model_dump())
     db.add(employer)
     db.commit()
     db.refresh(employer)
     logger.info("Employer %s (%s) created", employer.id, employer.company_name)
     return employer


def update_employer(db: Session, employer_id: int, data) -> Employer:
     employer = get_employer(db, employer_id)
     for field, value in data.model_dump(exclude_unset=True).items():
          if field == "company_name" and not value:
               continue
          setattr(employer, field, value)
     db.commit()
     db.refresh(employer)
     return employer


def delete_employer(db: Session, employer_id: int) -> None:
     employer = get_employer(db, employer_id)
     employer.soft_delete()
     db.commit()
     logger.info("Employer %s soft-deleted", employer_id)


def connect_candidate(db: Session, employer_id: int, data) -> EmployerCandidate:
     """Create or update the placement of a candidate with an employer."""
     employer = get_employer(db, employer_id)
     candidate = (
          db.query(Candidate)
          .filter(Candidate.id == data.candidate_id, Candidate.is_deleted.is_(False))
          .first()
     )
     if candidate is None:
          raise NotFoundError("Candidate not found")

     link = (
          db.query(EmployerCandidate)
          .filter(EmployerCandidate.employer_id == employer.id, EmployerCandidate.candidate_id == candidate.id)
          .first()
     )
     if link is None:
          link = EmployerCandidate(employer_id=employer.id, candidate_id=candidate.id)
          db.add(link)
     link.position = data.position
     link.joining_date = data.joining_date
     link.salary = data.salary
     link.status = data.status

     db.commit()
     db.refresh(link)
     logger.info("Candidate %s connected to employer %s (%s)", candidate.id, employer.id, link.status.value)
     return link


def disconnect_candidate(db: Session, employer_id: int, candidate_id: int) -> None:
     link = (
          db.query(EmployerCandidate)
          .filter(EmployerCandidate.employer_id == employer_id, EmployerCandidate.candidate_id == candidate_id)
          .first()
     )
     if link is None:
          raise NotFoundError("Candidate is not connected to this employer")
     db.delete(link)
     db.commit()


def list_employer_candidates(db: Session, employer_id: int) -> List[EmployerCandidate]:
     get_employer(db, employer_id)
     return (
          db.query(EmployerCandidate)
          .join(Candidate, Candidate.id == EmployerCandidate.candidate_id)
          .filter(EmployerCandidate.employer_id == employer_id, Candidate.is_deleted.is_(False))
          .order_by(EmployerCandidate.id)
          .all()
     )


def list_candidate_placements(db: Session, principal: Principal, candidate_id: int) -> List[EmployerCandidate]:
     candidate = (
          db.query(Candidate)
          .filter(Candidate.id == candidate_id, Candidate.is_deleted.is_(False))
          .first()
     )
     if candidate is None:
          raise NotFoundError("Candidate not found")
     ensure_candidate_access(principal, candidate)
     return (
          db.query(EmployerCandidate)
          .join(Employer, Employer.id == EmployerCandidate.employer_id)
          .filter(EmployerCandidate.candidate_id == candidate_id, Employer.is_deleted.is_(False))
          .order_by(EmployerCandidate.id)
          .all()
     )


def connect_agent(db: Session, employer_id: int, data) -> EmployerAgent:
     """
     Link an agent to an employer. Connecting an existing pair again
     only updates the link status (reactivates it by default).
     """
     employer = get_employer(db, employer_id)
     agent = get_agent_user(db, data.agent_id)

     link = (
          db.query(EmployerAgent)
          .filter(EmployerAgent.employer_id == employer.id, EmployerAgent.agent_id == agent.id)
          .first()
     )
     if link is None:
          link = EmployerAgent(employer_id=employer.id, agent_id=agent.id)
          db.add(link)
     link.status = data.status

     db.commit()
     db.refresh(link)
     logger.info("Agent %s connected to employer %s (%s)", agent.id, employer.id, link.status.value)
     return link


def disconnect_agent(db: Session, employer_id: int, agent_id: int) -> None:
     link = (
          db.query(EmployerAgent)
          .filter(EmployerAgent.employer_id == employer_id, EmployerAgent.agent_id == agent_id)
          .first()
     )
     if link is None:
          raise NotFoundError("Agent is not connected to this employer")
     db.delete(link)
     db.commit()
     logger.info("Agent %s disconnected from employer %s", agent_id, employer_id)


def list_employer_agents(db: Session, employer_id: int) -> List[EmployerAgent]:
     get_employer(db, employer_id)
     return (
          db.query(EmployerAgent)
          .filter(EmployerAgent.employer_id == employer_id)
          .order_by(EmployerAgent.created_at.desc(), EmployerAgent.id.desc())
          .all()
     )


def list_agent_employers(db: Session, principal: Principal, agent_id: int) -> List[EmployerAgent]:
     """Employers an agent is linked to. Agents may only list their own."""
     ensure_agent_self(principal, agent_id)
     return (
          db.query(EmployerAgent)
          .join(Employer, Employer.id == EmployerAgent.employer_id)
          .filter(EmployerAgent.agent_id == agent_id, Employer.is_deleted.is_(False))
          .order_by(EmployerAgent.created_at.desc(), EmployerAgent.id.desc())
          .all()
     )
