# services/agent_service.py
"""
Agent listing, profile and profile updates.

An agent is a User with role=agent plus an optional Agent profile row.
"""
import logging
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Agent, Candidate, User, UserRole
from permissions import Principal, ensure_agent_self
from services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def _candidate_counts(db: Session) -> dict:
     rows = (
          db.query(Candidate.agent_id, func.count(Candidate.id))
          .filter(Candidate.is_deleted.is_(False), Candidate.agent_id.isnot(None))
          .group_by(Candidate.agent_id)
          .all()
     )
     return dict(rows)


def _summary(user: User, candidate_count: int) -> dict:
     profile = user.agent_profile
     return {
          "id": user.id,
          "name": user.name,
          "email": user.email,
          "phone": profile.phone if profile else None,
          "address": profile.address if profile else None,
          "commission_rate": profile.commission_rate if profile else 0,
          "candidate_count": candidate_count,
     }


def get_agent_user(db: Session, agent_id: int) -> User:
     user = (
          db.query(User)
          .filter(User.id == agent_id, User.role == UserRole.AGENT, User.is_deleted.is_(False))
          .first()
     )
     if user is None:
          raise NotFoundError("Agent not found")
     return user


def list_agents(db: Session, page: int = 1, page_size: int = 20) -> Tuple[List[dict], int]:
     query = db.query(User).filter(User.role == UserRole.AGENT, User.is_deleted.is_(False))
     total = query.count()
     users = query.order_by(User.name).offset((page - 1) * page_size).limit(page_size).all()
     counts = _candidate_counts(db)
     return [_summary(u, counts.get(u.id, 0)) for u in users], total


def get_agent_profile(db: Session, principal: Principal, agent_id: int) -> dict:
     """Agent summary plus its active candidates. Agents may only open their own profile."""
     ensure_agent_self(principal, agent_id)

     user = get_agent_user(db, agent_id)
     candidates = (
          db.query(Candidate)
          .filter(Candidate.agent_id == agent_id, Candidate.is_deleted.is_(False))
          .order_by(Candidate.created_at.desc(), Candidate.id.desc())
          .all()
     )
     return {"agent": _summary(user, len(candidates)), "candidates": candidates}


def update_agent(db: Session, agent_id: int, data) -> dict:
     """
     Update the user fields (name, email) and the profile fields in one commit.

     Raises:
          NotFoundError: agent missing
          ConflictError: email already used by another user
     """
     user = get_agent_user(db, agent_id)
     changes = data.model_dump(exclude_unset=True)

     if changes.get("name"):
          user.name = changes["name"]
     if changes.get("email"):
          user.email = changes["email"]

     profile = user.agent_profile
     if profile is None:
          profile = Agent(user_id=user.id)
          db.add(profile)
          user.agent_profile = profile
     for field in ("phone", "address", "commission_rate"):
          if field in changes and changes[field] is not None:
               setattr(profile, field, changes[field])

     try:
          db.commit()
     except IntegrityError:
          db.rollback()
          raise ConflictError("Email already exists")

     db.refresh(user)
     logger.info("Agent %s profile updated", agent_id)
     counts = _candidate_counts(db)
     return _summary(user, counts.get(user.id, 0))
