# services/dashboard_service.py
"""
Dashboard aggregates, read from the candidate balance cache.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Candidate, User, UserRole
from permissions import Capability, Principal, has_capability
from services.errors import PermissionDenied
from services.ledger_service import to_money


def _totals(query) -> dict:
     count, paid, due = query.with_entities(
          func.count(Candidate.id),
          func.coalesce(func.sum(Candidate.total_paid), 0),
          func.coalesce(func.sum(Candidate.due_amount), 0),
     ).one()
     return {
          "total_candidates": count,
          "total_collection": to_money(paid),
          "total_due": to_money(due),
     }


def get_stats(db: Session, principal: Principal) -> dict:
     """
     Agents: totals over their own candidates.
     Global roles: totals over all candidates, agent count and per-agent collection.
     """
     active = db.query(Candidate).filter(Candidate.is_deleted.is_(False))

     if has_capability(principal.role, Capability.VIEW_GLOBAL_DASHBOARD):
          stats = _totals(active)
          agents = (
               db.query(User)
               .filter(User.role == UserRole.AGENT, User.is_deleted.is_(False))
               .order_by(User.name)
               .all()
          )
          per_agent = dict(
               (agent_id, (count, paid))
               for agent_id, count, paid in active.with_entities(
                    Candidate.agent_id,
                    func.count(Candidate.id),
                    func.coalesce(func.sum(Candidate.total_paid), 0),
               ).group_by(Candidate.agent_id).all()
          )
          report = []
          for agent in agents:
               count, paid = per_agent.get(agent.id, (0, 0))
               report.append({
                    "id": agent.id,
                    "name": agent.name,
                    "candidate_count": count,
                    "collection": to_money(paid),
               })
          stats["total_agents"] = len(agents)
          stats["agent_wise_report"] = report
          return stats

     if has_capability(principal.role, Capability.VIEW_OWN_DASHBOARD):
          return _totals(active.filter(Candidate.agent_id == principal.id))

     raise PermissionDenied()
