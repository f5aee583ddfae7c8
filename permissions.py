# permissions.py
"""
Role-based access control.

Every role-gated operation is listed once in CAPABILITIES; routers declare the
capability they need through require_capability() instead of comparing role
strings inline. Record-level ownership (agents see only their own candidates)
is checked separately by can_access_candidate().
"""
import enum
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from models.user import UserRole
from services.errors import PermissionDenied

logger = logging.getLogger(__name__)


class Capability(str, enum.Enum):
     # Users
     MANAGE_USERS = "manage_users"

     # Candidates
     VIEW_CANDIDATES = "view_candidates"
     CREATE_CANDIDATE = "create_candidate"
     EDIT_CANDIDATE = "edit_candidate"
     EDIT_PACKAGE_AMOUNT = "edit_package_amount"
     DELETE_CANDIDATE = "delete_candidate"
     ASSIGN_AGENT = "assign_agent"
     UPLOAD_CANDIDATE_DOCUMENT = "upload_candidate_document"
     DELETE_CANDIDATE_DOCUMENT = "delete_candidate_document"

     # Agents
     VIEW_AGENTS = "view_agents"
     VIEW_AGENT_PROFILE = "view_agent_profile"
     EDIT_AGENT = "edit_agent"
     MANAGE_AGENT_DOCUMENTS = "manage_agent_documents"

     # Employers
     VIEW_EMPLOYERS = "view_employers"
     MANAGE_EMPLOYERS = "manage_employers"

     # Packages
     MANAGE_PACKAGES = "manage_packages"

     # Ledger
     RECORD_PAYMENT = "record_payment"
     VIEW_PAYMENTS = "view_payments"
     INITIATE_GATEWAY_PAYMENT = "initiate_gateway_payment"
     RECONCILE_LEDGER = "reconcile_ledger"

     # Reports
     VIEW_GLOBAL_DASHBOARD = "view_global_dashboard"
     VIEW_OWN_DASHBOARD = "view_own_dashboard"


_ALL = frozenset(Capability)

CAPABILITIES: Dict[UserRole, FrozenSet[Capability]] = {
     UserRole.SUPER_ADMIN: _ALL - {Capability.VIEW_OWN_DASHBOARD},
     UserRole.ADMIN: frozenset({
          Capability.VIEW_CANDIDATES,
          Capability.CREATE_CANDIDATE,
          Capability.EDIT_CANDIDATE,
          Capability.EDIT_PACKAGE_AMOUNT,
          Capability.DELETE_CANDIDATE,
          Capability.ASSIGN_AGENT,
          Capability.UPLOAD_CANDIDATE_DOCUMENT,
          Capability.DELETE_CANDIDATE_DOCUMENT,
          Capability.VIEW_AGENTS,
          Capability.VIEW_AGENT_PROFILE,
          Capability.EDIT_AGENT,
          Capability.MANAGE_AGENT_DOCUMENTS,
          Capability.VIEW_EMPLOYERS,
          Capability.MANAGE_EMPLOYERS,
          Capability.RECORD_PAYMENT,
          Capability.VIEW_PAYMENTS,
          Capability.INITIATE_GATEWAY_PAYMENT,
          Capability.VIEW_GLOBAL_DASHBOARD,
     }),
     UserRole.ACCOUNTANT: frozenset({
          Capability.VIEW_CANDIDATES,
          Capability.VIEW_EMPLOYERS,
          Capability.RECORD_PAYMENT,
          Capability.VIEW_PAYMENTS,
          Capability.INITIATE_GATEWAY_PAYMENT,
          Capability.RECONCILE_LEDGER,
          Capability.VIEW_GLOBAL_DASHBOARD,
     }),
     UserRole.AGENT: frozenset({
          Capability.VIEW_CANDIDATES,
          Capability.DELETE_CANDIDATE,
          Capability.UPLOAD_CANDIDATE_DOCUMENT,
          Capability.VIEW_AGENT_PROFILE,
          Capability.MANAGE_AGENT_DOCUMENTS,
          Capability.VIEW_EMPLOYERS,
          Capability.RECORD_PAYMENT,
          Capability.VIEW_PAYMENTS,
          Capability.INITIATE_GATEWAY_PAYMENT,
          Capability.VIEW_OWN_DASHBOARD,
     }),
     UserRole.DATA_ENTRY: frozenset({
          Capability.VIEW_CANDIDATES,
          Capability.CREATE_CANDIDATE,
          Capability.EDIT_CANDIDATE,
          Capability.VIEW_AGENTS,
          Capability.VIEW_EMPLOYERS,
     }),
}


@dataclass(frozen=True)
class Principal:
     """The authenticated caller, decoded from the bearer token."""
     id: int
     role: UserRole
     name: str = ""
     email: str = ""

     @property
     def is_agent(self) -> bool:
          return self.role == UserRole.AGENT


def has_capability(role: Optional[UserRole], capability: Capability) -> bool:
     if role is None:
          return False
     return capability in CAPABILITIES.get(role, frozenset())


def can_access_candidate(principal: Principal, candidate) -> bool:
     """Agents may only touch candidates they own; every other role sees all."""
     if principal.is_agent:
          return candidate.agent_id is not None and candidate.agent_id == principal.id
     return True


def ensure_capability(principal: Principal, capability: Capability) -> None:
     if not has_capability(principal.role, capability):
          logger.warning("Forbidden: user %s (%s) lacks %s", principal.id, principal.role.value, capability.value)
          raise PermissionDenied()


def ensure_candidate_access(principal: Principal, candidate) -> None:
     if not can_access_candidate(principal, candidate):
          logger.warning(
               "Forbidden: user %s (%s) attempted access to candidate %s",
               principal.id, principal.role.value, candidate.id,
          )
          raise PermissionDenied()


def ensure_agent_self(principal: Principal, agent_id: int) -> None:
     """Agents may only act on their own agent records; other roles pass."""
     if principal.is_agent and principal.id != agent_id:
          logger.warning("Forbidden: agent %s attempted access to agent %s", principal.id, agent_id)
          raise PermissionDenied()
