# services/user_service.py
"""
User accounts: login, registration and role management.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dependencies import create_access_token, hash_password, verify_password
from models import Agent, User, UserRole
from permissions import Principal
from services.errors import ConflictError, NotFoundError, ServiceError, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class InvalidCredentials(ServiceError):
     status_code = 401
     default_message = "Invalid credentials"


def _active_users(db: Session):
     return db.query(User).filter(User.is_deleted.is_(False))


def authenticate(db: Session, email: str, password: str) -> Tuple[str, User]:
     """
     Check credentials and issue a JWT.

     Raises:
          InvalidCredentials: unknown email or wrong password (same message for both)
     """
     user = _active_users(db).filter(User.email == email.strip().lower()).first()
     if user is None or not verify_password(password, user.password):
          logger.warning("Failed login for %s", email)
          raise InvalidCredentials()
     return create_access_token(user), user


def get_user(db: Session, user_id: int) -> User:
     user = _active_users(db).filter(User.id == user_id).first()
     if user is None:
          raise NotFoundError("User not found")
     return user


def register_user(db: Session, data) -> User:
     """
     Create a back-office user. Agents also get an empty Agent profile row.

     Raises:
          ValidationError: password too short
          ConflictError: email already registered
     """
     if len(data.password) < MIN_PASSWORD_LENGTH:
          raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

     email = data.email.strip().lower()
     if db.query(User).filter(User.email == email).first() is not None:
          raise ConflictError("Email already exists")

     user = User(
          name=data.name.strip(),
          email=email,
          password=hash_password(data.password),
          role=data.role,
     )
     try:
          db.add(user)
          db.flush()
          if data.role == UserRole.AGENT:
               db.add(Agent(user_id=user.id))
          db.commit()
     except IntegrityError:
          db.rollback()
          raise ConflictError("Email already exists")

     db.refresh(user)
     logger.info("User %s registered with role %s", user.id, user.role.value)
     return user


def list_users(db: Session, role: Optional[UserRole] = None, page: int = 1, page_size: int = 20) -> Tuple[List[User], int]:
     query = _active_users(db)
     if role is not None:
          query = query.filter(User.role == role)
     total = query.count()
     users = query.order_by(User.id).offset((page - 1) * page_size).limit(page_size).all()
     return users, total


def change_role(db: Session, principal: Principal, user_id: int, new_role: UserRole) -> User:
     """Super admins cannot change their own role (no self-demotion lockout)."""
     if principal.id == user_id:
          raise ValidationError("You cannot change your own role")

     user = get_user(db, user_id)
     old_role = user.role
     user.role = new_role
     if new_role == UserRole.AGENT and user.agent_profile is None:
          db.add(Agent(user_id=user.id))
     db.commit()
     db.refresh(user)
     logger.info("User %s role changed %s -> %s by user %s", user_id, old_role.value, new_role.value, principal.id)
     return user
