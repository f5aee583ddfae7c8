# dependencies.py
"""
Shared FastAPI dependencies: password hashing, JWT issue/verify and
capability checks.
"""
from datetime import datetime, timedelta
from typing import Callable

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from passlib.context import CryptContext

from config import settings
from models.user import User, UserRole
from permissions import Capability, Principal, ensure_capability

# Bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
     return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
     if not hashed:
          return False
     return pwd_context.verify(password, hashed)


def create_access_token(user: User) -> str:
     role = user.role.value if isinstance(user.role, UserRole) else user.role
     payload = {
          "id": user.id,
          "name": user.name,
          "email": user.email,
          "role": role,
          "exp": datetime.utcnow() + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
     }
     return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


# Token Auth Dependency
def verify_token(request: Request) -> Principal:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=401, detail="Access denied. No token provided.")
     token = auth.split(" ", 1)[1]
     try:
          payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
          return Principal(
               id=int(payload["id"]),
               role=UserRole(payload["role"]),
               name=payload.get("name", ""),
               email=payload.get("email", ""),
          )
     except (JWTError, KeyError, ValueError, TypeError):
          raise HTTPException(status_code=403, detail="Invalid token.")


def require_capability(capability: Capability) -> Callable[..., Principal]:
     """
     Build a dependency that authenticates the caller and checks one capability.

     Usage:
          @router.post("")
          def create(principal: Principal = Depends(require_capability(Capability.MANAGE_PACKAGES))):
               ...
     """
     def _dependency(principal: Principal = Depends(verify_token)) -> Principal:
          ensure_capability(principal, capability)
          return principal

     return _dependency


def get_app_url(request: Request) -> str:
     """
     Public base URL of this deployment, used for gateway callbacks and
     browser redirects. Falls back to the forwarded protocol and host headers.
     """
     app_url = settings.APP_URL
     if not app_url:
          protocol = request.headers.get("x-forwarded-proto") or request.url.scheme or "https"
          host = request.headers.get("host") or request.url.netloc
          app_url = f"{protocol}://{host}"
     return app_url.rstrip("/")
